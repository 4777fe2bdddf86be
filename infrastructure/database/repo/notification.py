import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from infrastructure.database.models.notification import Notification
from infrastructure.database.repo.base import BaseRepo
from tgbot.misc.errors import DependencyError

logger = logging.getLogger(__name__)


class NotificationRepo(BaseRepo):
    async def create_notification(
        self,
        message: str,
        departments: list[str],
        created_by: Optional[str] = None,
    ) -> Notification:
        """
        Сохранение опубликованного уведомления

        Args:
            message: Текст уведомления
            departments: Департаменты-получатели
            created_by: Идентификатор автора в telegram_users

        Returns:
            Созданный объект Notification
        """
        notification = Notification(
            message=message,
            departments=list(departments),
            created_by=created_by,
        )

        try:
            self.session.add(notification)
            await self.session.commit()
            await self.session.refresh(notification)
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка создания уведомления: {e}")
            await self.session.rollback()
            raise DependencyError() from e

        logger.info(f"[БД] Создано уведомление ID: {notification.id}")
        return notification

    async def get_notifications(self, limit: int = 50) -> Sequence[Notification]:
        """
        История уведомлений, сначала новые

        Args:
            limit: Максимальное количество записей

        Returns:
            Список уведомлений
        """
        query = (
            select(Notification)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )

        try:
            result = await self.session.execute(query)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка получения истории уведомлений: {e}")
            raise DependencyError() from e
