import logging
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from infrastructure.database.models.telegram_user import TelegramUser
from infrastructure.database.repo.base import BaseRepo
from tgbot.misc.departments import (
    DEPARTMENTS,
    is_admin_department,
    is_valid_department,
)
from tgbot.misc.errors import DependencyError, ValidationError

logger = logging.getLogger(__name__)


class TelegramUserRepo(BaseRepo):
    async def get_user(self, telegram_id: int) -> Optional[TelegramUser]:
        """
        Поиск пользователя в БД по идентификатору Telegram

        Args:
            telegram_id: Уникальный идентификатор пользователя Telegram

        Returns:
            Объект TelegramUser или ничего
        """
        query = select(TelegramUser).where(TelegramUser.telegram_id == telegram_id)

        try:
            result = await self.session.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка получения пользователя {telegram_id}: {e}")
            raise DependencyError() from e

    async def create_user(
        self,
        telegram_id: int,
        department: str,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> TelegramUser:
        """
        Регистрация нового пользователя с выбранным департаментом

        Args:
            telegram_id: Идентификатор пользователя Telegram
            department: Департамент пользователя
            username: Никнейм пользователя Telegram
            first_name: Имя пользователя Telegram
            last_name: Фамилия пользователя Telegram

        Returns:
            Созданный объект TelegramUser
        """
        if not is_valid_department(department):
            raise ValidationError("Ошибка выбора отдела")

        user = TelegramUser(
            telegram_id=telegram_id,
            username=username,
            first_name=first_name,
            last_name=last_name,
            department=department,
            is_admin=is_admin_department(department),
        )

        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка создания пользователя {telegram_id}: {e}")
            await self.session.rollback()
            raise DependencyError() from e

        logger.info(
            f"[БД] Зарегистрирован пользователь {telegram_id} в департаменте '{department}'"
        )
        return user

    async def update_department(
        self, telegram_id: int, department: str
    ) -> Optional[TelegramUser]:
        """
        Смена департамента пользователя. Права администратора пересчитываются.

        Args:
            telegram_id: Идентификатор пользователя Telegram
            department: Новый департамент

        Returns:
            Обновленный объект TelegramUser или None, если пользователь не найден
        """
        if not is_valid_department(department):
            raise ValidationError("Ошибка выбора отдела")

        user = await self.get_user(telegram_id)
        if not user:
            return None

        user.department = department
        user.is_admin = is_admin_department(department)

        try:
            await self.session.commit()
            await self.session.refresh(user)
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка смены департамента {telegram_id}: {e}")
            await self.session.rollback()
            raise DependencyError() from e

        logger.info(
            f"[БД] Пользователь {telegram_id} сменил департамент на '{department}'"
        )
        return user

    async def set_department(
        self,
        telegram_id: int,
        department: str,
        username: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> TelegramUser:
        """
        Назначает департамент существующему пользователю или регистрирует нового

        Returns:
            Актуальный объект TelegramUser
        """
        user = await self.update_department(telegram_id, department)
        if user:
            return user

        return await self.create_user(
            telegram_id=telegram_id,
            department=department,
            username=username,
            first_name=first_name,
            last_name=last_name,
        )

    async def get_users_by_departments(
        self, departments: Sequence[str]
    ) -> Sequence[TelegramUser]:
        """
        Получить всех пользователей выбранных департаментов

        Args:
            departments: Список департаментов

        Returns:
            Список пользователей, пустой для пустого списка департаментов
        """
        if not departments:
            return []

        query = select(TelegramUser).where(
            TelegramUser.department.in_(list(departments))
        )

        try:
            result = await self.session.execute(query)
            return result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка получения пользователей департаментов: {e}")
            raise DependencyError() from e

    async def get_department_stats(self) -> list[dict]:
        """
        Количество зарегистрированных пользователей по департаментам

        Returns:
            Список словарей {department, count} в порядке справочника,
            департаменты без пользователей не попадают в список
        """
        query = (
            select(TelegramUser.department, func.count(TelegramUser.id))
            .where(TelegramUser.department.is_not(None))
            .group_by(TelegramUser.department)
        )

        try:
            result = await self.session.execute(query)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"[БД] Ошибка получения статистики департаментов: {e}")
            raise DependencyError() from e

        counts = {department: count for department, count in rows}
        stats = [
            {"department": department, "count": counts.pop(department)}
            for department in DEPARTMENTS
            if department in counts
        ]
        # Департаменты вне справочника (старые записи) идут в конце
        stats.extend(
            {"department": department, "count": count}
            for department, count in sorted(counts.items())
        )
        return stats
