"""Публикация уведомлений: запись в историю и рассылка."""

import logging
from typing import Iterable, Optional

from aiogram import Bot

from infrastructure.database.models.notification import Notification
from infrastructure.database.repo.requests import RequestsRepo
from tgbot.config import BroadcastConfig
from tgbot.misc.departments import ordered_departments
from tgbot.services.broadcaster import DeliveryResult, dispatch

logger = logging.getLogger(__name__)


async def publish_notification(
    bot: Bot,
    repo: RequestsRepo,
    message: str,
    departments: Iterable[str],
    created_by: Optional[str] = None,
    settings: Optional[BroadcastConfig] = None,
) -> tuple[Notification, DeliveryResult]:
    """Сохраняет уведомление и рассылает его пользователям департаментов.

    Запись и рассылка не связаны транзакцией: сохраненное уведомление
    остается в истории, даже если рассылка прервалась.

    Args:
        bot: Экземпляр бота
        repo: Репозиторий БД
        message: Текст уведомления
        departments: Департаменты-получатели
        created_by: Идентификатор автора в telegram_users
        settings: Настройки рассылки

    Returns:
        Сохраненное уведомление и итог рассылки
    """
    settings = settings or BroadcastConfig()
    targets = ordered_departments(departments)

    notification = await repo.notification.create_notification(
        message=message,
        departments=targets,
        created_by=created_by,
    )

    result = await dispatch(
        bot,
        repo,
        message,
        targets,
        concurrency=settings.concurrency,
        timeout=settings.send_timeout,
    )

    logger.info(
        f"[Рассылка] Уведомление {notification.id} опубликовано: "
        f"отправлено {result.sent}, ошибок {result.failed}"
    )
    return notification, result
