"""Сервис рассылок."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from aiogram import Bot, exceptions

from infrastructure.database.repo.requests import RequestsRepo
from tgbot.misc.departments import ordered_departments
from tgbot.misc.errors import DeliveryError

logger = logging.getLogger(__name__)

NOTIFICATION_TEMPLATE = "📢 Новое уведомление\n\n{message}"

# 20 сообщений в секунду (Лимит: 30 сообщений в секунду)
MESSAGE_INTERVAL = 0.05


@dataclass
class DeliveryResult:
    """Итог одной рассылки.

    Attributes:
        sent: Кол-во успешно доставленных сообщений
        failed: Кол-во неудачных попыток
    """

    sent: int = 0
    failed: int = 0

    @property
    def total(self) -> int:
        return self.sent + self.failed


async def deliver(
    bot: Bot,
    user_id: Union[int, str],
    text: str,
    timeout: Optional[float] = None,
) -> None:
    """Отправка сообщения одному получателю.

    Текст уходит без разметки: parse_mode бота по умолчанию (HTML) сбрасывается.

    Args:
        bot: Экземпляр бота
        user_id: Идентификатор пользователя Telegram
        text: Текст сообщения
        timeout: Таймаут отправки в секундах

    Raises:
        DeliveryError: Telegram отклонил сообщение или истек таймаут
    """
    try:
        await asyncio.wait_for(
            bot.send_message(user_id, text, parse_mode=None),
            timeout=timeout,
        )
    except exceptions.TelegramBadRequest as e:
        raise DeliveryError(user_id, f"Bad Request: {e.message}") from e
    except exceptions.TelegramForbiddenError as e:
        raise DeliveryError(user_id, "got TelegramForbiddenError") from e
    except exceptions.TelegramRetryAfter as e:
        raise DeliveryError(
            user_id, f"Flood limit is exceeded, retry after {e.retry_after} seconds"
        ) from e
    except exceptions.TelegramAPIError as e:
        raise DeliveryError(user_id, str(e)) from e
    except asyncio.TimeoutError as e:
        raise DeliveryError(user_id, f"timed out after {timeout} seconds") from e


async def send_message(
    bot: Bot,
    user_id: Union[int, str],
    text: str,
    timeout: Optional[float] = None,
) -> bool:
    """Безопасная отправка сообщения.

    Returns:
        True если сообщение отправлено успешно, иначе False
    """
    try:
        await deliver(bot, user_id, text, timeout)
    except DeliveryError as e:
        logger.error(f"Target [ID:{e.telegram_id}]: {e.reason}")
        return False

    logger.debug(f"Target [ID:{user_id}]: success")
    return True


async def broadcast(
    bot: Bot,
    users: Sequence[Union[str, int]],
    text: str,
    concurrency: int = 10,
    timeout: Optional[float] = 10.0,
    interval: float = MESSAGE_INTERVAL,
) -> DeliveryResult:
    """Рассылка с ограниченным числом одновременных отправок.

    Ошибка доставки одному получателю не прерывает рассылку остальным.

    Args:
        bot: Экземпляр бота
        users: Список пользователей с идентификатором Telegram
        text: Текст сообщения
        concurrency: Максимум одновременных отправок
        timeout: Таймаут одной отправки в секундах
        interval: Средний интервал между отправками в секундах

    Returns:
        Итог рассылки с кол-вом успешных и неудачных отправок
    """
    semaphore = asyncio.Semaphore(max(concurrency, 1))
    slot_interval = interval * max(concurrency, 1)
    loop = asyncio.get_running_loop()

    async def _send(user_id: Union[str, int]) -> bool:
        async with semaphore:
            started = loop.time()
            success = await send_message(bot, user_id, text, timeout=timeout)
            pause = slot_interval - (loop.time() - started)
            if pause > 0:
                await asyncio.sleep(pause)
            return success

    outcomes = await asyncio.gather(
        *(_send(user_id) for user_id in users), return_exceptions=True
    )

    result = DeliveryResult()
    for user_id, outcome in zip(users, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"Target [ID:{user_id}]: unexpected error: {outcome!r}")
            result.failed += 1
        elif outcome:
            result.sent += 1
        else:
            result.failed += 1

    logger.info(
        f"Broadcast completed: {result.sent} successful, {result.failed} failed."
    )
    return result


async def dispatch(
    bot: Bot,
    repo: RequestsRepo,
    message: str,
    departments: Iterable[str],
    concurrency: int = 10,
    timeout: Optional[float] = 10.0,
    interval: float = MESSAGE_INTERVAL,
) -> DeliveryResult:
    """Рассылка уведомления всем пользователям выбранных департаментов.

    Args:
        bot: Экземпляр бота
        repo: Репозиторий БД
        message: Текст уведомления
        departments: Департаменты-получатели
        concurrency: Максимум одновременных отправок
        timeout: Таймаут одной отправки в секундах
        interval: Средний интервал между отправками в секундах

    Returns:
        Итог рассылки

    Raises:
        DependencyError: Не удалось получить список получателей
    """
    targets = ordered_departments(departments)
    users = await repo.telegram_user.get_users_by_departments(targets)

    # У пользователя один департамент, но повторная отправка недопустима
    recipients = list(dict.fromkeys(user.telegram_id for user in users))
    logger.info(
        f"[Рассылка] Получателей: {len(recipients)}, департаменты: {', '.join(targets)}"
    )

    return await broadcast(
        bot,
        recipients,
        NOTIFICATION_TEMPLATE.format(message=message),
        concurrency=concurrency,
        timeout=timeout,
        interval=interval,
    )
