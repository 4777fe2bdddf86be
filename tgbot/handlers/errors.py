"""Обработчики ошибок диспетчера."""

import logging

from aiogram import Dispatcher
from aiogram.exceptions import TelegramAPIError
from aiogram.filters import ExceptionTypeFilter
from aiogram.types import ErrorEvent

from tgbot.misc.errors import BotError, DependencyError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_TEXT = "Произошла ошибка. Попробуйте снова."


async def _reply(error: ErrorEvent, text: str, alert: bool = False) -> None:
    """Ответ пользователю на событие, вызвавшее ошибку.

    Args:
        error: Событие ошибки с информацией об исключении и обновлении
        text: Текст ответа
        alert: Показать ответ на нажатие кнопки всплывающим окном
    """
    try:
        if error.update.callback_query:
            await error.update.callback_query.answer(text, show_alert=alert)
        elif error.update.message:
            await error.update.message.answer(text)
    except TelegramAPIError as e:
        logger.error(f"[Ошибки] Не удалось ответить пользователю: {e}")


async def bot_error(error: ErrorEvent) -> None:
    """Ожидаемые ошибки: валидация, права, истекшая сессия, недоступная БД."""
    exception: BotError = error.exception

    if isinstance(exception, DependencyError):
        logger.error(f"[Ошибки] Хранилище недоступно: {exception.__cause__!r}")
    else:
        logger.info(f"[Ошибки] {type(exception).__name__}: {exception.text}")

    await _reply(error, exception.text, exception.alert)


async def unexpected_error(error: ErrorEvent) -> None:
    """Все прочие ошибки обработчиков."""
    logger.error(
        "[Ошибки] Необработанная ошибка: %s",
        error.exception,
        exc_info=error.exception,
    )
    await _reply(error, UNEXPECTED_ERROR_TEXT)


def register_error_handlers(dp: Dispatcher) -> None:
    """Регистрация обработчиков ошибок. Порядок важен: первым срабатывает подходящий."""
    dp.errors.register(bot_error, ExceptionTypeFilter(BotError))
    dp.errors.register(unexpected_error)
