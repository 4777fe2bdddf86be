"""Middleware для доступа к базе данных."""

import logging
from typing import Any, Awaitable, Callable, Dict, Union

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.repo.requests import RequestsRepo

logger = logging.getLogger(__name__)


class DatabaseMiddleware(BaseMiddleware):
    """Middleware, отвечающий за подключение к базе данных и управление сессиями.

    Предоставляет репозиторий и пользователя бота обработчикам
    """

    def __init__(self, session_pool: async_sessionmaker[AsyncSession]) -> None:
        """Инициализация миддлвари для связи с БД."""
        self.session_pool = session_pool

    async def __call__(
        self,
        handler: Callable[
            [Union[Message, CallbackQuery], Dict[str, Any]], Awaitable[Any]
        ],
        event: Union[Message, CallbackQuery],
        data: Dict[str, Any],
    ) -> Any:
        """Обработка запросов к миддлвари.

        Ошибки БД (DependencyError) не перехватываются и уходят
        в обработчики ошибок диспетчера.

        Args:
            handler: Обработчик сообщений и CallbackQuery от Telegram
            event: Событие Telegram
            data: Данные в памяти

        Returns:
            Результат обработчика с заполненными repo и user
        """
        from_user = getattr(event, "from_user", None)

        async with self.session_pool() as session:
            repo = RequestsRepo(session)
            data["repo"] = repo
            data["user"] = (
                await repo.telegram_user.get_user(telegram_id=from_user.id)
                if from_user
                else None
            )

            return await handler(event, data)
