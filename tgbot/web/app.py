"""Сборка aiohttp приложения с HTTP API."""

import logging
from typing import Optional

from aiogram import Bot
from aiohttp import web
from sqlalchemy.ext.asyncio import async_sessionmaker

from tgbot.config import BroadcastConfig
from tgbot.web.keys import bot_key, broadcast_config_key, session_pool_key
from tgbot.web.routes import routes

logger = logging.getLogger(__name__)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Непредвиденные ошибки превращаются в 500 без подробностей."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception(f"[API] Ошибка обработки {request.method} {request.path}")
        return web.json_response({"error": "Internal server error"}, status=500)


def setup_api(
    app: web.Application,
    bot: Bot,
    session_pool: async_sessionmaker,
    settings: Optional[BroadcastConfig] = None,
) -> web.Application:
    """Подключает HTTP API к существующему приложению (например, к серверу вебхука).

    Args:
        app: aiohttp приложение
        bot: Экземпляр бота для рассылок
        session_pool: Пул сессий БД
        settings: Настройки рассылок

    Returns:
        То же приложение
    """
    app[bot_key] = bot
    app[session_pool_key] = session_pool
    app[broadcast_config_key] = settings or BroadcastConfig()
    app.middlewares.append(error_middleware)
    app.add_routes(routes)
    return app


def create_api_app(
    bot: Bot,
    session_pool: async_sessionmaker,
    settings: Optional[BroadcastConfig] = None,
) -> web.Application:
    """Создает отдельное приложение с HTTP API."""
    return setup_api(web.Application(), bot, session_pool, settings)
