import asyncio
import logging
from datetime import timedelta

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.types import BotCommand, BotCommandScopeAllPrivateChats
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from aiohttp import web
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.setup import create_engine, create_session_pool
from tgbot.config import Config, load_config
from tgbot.handlers import routers_list
from tgbot.handlers.errors import register_error_handlers
from tgbot.middlewares.DatabaseMiddleware import DatabaseMiddleware
from tgbot.services.composer import PostComposer
from tgbot.services.logger import setup_logging
from tgbot.services.schedulers.scheduler import SchedulerManager
from tgbot.services.sessions import SessionStore
from tgbot.web.app import create_api_app, setup_api

logger = logging.getLogger(__name__)

ALLOWED_UPDATES = ["message", "callback_query"]


def register_middlewares(
    dp: Dispatcher, session_pool: async_sessionmaker[AsyncSession]
) -> None:
    """Установка middleware для определенных ивентов.

    Args:
        dp: Диспетчер ивентов
        session_pool: Пул сессий с базой данных
    """
    database_middleware = DatabaseMiddleware(session_pool=session_pool)

    dp.message.outer_middleware(database_middleware)
    dp.callback_query.outer_middleware(database_middleware)


async def on_startup_webhook(bot: Bot, config: Config) -> None:
    """Настройка webhook при запуске бота.

    Args:
        bot: Экземпляр бота
        config: Конфигурация приложения
    """
    webhook_url = f"https://{config.tg_bot.webhook_domain}{config.tg_bot.webhook_path}"
    logger.info(f"[Вебхук] Устанавливаем вебхук: {webhook_url}")

    await bot.set_webhook(
        url=webhook_url,
        allowed_updates=ALLOWED_UPDATES,
        drop_pending_updates=True,
        secret_token=config.tg_bot.webhook_secret,
    )
    logger.info("[Вебхук] Вебхук установлен")


async def on_shutdown_webhook(bot: Bot) -> None:
    """Удаление webhook при остановке бота.

    Args:
        bot: Экземпляр бота
    """
    logger.info("[Вебхук] Удаляем вебхук...")
    await bot.delete_webhook()
    logger.info("[Вебхук] Вебхук удален")


async def start_site(app: web.Application, host: str, port: int) -> web.AppRunner:
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    return runner


async def main() -> None:
    """Основная функция запуска бота."""
    # Без BOT_TOKEN запуск невозможен: load_config падает с ConfigError
    bot_config = load_config(".env")
    setup_logging(bot_config.log_level)

    bot = Bot(
        token=bot_config.tg_bot.token,
        default=DefaultBotProperties(parse_mode="HTML", link_preview_is_disabled=True),
    )

    await bot.set_my_commands(
        commands=[
            BotCommand(command="start", description="Главное меню"),
        ],
        scope=BotCommandScopeAllPrivateChats(),
    )

    engine = create_engine(bot_config.db)
    session_pool = create_session_pool(engine)

    session_store = SessionStore(ttl=timedelta(minutes=bot_config.broadcast.session_ttl))

    dp = Dispatcher()
    dp["config"] = bot_config
    dp["composer"] = PostComposer(session_store)

    dp.include_routers(*routers_list)
    register_middlewares(dp, session_pool)
    register_error_handlers(dp)

    scheduler_manager = SchedulerManager(session_store, bot_config.broadcast)
    scheduler_manager.setup_jobs()
    scheduler_manager.start()

    runner = None
    try:
        if bot_config.tg_bot.use_webhook:
            logger.info("[Режим запуска] Бот запущен в режиме webhooks")
            await on_startup_webhook(bot, bot_config)

            # Вебхук и HTTP API на одном сервере
            app = web.Application()
            webhook_handler = SimpleRequestHandler(
                dispatcher=dp,
                bot=bot,
                secret_token=bot_config.tg_bot.webhook_secret,
            )
            webhook_handler.register(app, path=bot_config.tg_bot.webhook_path)
            setup_application(app, dp, bot=bot)
            setup_api(app, bot, session_pool, bot_config.broadcast)

            runner = await start_site(app, "0.0.0.0", bot_config.tg_bot.webhook_port)
            logger.info(
                f"[Вебхук] Сервер запущен на порту {bot_config.tg_bot.webhook_port}"
            )

            await asyncio.Event().wait()

        else:
            api_app = create_api_app(bot, session_pool, bot_config.broadcast)
            runner = await start_site(api_app, bot_config.api.host, bot_config.api.port)
            logger.info(
                f"[API] Сервер запущен на {bot_config.api.host}:{bot_config.api.port}"
            )

            logger.info("[Режим запуска] Бот запущен в режиме polling")
            await dp.start_polling(bot, allowed_updates=ALLOWED_UPDATES)
    finally:
        scheduler_manager.shutdown()
        if runner is not None:
            await runner.cleanup()
        if bot_config.tg_bot.use_webhook:
            await on_shutdown_webhook(bot)
        await engine.dispose()
        await bot.session.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        logging.error("Bot was interrupted by the user!")
