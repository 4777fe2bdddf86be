from aiogram import Bot
from aiohttp import web
from sqlalchemy.ext.asyncio import async_sessionmaker

from tgbot.config import BroadcastConfig

bot_key = web.AppKey("bot", Bot)
session_pool_key = web.AppKey("session_pool", async_sessionmaker)
broadcast_config_key = web.AppKey("broadcast_config", BroadcastConfig)
