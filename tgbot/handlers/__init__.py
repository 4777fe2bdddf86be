"""Импортируем все роутеры."""

from tgbot.handlers.admin.post import post_router
from tgbot.handlers.start import start_router

routers_list = [
    start_router,
    post_router,
]

__all__ = [
    "routers_list",
]
