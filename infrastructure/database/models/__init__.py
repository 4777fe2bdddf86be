from .base import Base
from .notification import Notification
from .telegram_user import TelegramUser

__all__ = ["Base", "Notification", "TelegramUser"]
