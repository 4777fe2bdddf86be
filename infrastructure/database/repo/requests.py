from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from infrastructure.database.repo.notification import NotificationRepo
from infrastructure.database.repo.telegram_user import TelegramUserRepo


@dataclass
class RequestsRepo:
    """
    Repository for handling database operations. This class holds all the repositories for the database models.

    You can add more repositories as properties to this class, so they will be easily accessible.
    """

    session: AsyncSession

    @property
    def telegram_user(self) -> TelegramUserRepo:
        """
        The TelegramUserRepo repository sessions are required to manage bot users and departments.
        """
        return TelegramUserRepo(self.session)

    @property
    def notification(self) -> NotificationRepo:
        """
        The NotificationRepo repository sessions are required to manage published notifications.
        """
        return NotificationRepo(self.session)
