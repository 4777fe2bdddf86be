import uuid
from typing import Optional

from sqlalchemy import BIGINT, Boolean, String, Unicode, false
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class TelegramUser(Base, TimestampMixin):
    """
    Модель, представляющая пользователя бота в БД

    Attributes:
        id (Mapped[str]): Уникальный идентификатор пользователя (UUID).
        telegram_id (Mapped[int]): Идентификатор пользователя в Telegram.
        username (Mapped[Optional[str]]): username пользователя в Telegram.
        first_name (Mapped[Optional[str]]): Имя пользователя в Telegram.
        last_name (Mapped[Optional[str]]): Фамилия пользователя в Telegram.
        department (Mapped[Optional[str]]): Департамент пользователя, пуст до выбора.
        is_admin (Mapped[bool]): Права администратора, определяются департаментом.
        created_at (Mapped[datetime]): Время регистрации.
    """

    __tablename__ = "telegram_users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    telegram_id: Mapped[int] = mapped_column(BIGINT, unique=True, nullable=False)
    username: Mapped[Optional[str]] = mapped_column(Unicode(255), nullable=True)
    first_name: Mapped[Optional[str]] = mapped_column(Unicode(255), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(Unicode(255), nullable=True)
    department: Mapped[Optional[str]] = mapped_column(
        Unicode(255), nullable=True, index=True
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    def __repr__(self):
        return f"<TelegramUser {self.id} {self.telegram_id} {self.username} {self.department} admin={self.is_admin}>"
