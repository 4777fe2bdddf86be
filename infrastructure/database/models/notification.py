import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, utcnow


class Notification(Base):
    """Модель, представляющая опубликованное уведомление в БД.

    Attributes:
        id (Mapped[str]): Уникальный идентификатор уведомления (UUID).
        message (Mapped[str]): Текст уведомления.
        departments (Mapped[List[str]]): Департаменты, которым адресовано уведомление.
        created_by (Mapped[Optional[str]]): Идентификатор автора в telegram_users.
        created_at (Mapped[datetime]): Время создания уведомления (UTC, с микросекундами).
    """

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    departments: Mapped[List[str]] = mapped_column(JSON, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("telegram_users.id"), nullable=True
    )
    # С микросекундами: порядок истории внутри одной секунды
    created_at: Mapped[datetime] = mapped_column(
        DateTime().with_variant(mysql.DATETIME(fsp=6), "mysql", "mariadb"),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self):
        return f"<Notification {self.id} departments={len(self.departments or [])} created_at={self.created_at}>"

    def to_dict(self) -> dict:
        """Преобразует уведомление в словарь для ответа API."""
        return {
            "id": self.id,
            "message": self.message,
            "departments": list(self.departments or []),
            "createdBy": self.created_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
