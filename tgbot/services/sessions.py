"""Хранилище сессий создания постов.

Сессии живут только в памяти процесса и теряются при перезапуске.
Переходы одного пользователя сериализуются его личной блокировкой,
брошенные сессии удаляются по таймауту.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import AsyncIterator, Optional

from tgbot.misc.departments import DEPARTMENTS, ordered_departments

logger = logging.getLogger(__name__)


class PostStep(str, Enum):
    """Шаги создания поста"""

    AWAITING_TEXT = "awaiting_text"
    AWAITING_DEPARTMENTS = "awaiting_departments"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PostSession:
    """Состояние создания поста одного администратора"""

    step: PostStep = PostStep.AWAITING_TEXT
    post_text: Optional[str] = None
    selected_departments: set[str] = field(default_factory=set)
    touched_at: datetime = field(default_factory=_utcnow)

    @property
    def all_selected(self) -> bool:
        return len(self.selected_departments) == len(DEPARTMENTS)

    @property
    def departments(self) -> list[str]:
        """Выбранные департаменты в порядке справочника"""
        return ordered_departments(self.selected_departments)

    def copy(self) -> "PostSession":
        return replace(self, selected_departments=set(self.selected_departments))


class SessionStore:
    """In-memory хранилище сессий с блокировкой на пользователя.

    Args:
        ttl: Время простоя, после которого сессия считается брошенной.
            None отключает очистку.
    """

    def __init__(self, ttl: Optional[timedelta] = None):
        self.ttl = ttl
        self._sessions: dict[int, PostSession] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._sessions

    def get(self, user_id: int) -> Optional[PostSession]:
        return self._sessions.get(user_id)

    def put(self, user_id: int, session: PostSession) -> None:
        session.touched_at = _utcnow()
        self._sessions[user_id] = session

    def delete(self, user_id: int) -> Optional[PostSession]:
        return self._sessions.pop(user_id, None)

    def lock(self, user_id: int) -> asyncio.Lock:
        """Блокировка для последовательной обработки событий пользователя.

        Использование: ``async with store.lock(user_id): ...``
        """
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def transaction(self, user_id: int) -> AsyncIterator[None]:
        """Переход состояния пользователя под его блокировкой.

        Если внутри блока возникло исключение (например, не удалось
        обновить сообщение), сессия возвращается к состоянию до перехода.
        """
        async with self.lock(user_id):
            before = self.get(user_id)
            snapshot = before.copy() if before else None
            try:
                yield
            except BaseException:
                if snapshot is None:
                    self.delete(user_id)
                else:
                    self._sessions[user_id] = snapshot
                raise

    def reap(self, now: Optional[datetime] = None) -> int:
        """Удаляет брошенные сессии.

        Сессии, чья блокировка сейчас захвачена, не трогаются.

        Args:
            now: Текущее время (UTC), по умолчанию сейчас

        Returns:
            Кол-во удаленных сессий
        """
        if self.ttl is None:
            return 0

        now = now or _utcnow()
        expired = [
            user_id
            for user_id, session in self._sessions.items()
            if now - session.touched_at > self.ttl
            and not self.lock(user_id).locked()
        ]
        for user_id in expired:
            del self._sessions[user_id]

        # Освобождаем блокировки пользователей без активной сессии
        for user_id in list(self._locks):
            if user_id not in self._sessions and not self._locks[user_id].locked():
                del self._locks[user_id]

        if expired:
            logger.info(f"[Сессии] Удалено брошенных сессий: {len(expired)}")
        return len(expired)
