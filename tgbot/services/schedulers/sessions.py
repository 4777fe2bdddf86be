"""Очистка брошенных сессий создания постов."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tgbot.services.sessions import SessionStore

logger = logging.getLogger(__name__)

JOB_ID = "reap_post_sessions"
JOB_NAME = "Очистка брошенных сессий"


class SessionsScheduler:
    """Планировщик очистки сессий

    Удаляет сессии создания постов, которые администратор бросил
    и не трогал дольше времени жизни сессии.
    """

    def __init__(self, store: SessionStore, interval_minutes: int = 5):
        self.store = store
        self.interval_minutes = interval_minutes

    def setup_jobs(self, scheduler: AsyncIOScheduler) -> None:
        """Настройка задачи очистки

        Args:
            scheduler: Экземпляр AsyncIOScheduler
        """
        scheduler.add_job(
            func=self._reap_sessions_job,
            trigger="interval",
            id=JOB_ID,
            name=JOB_NAME,
            minutes=self.interval_minutes,
        )
        logger.info(
            f"[Сессии] Задача '{JOB_NAME}' настроена, период {self.interval_minutes} мин."
        )

    async def _reap_sessions_job(self) -> int:
        logger.debug(f"[Сессии] Начало выполнения задачи: {JOB_NAME}")
        try:
            removed = self.store.reap()
        except Exception as e:
            logger.error(f"[Сессии] Ошибка выполнения задачи {JOB_NAME}: {e}")
            raise
        logger.debug(f"[Сессии] Задача завершена успешно: {JOB_NAME}")
        return removed
