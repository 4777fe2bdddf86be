"""Сервис отложенных задач."""

import logging

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from tgbot.config import BroadcastConfig
from tgbot.services.schedulers.sessions import SessionsScheduler
from tgbot.services.sessions import SessionStore

logger = logging.getLogger(__name__)


class SchedulerManager:
    """Менеджер планировщика."""

    def __init__(self, store: SessionStore, settings: BroadcastConfig):
        """Инициализация менеджера планировщика.

        Attributes:
            self.scheduler: Асинхронный планировщик задач APScheduler
            self.sessions: Планировщик очистки сессий создания постов
        """
        self.scheduler = AsyncIOScheduler()
        self._configure_scheduler()

        self.sessions = SessionsScheduler(store, interval_minutes=settings.reap_interval)

    def _configure_scheduler(self):
        job_defaults = {
            "coalesce": True,
            "misfire_grace_time": 300,
            "replace_existing": True,
        }

        self.scheduler.configure(
            jobstores={"default": MemoryJobStore()},
            job_defaults=job_defaults,
            timezone="UTC",
        )

    def setup_jobs(self) -> None:
        """Настройка всех запланированных задач."""
        logger.info("[Планировщик] Настройка запланированных задач...")
        self.sessions.setup_jobs(self.scheduler)
        logger.info("[Планировщик] Все задачи настроены")

    def start(self):
        """Запуск планировщика."""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("[Планировщик] Планировщик запущен")

    def shutdown(self):
        """Остановка планировщика."""
        if self.scheduler.running:
            self.scheduler.shutdown()
            logger.info("[Планировщик] Планировщик остановлен")
