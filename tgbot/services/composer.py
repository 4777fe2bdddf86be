"""Машина состояний создания поста администратором.

Методы не захватывают блокировку пользователя сами: обработчик держит
``store.lock(user_id)`` на время перехода и обновления сообщения.
"""

import logging
from typing import Awaitable, Callable, Optional, TypeVar

from infrastructure.database.models.telegram_user import TelegramUser
from tgbot.misc.departments import DEPARTMENTS, department_by_index
from tgbot.misc.errors import AuthorizationError, SessionExpiredError, ValidationError
from tgbot.services.sessions import PostSession, PostStep, SessionStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PostComposer:
    """Шаги создания поста: текст → департаменты → подтверждение"""

    def __init__(self, store: SessionStore):
        self.store = store

    def _require(self, user_id: int, step: PostStep) -> PostSession:
        session = self.store.get(user_id)
        if session is None or session.step != step:
            raise SessionExpiredError()
        return session

    def start(self, user: Optional[TelegramUser]) -> PostSession:
        """Начать создание поста.

        Raises:
            AuthorizationError: Пользователь не зарегистрирован или не администратор
        """
        if user is None or not user.is_admin:
            raise AuthorizationError()

        session = PostSession(step=PostStep.AWAITING_TEXT)
        self.store.put(user.telegram_id, session)
        logger.info(f"[Пост] Пользователь {user.telegram_id} начал создание поста")
        return session

    def accept_text(self, user_id: int, text: str) -> Optional[PostSession]:
        """Сохранить текст поста.

        Returns:
            Сессию, если текст ожидался, иначе None
        """
        session = self.store.get(user_id)
        if session is None or session.step != PostStep.AWAITING_TEXT:
            return None

        session.post_text = text
        session.selected_departments = set()
        session.step = PostStep.AWAITING_DEPARTMENTS
        self.store.put(user_id, session)
        return session

    def toggle_department(self, user_id: int, index: int) -> tuple[PostSession, str, bool]:
        """Переключить выбор департамента по индексу.

        Returns:
            Сессия, название департамента и True, если департамент добавлен

        Raises:
            SessionExpiredError: Нет сессии на шаге выбора департаментов
            ValidationError: Индекс вне справочника
        """
        session = self._require(user_id, PostStep.AWAITING_DEPARTMENTS)

        department = department_by_index(index)
        if department is None:
            raise ValidationError()

        added = department not in session.selected_departments
        if added:
            session.selected_departments.add(department)
        else:
            session.selected_departments.discard(department)

        self.store.put(user_id, session)
        return session, department, added

    def toggle_all(self, user_id: int) -> tuple[PostSession, bool]:
        """Выбрать все департаменты или снять выбор со всех.

        Returns:
            Сессия и True, если теперь выбраны все
        """
        session = self._require(user_id, PostStep.AWAITING_DEPARTMENTS)

        if session.all_selected:
            session.selected_departments = set()
        else:
            session.selected_departments = set(DEPARTMENTS)

        self.store.put(user_id, session)
        return session, session.all_selected

    def finish_selection(self, user_id: int) -> PostSession:
        """Завершить выбор департаментов и перейти к подтверждению.

        Raises:
            SessionExpiredError: Нет сессии на шаге выбора или нет текста
            ValidationError: Не выбран ни один департамент
        """
        session = self._require(user_id, PostStep.AWAITING_DEPARTMENTS)
        if not session.post_text:
            raise SessionExpiredError()

        if not session.selected_departments:
            raise ValidationError("Выберите хотя бы один отдел", alert=True)

        session.step = PostStep.AWAITING_CONFIRMATION
        self.store.put(user_id, session)
        return session

    async def confirm(
        self,
        user_id: int,
        publish: Callable[[str, list[str]], Awaitable[T]],
    ) -> tuple[PostSession, T]:
        """Опубликовать пост и закрыть сессию.

        Если publish упал, сессия остается, и подтверждение можно повторить.

        Args:
            user_id: Идентификатор администратора
            publish: Корутина публикации, принимает текст и департаменты

        Returns:
            Закрытая сессия и результат publish
        """
        session = self._require(user_id, PostStep.AWAITING_CONFIRMATION)
        if not session.post_text:
            raise SessionExpiredError()

        result = await publish(session.post_text, session.departments)
        self.store.delete(user_id)
        logger.info(f"[Пост] Пользователь {user_id} опубликовал пост")
        return session, result

    def cancel(self, user_id: int) -> Optional[PostSession]:
        """Отменить создание поста с любого шага."""
        session = self.store.delete(user_id)
        if session:
            logger.info(f"[Пост] Пользователь {user_id} отменил создание поста")
        return session
