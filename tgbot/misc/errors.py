"""Исключения бота и API."""


class BotError(Exception):
    """Базовая ошибка с текстом для пользователя.

    Attributes:
        text: Текст, который увидит пользователь
        alert: Показывать ли ответ всплывающим окном
    """

    default_text = "Произошла ошибка. Попробуйте снова."
    default_alert = False

    def __init__(self, text: str = None, alert: bool = None):
        self.text = text or self.default_text
        self.alert = self.default_alert if alert is None else alert
        super().__init__(self.text)


class ValidationError(BotError):
    """Некорректные входные данные. Состояние не меняется."""

    default_text = "Ошибка"


class AuthorizationError(BotError):
    """Действие доступно только администраторам."""

    default_text = "У вас нет прав для создания постов"
    default_alert = True


class SessionExpiredError(BotError):
    """Сессия создания поста отсутствует или находится на другом шаге."""

    default_text = "Сессия истекла. Начните создание поста заново."


class DeliveryError(BotError):
    """Не удалось доставить сообщение одному получателю."""

    default_text = "Не удалось доставить сообщение"

    def __init__(self, telegram_id: int, reason: str):
        self.telegram_id = telegram_id
        self.reason = reason
        super().__init__(f"{self.default_text} [ID:{telegram_id}]: {reason}")


class DependencyError(BotError):
    """Хранилище недоступно или вернуло ошибку."""

    default_text = "Произошла ошибка. Попробуйте позже или обратитесь в IT-отдел."
