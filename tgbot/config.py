"""Файл конфигурации проекта."""

from dataclasses import dataclass
from typing import Optional

from environs import Env
from sqlalchemy import URL


class ConfigError(RuntimeError):
    """Конфигурация неполная, запуск невозможен."""


@dataclass
class TgBot:
    """Класс конфигурации бота Telegram.

    Attributes:
        token: Токен бота от @BotFather

        use_webhook: Использовать ли вебхуки
        webhook_domain: Домен вебхука
        webhook_path: Кастомный путь к вебхуку
        webhook_secret: Секретный токен вебхука
        webhook_port: Порт вебхука
    """

    token: str
    use_webhook: bool
    webhook_domain: Optional[str] = None
    webhook_path: Optional[str] = None
    webhook_secret: Optional[str] = None
    webhook_port: int = 8443

    @staticmethod
    def from_env(env: Env):
        """Создает объект TgBot из переменных окружения.

        Args:
            env: Объект переменных окружения

        Returns:
            Собранный объект TgBot

        Raises:
            ConfigError: Если не задан BOT_TOKEN
        """
        token = env.str("BOT_TOKEN", None)
        if not token:
            raise ConfigError("BOT_TOKEN is not set")

        use_webhook = env.bool("USE_WEBHOOK", False)
        webhook_domain = env.str("WEBHOOK_DOMAIN", None)
        webhook_path = env.str("WEBHOOK_PATH", "/notify-bot")
        webhook_secret = env.str("WEBHOOK_SECRET", None)
        webhook_port = env.int("WEBHOOK_PORT", 8443)

        return TgBot(
            token=token,
            use_webhook=use_webhook,
            webhook_domain=webhook_domain,
            webhook_path=webhook_path,
            webhook_secret=webhook_secret,
            webhook_port=webhook_port,
        )


@dataclass
class DbConfig:
    """Класс конфигурации подключения к базе данных.

    Attributes:
        host: Адрес сервера
        port: Порт сервера
        user: Логин пользователя БД
        password: Пароль пользователя БД
        name: Название базы данных
    """

    host: str
    user: str
    password: str
    name: str
    port: int = 3306

    def construct_sqlalchemy_url(
        self,
        db_name=None,
        driver="aiomysql",
    ) -> URL:
        """Собирает строку SQLAlchemy для подключения к MariaDB.

        Args:
            db_name: Название базы данных, по умолчанию из конфигурации
            driver: Драйвер для подключения

        Returns:
            Возвращает собранную строку для подключения к базе используя SQLAlchemy
        """
        connection_url = URL.create(
            f"mysql+{driver}",
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=db_name or self.name,
            query={
                "charset": "utf8mb4",
            },
        )

        return connection_url

    @staticmethod
    def from_env(env: Env):
        """Создает объект DbConfig из переменных окружения.

        Args:
            env: Объект переменных окружения

        Returns:
            Собранный объект DbConfig
        """
        host = env.str("DB_HOST")
        port = env.int("DB_PORT", 3306)
        user = env.str("DB_USER")
        password = env.str("DB_PASS")
        name = env.str("DB_NAME")

        return DbConfig(host=host, port=port, user=user, password=password, name=name)


@dataclass
class ApiConfig:
    """Класс конфигурации HTTP API для веб-панели.

    Attributes:
        host: Адрес, на котором слушает сервер
        port: Порт сервера
    """

    host: str = "0.0.0.0"
    port: int = 8080

    @staticmethod
    def from_env(env: Env):
        return ApiConfig(
            host=env.str("API_HOST", "0.0.0.0"),
            port=env.int("API_PORT", 8080),
        )


@dataclass
class BroadcastConfig:
    """Класс конфигурации рассылок и сессий создания постов.

    Attributes:
        concurrency: Максимум одновременных отправок в одной рассылке
        send_timeout: Таймаут одной отправки в секундах
        session_ttl: Время жизни брошенной сессии создания поста в минутах
        reap_interval: Период очистки брошенных сессий в минутах
    """

    concurrency: int = 10
    send_timeout: float = 10.0
    session_ttl: int = 60
    reap_interval: int = 5

    @staticmethod
    def from_env(env: Env):
        return BroadcastConfig(
            concurrency=env.int("BROADCAST_CONCURRENCY", 10),
            send_timeout=env.float("BROADCAST_SEND_TIMEOUT", 10.0),
            session_ttl=env.int("SESSION_TTL", 60),
            reap_interval=env.int("SESSION_REAP_INTERVAL", 5),
        )


@dataclass
class Config:
    """Основной класс конфигурации.

    Этот класс содержит все остальные классы конфигурации, предоставляя централизованный доступ ко всем настройкам.

    Attributes:
    ----------
    tg_bot: Содержит настройки Telegram бота
    db: Содержит настройки подключения к базе данных
    api: Содержит настройки HTTP API
    broadcast: Содержит настройки рассылок
    log_level: Уровень логирования
    """

    tg_bot: TgBot
    db: DbConfig
    api: ApiConfig
    broadcast: BroadcastConfig
    log_level: str = "INFO"


def load_config(path: str = None) -> Config:
    """Загружает конфиг из переменных окружения.

    Читает либо значения из файла .env, если предоставлен путь до него, иначе читает из переменных запущенного процесса.

    Args:
        path: Опциональный путь к файлу переменных окружения

    Returns:
        Объект Config с аттрибутами для каждого класса конфигурации
    """
    env = Env()
    env.read_env(path)

    return Config(
        tg_bot=TgBot.from_env(env),
        db=DbConfig.from_env(env),
        api=ApiConfig.from_env(env),
        broadcast=BroadcastConfig.from_env(env),
        log_level=env.str("LOG_LEVEL", "INFO"),
    )
