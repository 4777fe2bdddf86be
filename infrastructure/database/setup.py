from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from tgbot.config import DbConfig


def create_engine(db: DbConfig, echo=False) -> AsyncEngine:
    engine = create_async_engine(
        db.construct_sqlalchemy_url(),
        query_cache_size=1200,
        pool_size=20,
        max_overflow=50,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_timeout=30,
    )
    return engine


def create_session_pool(engine: AsyncEngine) -> async_sessionmaker:
    session_pool = async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        autoflush=False,
    )
    return session_pool
