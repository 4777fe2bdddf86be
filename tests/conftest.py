from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from infrastructure.database.models import Base, TelegramUser
from infrastructure.database.repo.requests import RequestsRepo
from infrastructure.database.setup import create_session_pool
from tgbot.misc.departments import is_admin_department


@pytest.fixture
async def engine():
    """In-memory SQLite engine with the full schema"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_pool(engine):
    return create_session_pool(engine)


@pytest.fixture
async def repo(session_pool):
    async with session_pool() as session:
        yield RequestsRepo(session)


@pytest.fixture
def bot():
    """Bot stub: every send_message call succeeds"""
    bot = AsyncMock()
    bot.send_message = AsyncMock(return_value=None)
    return bot


@pytest.fixture
def add_user(session_pool):
    """Factory that inserts a registered user directly"""

    async def _add_user(telegram_id: int, department=None, **kwargs) -> TelegramUser:
        async with session_pool() as session:
            user = TelegramUser(
                telegram_id=telegram_id,
                department=department,
                is_admin=is_admin_department(department),
                **kwargs,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _add_user
