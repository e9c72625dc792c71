"""Pytest fixtures and configuration"""

import os
from typing import AsyncGenerator, Dict

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./splitbill_test.db")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.pool import NullPool

import splitbill.models  # noqa: F401
from splitbill.database import Base, get_db
from splitbill.main import app
from splitbill.services.bill_locks import BillLocks
from splitbill.services.cache_service import CacheService
from splitbill.services.events import LedgerEvents


@pytest.fixture(autouse=True)
def fresh_ledger_state():
    """Locks and observers are process-wide; start every test clean"""
    BillLocks.reset()
    LedgerEvents._observers = {}
    yield
    LedgerEvents._observers = {}


@pytest.fixture(autouse=True)
def fake_cache(monkeypatch) -> Dict[str, str]:
    """Replace Redis with an in-memory dict"""
    store: Dict[str, str] = {}

    async def fake_get(key):
        return store.get(key)

    async def fake_set(key, value, ttl=None):
        store[key] = value
        return True

    monkeypatch.setattr(CacheService, "get", fake_get)
    monkeypatch.setattr(CacheService, "set", fake_set)
    return store


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Session factory bound to a fresh SQLite database file per test"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}",
        poolclass=NullPool,  # No connection pooling for tests
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for one test"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with one database session per request"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def abc_bill_data() -> dict:
    """A is owed by B and C, who each owe 50"""
    return {
        "names": ["A", "B", "C"],
        "addresses": ["0xA", "0xB", "0xC"],
        "amounts": ["100", "50", "50"],
    }
