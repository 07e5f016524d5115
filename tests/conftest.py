"""
Pytest configuration and fixtures for testing.
"""
import os

# Settings are read at import time, so the environment must be in place first
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("START_NOTIFICATION_WORKER", "false")
os.environ.setdefault("ENVIRONMENT", "test")

import fnmatch
import pytest
import pytest_asyncio
from typing import AsyncGenerator
from datetime import datetime, timedelta, timezone
from fastapi import Depends
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event as sa_event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.session import Base, get_session
from app.core.security import hash_password
from app.db.models import User, Event, RoleEnum
from app.cache.redis_client import cache
from app.api.routes import contact as contact_routes
from app.services.notification_service import NotificationService


TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///./test.db")

test_engine = create_async_engine(TEST_DATABASE_URL, poolclass=NullPool, echo=False)


if TEST_DATABASE_URL.startswith("sqlite"):
    @sa_event.listens_for(test_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


TestSessionLocal = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Fresh schema per test. The session is used by fixtures and service-level tests.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client against the app. Each request gets its own session,
    as it would in production.
    """
    async def override_get_session():
        async with TestSessionLocal() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class InMemoryCache:
    """Stand-in for the Redis cache with the same async interface."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, expire=300):
        self.store[key] = value
        return True

    async def delete_pattern(self, pattern):
        keys = [k for k in self.store if fnmatch.fnmatch(k, pattern)]
        for k in keys:
            del self.store[k]
        return len(keys)

    async def exists(self, key):
        return key in self.store


@pytest.fixture(autouse=True)
def memory_cache(monkeypatch) -> InMemoryCache:
    """Replace Redis with a dict for every test."""
    fake = InMemoryCache()
    for name in ("get", "set", "delete_pattern", "exists"):
        monkeypatch.setattr(cache, name, getattr(fake, name))
    return fake


@pytest.fixture(autouse=True)
def published(monkeypatch) -> list:
    """Record notifications instead of talking to RabbitMQ."""
    messages = []

    async def record(routing_key, payload):
        messages.append((routing_key, payload))

    from app.events import publisher
    monkeypatch.setattr(publisher, "publish_event", record)
    return messages


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    """Skip bcrypt's work factor in tests."""
    class MockPasswordContext:
        def hash(self, password: str) -> str:
            return f"$2b$12$mockedhash{password}"

        def verify(self, plain: str, hashed: str) -> bool:
            return hashed == f"$2b$12$mockedhash{plain}"

    from app.core import security
    monkeypatch.setattr(security, "pwd_context", MockPasswordContext())


class FakeEmailSender:
    """Collects outgoing emails; can be told to fail the next N sends."""

    def __init__(self):
        self.sent = []
        self.failures = []

    async def send(self, message):
        if self.failures:
            raise self.failures.pop(0)
        self.sent.append(message)
        return f"email-{len(self.sent)}"


@pytest.fixture
def email_sender() -> FakeEmailSender:
    sender = FakeEmailSender()

    def override(session: AsyncSession = Depends(get_session)):
        return NotificationService(session, sender=sender)

    app.dependency_overrides[contact_routes.get_notification_service] = override
    yield sender
    app.dependency_overrides.pop(contact_routes.get_notification_service, None)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


async def make_user(
    session: AsyncSession,
    uid: str,
    age=None,
    gender=None,
    email=None,
    fullname="Test User",
) -> User:
    user = User(
        id=uid,
        email=email or f"{uid}@example.com",
        hashed_password=hash_password("Test123!@#"),
        fullname=fullname,
        age=age,
        gender=gender,
        role=RoleEnum.user,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def make_event(session: AsyncSession, title="Jazz Night", starts_in=timedelta(days=1), **kwargs) -> Event:
    event = Event(
        title=title,
        description=kwargs.pop("description", "Live jazz on the waterfront"),
        category=kwargs.pop("category", "Music"),
        location=kwargs.pop("location", "V&A Waterfront"),
        start_time=now_utc() + starts_in,
        max_attendees=kwargs.pop("max_attendees", 100),
        **kwargs,
    )
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return event


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "user-1", age=20, gender="Male", fullname="Thabo Nkosi")


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    """An event starting tomorrow."""
    return await make_event(db_session)


@pytest_asyncio.fixture
async def past_event(db_session: AsyncSession) -> Event:
    return await make_event(db_session, title="Opening Parade", starts_in=timedelta(hours=-2))
