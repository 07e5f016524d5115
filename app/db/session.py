from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from app.core.config import settings


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": 20,           # Number of permanent connections to maintain
        "max_overflow": 10,        # Connections allowed beyond pool_size
        "pool_pre_ping": True,     # Verify connections before using them
        "pool_recycle": 3600,      # Recycle connections after 1 hour
    }


engine = create_async_engine(settings.DATABASE_URL, echo=False, **_engine_options(settings.DATABASE_URL))
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
