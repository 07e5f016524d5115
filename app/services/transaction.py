import asyncio
from typing import Awaitable, Callable, TypeVar
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.errors import AppError, InternalError
from app.core.logging import logger

T = TypeVar("T")


async def run_transaction(
    session: AsyncSession,
    work: Callable[[], Awaitable[T]],
    failure_message: str,
) -> T:
    """
    Run ``work`` (which reads, checks, writes and commits) under the database
    timeout. Any failure rolls the session back.

    Raises:
        AppError: Business-rule violations raised by ``work``, unchanged
        InternalError: On timeout or database errors
    """
    try:
        return await asyncio.wait_for(work(), timeout=settings.DB_TIMEOUT_SECONDS)
    except AppError:
        await session.rollback()
        raise
    except asyncio.TimeoutError as e:
        await session.rollback()
        logger.error(f"Transaction timed out after {settings.DB_TIMEOUT_SECONDS}s: {failure_message}")
        raise InternalError("Request timed out") from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"{failure_message}: {e}")
        raise InternalError(failure_message) from e
