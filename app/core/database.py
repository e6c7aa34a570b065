"""Async SQLAlchemy engine and session helpers."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.exc import InterfaceError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings
from app.core.db_retry import is_transient_connection_error

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    pool_size=settings.database_pool_size,
    max_overflow=settings.database_max_overflow,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_recycle=300,
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


def _has_pending_state(session: AsyncSession) -> bool:
    return bool(session.new or session.dirty or session.deleted)


async def close_read_only_transaction(session: AsyncSession, *, context: str) -> None:
    """Commit an open transaction that holds no ORM changes.

    Commit rather than rollback: rollback expires loaded attributes, and a later
    attribute access would then lazy-load outside the async greenlet.
    """
    if not session.in_transaction() or _has_pending_state(session):
        return
    try:
        await session.commit()
    except Exception as exc:
        if not is_transient_connection_error(exc):
            raise
        logger.debug(
            "Ignoring transient commit failure for read-only transaction",
            extra={"context": context},
        )


async def _rollback_quietly(session: AsyncSession, *, context: str, error: Exception) -> None:
    logger.warning(
        "Database session error, rolling back",
        extra={"context": context, "error": repr(error)},
    )
    try:
        await session.rollback()
    except Exception:
        logger.warning("Rollback also failed", extra={"context": context})


@asynccontextmanager
async def _managed_session(
    *,
    commit_on_exit: bool,
    context: str,
) -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            if commit_on_exit:
                await session.commit()
            elif _has_pending_state(session):
                raise RuntimeError(
                    "Session has pending ORM changes but commit_on_exit=False"
                )
            else:
                await close_read_only_transaction(session, context=context)
        except InterfaceError as exc:
            if not session.in_transaction() and not _has_pending_state(session):
                # Connection dropped after the work was already committed.
                logger.debug("Session connection already closed", extra={"context": context})
                return
            await _rollback_quietly(session, context=context, error=exc)
            raise
        except Exception as exc:
            await _rollback_quietly(session, context=context, error=exc)
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped session for FastAPI dependency injection."""
    async with _managed_session(commit_on_exit=True, context="get_session") as session:
        yield session


@asynccontextmanager
async def get_session_context(
    *,
    commit_on_exit: bool = True,
) -> AsyncGenerator[AsyncSession, None]:
    """Short-lived session for work outside a request."""
    async with _managed_session(
        commit_on_exit=commit_on_exit,
        context="get_session_context",
    ) as session:
        yield session


async def init_db() -> None:
    """Create tables that do not exist yet (development only)."""
    logger.info("Initializing database tables")
    from app.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of pooled connections."""
    logger.info("Closing database connections")
    await engine.dispose()
