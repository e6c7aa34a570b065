"""Retrying repository calls across dropped database connections."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError

from app.config import settings

logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

# asyncpg and psycopg wording for a connection the server or pool already dropped.
_DROPPED_CONNECTION_MESSAGES = (
    "connection is closed",
    "connection was closed",
    "server closed the connection unexpectedly",
    "connection reset by peer",
    "cannot perform operation: another operation is in progress",
)


def is_transient_connection_error(exc: BaseException) -> bool:
    """True when ``exc`` looks like a lost connection rather than a bad query."""
    if isinstance(exc, (InterfaceError, OperationalError)):
        return True
    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated:
            return True
        exc = exc.orig or exc
    message = str(exc).lower()
    return any(fragment in message for fragment in _DROPPED_CONNECTION_MESSAGES)


def retry_delay(attempt: int, base_delay_seconds: float) -> float:
    """Linear backoff: the n-th retry waits ``n * base``."""
    return max(base_delay_seconds, 0.0) * attempt


async def run_with_transient_db_retry(
    operation: Callable[[], Awaitable[_ResultT]],
    *,
    operation_name: str,
    attempts: int | None = None,
    base_delay_seconds: float | None = None,
    log_context: Mapping[str, Any] | None = None,
) -> _ResultT:
    """Await ``operation()``, running it again after a dropped connection.

    ``operation`` must open its own session so a retry starts from a fresh
    connection. Errors that are not connection drops propagate immediately.
    """
    max_attempts = attempts if attempts is not None else settings.database_retry_attempts
    base_delay = (
        base_delay_seconds
        if base_delay_seconds is not None
        else settings.database_retry_base_delay_seconds
    )
    if max_attempts < 1:
        raise ValueError("attempts must be >= 1")

    attempt = 1
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_attempts or not is_transient_connection_error(exc):
                raise
            logger.warning(
                "Database connection dropped, retrying",
                extra={
                    **dict(log_context or {}),
                    "operation": operation_name,
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                },
            )
            await asyncio.sleep(retry_delay(attempt, base_delay))
            attempt += 1
