"""Per-release progress events over Redis pub/sub.

Each release gets its own channel (``release:{id}``). Publishing is
fire-and-forget; a subscriber only sees events published after it attached,
and its subscription ends after a terminal event.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Literal

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.config import settings
from app.core.redis import get_redis_client

logger = logging.getLogger(__name__)

ProgressEventType = Literal["started", "progress", "completed", "failed"]
TERMINAL_EVENT_TYPES: frozenset[str] = frozenset({"completed", "failed"})

STAGE_PROGRESS: dict[str, int] = {
    "context": 10,
    "angles": 30,
    "headlines": 50,
    "draft": 70,
    "seo": 90,
}
STAGE_ORDER: tuple[str, ...] = tuple(STAGE_PROGRESS)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One pipeline progress notification."""

    type: ProgressEventType
    release_id: str
    step: str | None = None
    progress: int | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES

    @classmethod
    def started(cls, release_id: str) -> ProgressEvent:
        return cls(type="started", release_id=release_id, progress=0)

    @classmethod
    def stage(cls, release_id: str, step: str) -> ProgressEvent:
        return cls(type="progress", release_id=release_id, step=step, progress=STAGE_PROGRESS[step])

    @classmethod
    def completed(cls, release_id: str) -> ProgressEvent:
        return cls(type="completed", release_id=release_id, progress=100)

    @classmethod
    def failed(cls, release_id: str, error: str, step: str | None = None) -> ProgressEvent:
        return cls(type="failed", release_id=release_id, step=step, error=error)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type, "release_id": self.release_id}
        if self.step is not None:
            payload["step"] = self.step
        if self.progress is not None:
            payload["progress"] = self.progress
        if self.error is not None:
            payload["error"] = self.error
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str | bytes) -> ProgressEvent:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("progress event payload must be an object")
        event_type = data.get("type")
        if event_type not in ("started", "progress", "completed", "failed"):
            raise ValueError(f"unknown progress event type: {event_type!r}")
        progress = data.get("progress")
        return cls(
            type=event_type,
            release_id=str(data.get("release_id", "")),
            step=data.get("step"),
            progress=int(progress) if progress is not None else None,
            error=data.get("error"),
        )


class ReleaseSubscription:
    """Live view of one release channel; ends after a terminal event."""

    def __init__(self, pubsub: Any, release_id: str) -> None:
        self._pubsub = pubsub
        self.release_id = release_id
        self.finished = False

    async def next_event(self, timeout: float | None = None) -> ProgressEvent | None:
        """Wait up to ``timeout`` seconds for the next event; ``None`` on timeout."""
        if self.finished:
            return None
        message = await self._pubsub.get_message(ignore_subscribe_messages=True, timeout=timeout)
        if not message or message.get("type") != "message":
            return None
        try:
            event = ProgressEvent.from_json(message["data"])
        except (ValueError, TypeError):
            logger.warning(
                "Ignoring malformed progress event",
                extra={"release_id": self.release_id},
            )
            return None
        if event.is_terminal:
            self.finished = True
        return event

    async def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        while not self.finished:
            event = await self.next_event(timeout=settings.progress_poll_interval_seconds)
            if event is not None:
                yield event


class ReleaseProgressChannel:
    """Typed publish/subscribe over one Redis channel per release."""

    def __init__(self, redis_client: Redis | None = None, *, prefix: str | None = None) -> None:
        self.redis = redis_client or get_redis_client()
        self.prefix = prefix or settings.progress_channel_prefix

    def channel_name(self, release_id: str) -> str:
        return f"{self.prefix}:{release_id}"

    async def publish(self, event: ProgressEvent) -> int:
        """Publish an event; returns the number of receivers, 0 on failure."""
        try:
            return int(await self.redis.publish(self.channel_name(event.release_id), event.to_json()))
        except RedisError:
            logger.warning(
                "Failed to publish progress event",
                extra={"release_id": event.release_id, "event_type": event.type},
                exc_info=True,
            )
            return 0

    @asynccontextmanager
    async def subscribe(self, release_id: str) -> AsyncIterator[ReleaseSubscription]:
        pubsub = self.redis.pubsub()
        channel = self.channel_name(release_id)
        await pubsub.subscribe(channel)
        try:
            yield ReleaseSubscription(pubsub, release_id)
        finally:
            try:
                await pubsub.unsubscribe(channel)
            finally:
                await pubsub.aclose()
