"""Unit tests for per-release progress events over Redis pub/sub."""

from __future__ import annotations

import json
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.services.press_release.progress import (
    STAGE_ORDER,
    ProgressEvent,
    ReleaseProgressChannel,
)


class _FakePubSub:
    def __init__(self, messages: list[dict[str, Any] | None]) -> None:
        self._messages = list(messages)
        self.subscribed: list[str] = []
        self.unsubscribed: list[str] = []
        self.closed = False

    async def subscribe(self, channel: str) -> None:
        self.subscribed.append(channel)

    async def unsubscribe(self, channel: str) -> None:
        self.unsubscribed.append(channel)

    async def get_message(
        self,
        *,
        ignore_subscribe_messages: bool = False,
        timeout: float | None = None,
    ) -> dict[str, Any] | None:
        if not self._messages:
            return None
        return self._messages.pop(0)

    async def aclose(self) -> None:
        self.closed = True


class _FakeRedis:
    def __init__(self, *, messages: list[dict[str, Any] | None] | None = None, fail: bool = False) -> None:
        self.published: list[tuple[str, str]] = []
        self.fail = fail
        self.pubsub_instance = _FakePubSub(messages or [])

    async def publish(self, channel: str, payload: str) -> int:
        if self.fail:
            raise RedisConnectionError("redis down")
        self.published.append((channel, payload))
        return 1

    def pubsub(self) -> _FakePubSub:
        return self.pubsub_instance


def _message(event: ProgressEvent) -> dict[str, Any]:
    return {"type": "message", "data": event.to_json()}


def test_stage_events_carry_monotonic_progress() -> None:
    progress = [ProgressEvent.stage("rel-1", step).progress for step in STAGE_ORDER]

    assert STAGE_ORDER == ("context", "angles", "headlines", "draft", "seo")
    assert progress == sorted(progress)
    assert ProgressEvent.started("rel-1").progress == 0
    assert ProgressEvent.completed("rel-1").progress == 100


def test_event_json_omits_empty_fields_and_parses_back() -> None:
    failed = ProgressEvent.failed("rel-1", "boom", step="draft")

    assert json.loads(failed.to_json()) == {
        "type": "failed",
        "release_id": "rel-1",
        "step": "draft",
        "error": "boom",
    }
    assert ProgressEvent.from_json(failed.to_json()) == failed
    assert failed.is_terminal
    assert not ProgressEvent.started("rel-1").is_terminal

    with pytest.raises(ValueError):
        ProgressEvent.from_json('{"type": "exploded", "release_id": "rel-1"}')


@pytest.mark.asyncio
async def test_publish_uses_per_release_channel() -> None:
    redis = _FakeRedis()
    channel = ReleaseProgressChannel(redis, prefix="release")  # type: ignore[arg-type]

    receivers = await channel.publish(ProgressEvent.stage("rel-1", "angles"))

    assert receivers == 1
    assert redis.published[0][0] == "release:rel-1"
    assert json.loads(redis.published[0][1])["progress"] == 30


@pytest.mark.asyncio
async def test_publish_failure_is_swallowed() -> None:
    channel = ReleaseProgressChannel(_FakeRedis(fail=True), prefix="release")  # type: ignore[arg-type]

    assert await channel.publish(ProgressEvent.started("rel-1")) == 0


@pytest.mark.asyncio
async def test_subscription_yields_until_terminal_event_and_cleans_up() -> None:
    redis = _FakeRedis(
        messages=[
            _message(ProgressEvent.started("rel-1")),
            None,
            {"type": "message", "data": "not json"},
            _message(ProgressEvent.stage("rel-1", "context")),
            _message(ProgressEvent.completed("rel-1")),
            _message(ProgressEvent.started("rel-1")),
        ]
    )
    channel = ReleaseProgressChannel(redis, prefix="release")  # type: ignore[arg-type]

    received: list[str] = []
    async with channel.subscribe("rel-1") as subscription:
        async for event in subscription:
            received.append(event.type)

    assert received == ["started", "progress", "completed"]
    assert redis.pubsub_instance.subscribed == ["release:rel-1"]
    assert redis.pubsub_instance.unsubscribed == ["release:rel-1"]
    assert redis.pubsub_instance.closed
