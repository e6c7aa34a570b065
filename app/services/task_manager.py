"""Release generation progress snapshots backed by Redis.

Pub/sub only reaches live subscribers, so the latest state is also kept
under a key for polling clients.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.config import settings
from app.core.redis import get_redis_client
from app.services.press_release.progress import STAGE_ORDER, ProgressEvent

logger = logging.getLogger(__name__)

TASK_KEY_PREFIX = "release_task"
UNSET: object = object()

EVENT_STATUS: dict[str, str] = {
    "started": "generating",
    "progress": "generating",
    "completed": "complete",
    "failed": "error",
}


class TaskManager:
    """Store and fetch release generation progress from Redis."""

    def __init__(self, redis_client: Redis | None = None) -> None:
        self.redis = redis_client or get_redis_client()
        self.ttl_seconds = settings.cache_ttl_seconds

    async def get_task_status(self, release_id: str) -> dict[str, Any] | None:
        """Get the latest progress snapshot for a release."""
        raw = await self.redis.get(self._task_key(release_id))
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Invalid task payload in Redis", extra={"release_id": release_id})
            return None

    async def set_task_state(
        self,
        release_id: str,
        *,
        status: str | None = None,
        stage: str | None = None,
        org_id: str | None = None,
        current_step_name: str | None = None,
        completed_steps: int | None = None,
        progress_percent: float | None = None,
        error_message: str | None | object = UNSET,
    ) -> dict[str, Any]:
        """Create or update a release snapshot."""
        now = self._now_iso()
        payload = await self.get_task_status(release_id) or {
            "task_id": release_id,
            "created_at": now,
            "completed_steps": 0,
            "total_steps": len(STAGE_ORDER),
        }
        payload["updated_at"] = now

        updates = {
            "status": status,
            "stage": stage,
            "org_id": org_id,
            "current_step_name": current_step_name,
            "completed_steps": completed_steps,
            "progress_percent": progress_percent,
        }
        for key, value in updates.items():
            if value is not None:
                payload[key] = value
        if error_message is not UNSET:
            payload["error_message"] = error_message

        await self.redis.set(
            self._task_key(release_id),
            json.dumps(payload),
            ex=self.ttl_seconds,
        )
        return payload

    async def record_event(
        self,
        event: ProgressEvent,
        *,
        org_id: str | None = None,
    ) -> dict[str, Any] | None:
        """Mirror a progress event into the snapshot; failures are logged only."""
        completed_steps: int | None = None
        stage: str | None = None
        error_message: str | None | object = UNSET

        if event.type == "started":
            completed_steps = 0
            stage = "Generation started"
            error_message = None
        elif event.type == "progress" and event.step in STAGE_ORDER:
            completed_steps = STAGE_ORDER.index(event.step) + 1
            stage = f"Completed step {completed_steps}: {event.step}"
        elif event.type == "completed":
            completed_steps = len(STAGE_ORDER)
            stage = "Generation complete"
        elif event.type == "failed":
            stage = f"Failed at step: {event.step}" if event.step else "Generation failed"
            error_message = event.error

        try:
            return await self.set_task_state(
                event.release_id,
                status=EVENT_STATUS[event.type],
                stage=stage,
                org_id=org_id,
                current_step_name=event.step,
                completed_steps=completed_steps,
                progress_percent=(float(event.progress) if event.progress is not None else None),
                error_message=error_message,
            )
        except RedisError:
            logger.warning(
                "Failed to store progress snapshot",
                extra={"release_id": event.release_id, "event_type": event.type},
                exc_info=True,
            )
            return None

    @staticmethod
    def _task_key(release_id: str) -> str:
        return f"{TASK_KEY_PREFIX}:{release_id}"

    @staticmethod
    def _now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()
