"""Repository for GeneratedRelease read/write operations."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, TypeVar

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.database import get_session_context
from app.core.db_retry import run_with_transient_db_retry
from app.core.exceptions import InvalidStatusTransitionError, ReleaseNotFoundError, ValidationError
from app.models.press_release import (
    RELEASE_STATUSES,
    GeneratedRelease,
    PRAngleOption,
    PRHeadlineVariant,
)
from app.services.press_release.text import count_words
from app.services.press_release.types import (
    GenerationInput,
    OptimizationResult,
    PipelineArtifacts,
)

logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

ALLOWED_STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    "draft": frozenset({"generating", "error"}),
    "generating": frozenset({"complete", "error"}),
    "error": frozenset({"generating"}),
    "complete": frozenset({"error"}),
}


def validate_status_transition(current_status: str, target_status: str) -> None:
    """Raise when ``current_status -> target_status`` is not an allowed move."""
    if target_status not in RELEASE_STATUSES:
        raise ValidationError(
            f"Unknown release status: {target_status}",
            details={"allowed": list(RELEASE_STATUSES)},
        )
    if target_status not in ALLOWED_STATUS_TRANSITIONS.get(current_status, frozenset()):
        raise InvalidStatusTransitionError(current_status, target_status)


class PressReleaseRepository:
    """Org-scoped access to generated releases.

    Uses the caller's session when given one; otherwise every operation runs in
    its own short-lived session with transient connection retries, so status
    changes are visible to other readers as soon as they return.
    """

    def __init__(self, *, org_id: str, session: AsyncSession | None = None) -> None:
        self.org_id = str(org_id)
        self.session = session

    @asynccontextmanager
    async def _active_session(self) -> AsyncGenerator[AsyncSession, None]:
        if self.session is not None:
            yield self.session
            return
        async with get_session_context() as fresh_session:
            yield fresh_session

    async def _run(
        self,
        operation: Callable[[], Awaitable[_ResultT]],
        *,
        operation_name: str,
        release_id: str | None = None,
    ) -> _ResultT:
        if self.session is not None:
            return await operation()
        return await run_with_transient_db_retry(
            operation,
            operation_name=operation_name,
            log_context={"org_id": self.org_id, "release_id": release_id},
        )

    def _release_query(self, release_id: str) -> Any:
        return (
            select(GeneratedRelease)
            .options(
                selectinload(GeneratedRelease.angle_options),
                selectinload(GeneratedRelease.headline_variants),
            )
            .where(
                GeneratedRelease.id == str(release_id),
                GeneratedRelease.org_id == self.org_id,
            )
        )

    async def _load(self, session: AsyncSession, release_id: str) -> GeneratedRelease:
        result = await session.execute(
            self._release_query(release_id).execution_options(populate_existing=True)
        )
        release = result.scalar_one_or_none()
        if release is None:
            raise ReleaseNotFoundError(str(release_id))
        return release

    async def create_release(
        self,
        *,
        brief: GenerationInput,
        user_id: str | None = None,
    ) -> GeneratedRelease:
        """Persist a new release in ``draft`` status."""

        async def _create() -> GeneratedRelease:
            async with self._active_session() as session:
                release = GeneratedRelease(
                    org_id=self.org_id,
                    user_id=user_id,
                    status="draft",
                    input_json=brief.to_dict(),
                    personality_id=brief.personality_id,
                    word_count=0,
                )
                session.add(release)
                await session.flush()
                return await self._load(session, str(release.id))

        release = await self._run(_create, operation_name="press_release_create")
        logger.info(
            "Press release created",
            extra={"org_id": self.org_id, "release_id": str(release.id)},
        )
        return release

    async def get_release(self, release_id: str) -> GeneratedRelease | None:
        async with self._active_session() as session:
            result = await session.execute(self._release_query(release_id))
            return result.scalar_one_or_none()

    async def get_release_or_raise(self, release_id: str) -> GeneratedRelease:
        release = await self.get_release(release_id)
        if release is None:
            raise ReleaseNotFoundError(str(release_id))
        return release

    async def list_releases(
        self,
        *,
        status: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[GeneratedRelease], int]:
        """List releases newest first, returning the page and the filtered total."""
        filters: list[Any] = [GeneratedRelease.org_id == self.org_id]
        if status:
            filters.append(GeneratedRelease.status == status)
        if start_date is not None:
            filters.append(
                GeneratedRelease.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
            )
        if end_date is not None:
            # Inclusive of the whole end day.
            filters.append(
                GeneratedRelease.created_at
                < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )

        async with self._active_session() as session:
            total = int(
                await session.scalar(
                    select(func.count()).select_from(GeneratedRelease).where(*filters)
                )
                or 0
            )
            result = await session.execute(
                select(GeneratedRelease)
                .where(*filters)
                .order_by(GeneratedRelease.created_at.desc(), GeneratedRelease.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all()), total

    async def update_status(
        self,
        release_id: str,
        status: str,
        *,
        error_message: str | None = None,
        error_stage: str | None = None,
    ) -> GeneratedRelease:
        """Apply an allowed status transition."""

        async def _update() -> GeneratedRelease:
            async with self._active_session() as session:
                release = await self._load(session, release_id)
                validate_status_transition(release.status, status)
                release.status = status
                if status == "error":
                    release.error_message = error_message
                    release.error_stage = error_stage
                elif status == "generating":
                    release.error_message = None
                    release.error_stage = None
                await session.flush()
                return await self._load(session, release_id)

        release = await self._run(
            _update,
            operation_name="press_release_update_status",
            release_id=str(release_id),
        )
        logger.info(
            "Press release status updated",
            extra={
                "org_id": self.org_id,
                "release_id": str(release_id),
                "status": status,
                "error_stage": error_stage,
            },
        )
        return release

    async def complete_release(
        self,
        release_id: str,
        artifacts: PipelineArtifacts,
        *,
        embeddings: list[float] | None = None,
    ) -> GeneratedRelease:
        """Store the draft, SEO summary and audit rows, then mark ``complete``."""

        async def _complete() -> GeneratedRelease:
            async with self._active_session() as session:
                release = await self._load(session, release_id)
                validate_status_transition(release.status, "complete")

                draft = artifacts.draft
                release.headline = draft.headline
                release.subheadline = draft.subheadline
                release.angle = artifacts.angles.selected_angle.angle_title
                release.dateline = draft.dateline
                release.body = draft.body
                release.quote_1 = draft.quote1
                release.quote_1_attribution = draft.quote1_attribution
                release.quote_2 = draft.quote2 or None
                release.quote_2_attribution = draft.quote2_attribution or None
                release.boilerplate = draft.boilerplate
                release.word_count = draft.word_count
                release.seo_summary_json = artifacts.seo_summary.to_dict()
                release.readability_score = artifacts.seo_summary.readability_score
                if embeddings is not None:
                    release.embeddings = embeddings
                release.error_message = None
                release.error_stage = None
                release.status = "complete"

                await session.execute(
                    delete(PRAngleOption).where(PRAngleOption.release_id == release.id)
                )
                await session.execute(
                    delete(PRHeadlineVariant).where(PRHeadlineVariant.release_id == release.id)
                )
                for position, angle in enumerate(artifacts.angles.angles):
                    session.add(
                        PRAngleOption(release_id=release.id, position=position, **angle.to_dict())
                    )
                for position, variant in enumerate(artifacts.headlines.variants):
                    session.add(
                        PRHeadlineVariant(release_id=release.id, position=position, **variant.to_dict())
                    )
                await session.flush()
                return await self._load(session, release_id)

        return await self._run(
            _complete,
            operation_name="press_release_complete",
            release_id=str(release_id),
        )

    async def save_optimization(
        self,
        release_id: str,
        result: OptimizationResult,
    ) -> GeneratedRelease:
        """Store optimized copy and append the entry to the history."""

        async def _save() -> GeneratedRelease:
            async with self._active_session() as session:
                release = await self._load(session, release_id)
                release.headline = result.headline
                release.body = result.body
                release.word_count = count_words(result.body)
                release.seo_summary_json = result.seo_after.to_dict()
                release.readability_score = result.seo_after.readability_score
                # Reassign so the JSONB column is flagged dirty.
                release.optimization_history = [
                    *(release.optimization_history or []),
                    result.entry.to_dict(),
                ]
                await session.flush()
                return await self._load(session, release_id)

        return await self._run(
            _save,
            operation_name="press_release_save_optimization",
            release_id=str(release_id),
        )

    async def list_embedding_candidates(
        self,
        *,
        exclude_release_id: str,
        limit: int,
    ) -> list[tuple[str, str | None, datetime, list[float]]]:
        """Other releases of the org that carry embeddings, newest first."""
        async with self._active_session() as session:
            result = await session.execute(
                select(
                    GeneratedRelease.id,
                    GeneratedRelease.headline,
                    GeneratedRelease.created_at,
                    GeneratedRelease.embeddings,
                )
                .where(
                    GeneratedRelease.org_id == self.org_id,
                    GeneratedRelease.id != str(exclude_release_id),
                    GeneratedRelease.embeddings.is_not(None),
                )
                .order_by(GeneratedRelease.created_at.desc())
                .limit(limit)
            )
            return [
                (str(row_id), headline, created_at, list(vector))
                for row_id, headline, created_at, vector in result.all()
                if vector
            ]
