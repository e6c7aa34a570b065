"""Press release generation orchestrator.

Runs the stages in order for one release:
context -> angles -> headlines -> draft -> seo. Every stage is a pure
function of the brief and earlier stage output, so a failed release can be
regenerated from scratch.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.agents.brief_context_enricher import build_brief_enricher
from app.core.exceptions import GenerationError, PressroomError, ValidationError
from app.models.press_release import GeneratedRelease
from app.repositories.press_release_repository import PressReleaseRepository
from app.services.press_release.angles import find_angles
from app.services.press_release.context import BriefEnrichment, ContextAssembler
from app.services.press_release.draft import generate_draft
from app.services.press_release.headlines import generate_headlines
from app.services.press_release.optimization import optimize_release_text
from app.services.press_release.progress import ProgressEvent, ReleaseProgressChannel
from app.services.press_release.scoring_tables import ScoringTables, get_scoring_tables
from app.services.press_release.seo import calculate_seo_summary
from app.services.press_release.types import (
    GenerationInput,
    OptimizationResult,
    PipelineArtifacts,
)
from app.services.press_release.validation import validate_generation_input
from app.services.release_similarity import compute_release_embedding
from app.services.subscription_limits import enforce_org_quota_or_throw
from app.services.task_manager import TaskManager

logger = logging.getLogger(__name__)

PERSIST_STAGE = "persist"
_UNSET: Any = object()


class PressReleaseOrchestrator:
    """Validates, quota-checks, generates and stores one press release."""

    def __init__(
        self,
        session: AsyncSession,
        org_id: str,
        *,
        repository: PressReleaseRepository | None = None,
        channel: ReleaseProgressChannel | None = None,
        task_manager: TaskManager | None = None,
        tables: ScoringTables | None = None,
        enricher: BriefEnrichment | None = _UNSET,
    ) -> None:
        self.session = session
        self.org_id = str(org_id)
        self.repository = repository or PressReleaseRepository(org_id=self.org_id)
        self.channel = channel or ReleaseProgressChannel()
        self.task_manager = task_manager or TaskManager()
        self.tables = tables or get_scoring_tables()
        self.enricher = build_brief_enricher() if enricher is _UNSET else enricher

    async def generate_release(
        self,
        brief: GenerationInput,
        *,
        user_id: str | None = None,
    ) -> GeneratedRelease:
        """Validate, enforce quota, create the ``draft`` row, then generate."""
        validate_generation_input(brief)
        await enforce_org_quota_or_throw(self.session, self.org_id)

        release = await self.repository.create_release(brief=brief, user_id=user_id)
        return await self.run_generation(str(release.id), brief)

    async def regenerate_release(self, release_id: str) -> GeneratedRelease:
        """Re-run generation for an existing release from its stored brief."""
        release = await self.repository.get_release_or_raise(release_id)
        brief = validate_generation_input(GenerationInput.from_mapping(release.input_json))
        await enforce_org_quota_or_throw(
            self.session,
            self.org_id,
            exclude_release_id=str(release.id),
        )
        return await self.run_generation(str(release.id), brief)

    async def run_generation(self, release_id: str, brief: GenerationInput) -> GeneratedRelease:
        """Run all stages, publishing progress; a stage failure marks the release ``error``."""
        await self.repository.update_status(release_id, "generating")
        await self._emit(ProgressEvent.started(release_id))
        logger.info(
            "Press release generation started",
            extra={"org_id": self.org_id, "release_id": release_id, "news_type": brief.news_type},
        )

        timings: dict[str, float] = {}
        stage = "context"
        try:
            started = time.perf_counter()
            context = await ContextAssembler(
                self.session,
                tables=self.tables,
                enricher=self.enricher,
            ).assemble_context(self.org_id, brief)
            await self._finish_stage(release_id, stage, started, timings)

            stage = "angles"
            started = time.perf_counter()
            angles = find_angles(context, self.tables)
            await self._finish_stage(release_id, stage, started, timings)

            stage = "headlines"
            started = time.perf_counter()
            headlines = generate_headlines(context, angles.selected_angle, self.tables)
            await self._finish_stage(release_id, stage, started, timings)

            stage = "draft"
            started = time.perf_counter()
            draft = generate_draft(context, angles.selected_angle, headlines.selected_headline, self.tables)
            await self._finish_stage(release_id, stage, started, timings)

            stage = "seo"
            started = time.perf_counter()
            seo_summary = calculate_seo_summary(draft.body, brief, self.tables)
            await self._finish_stage(release_id, stage, started, timings)
        except Exception as exc:
            raise await self._fail(release_id, stage, exc) from exc

        artifacts = PipelineArtifacts(
            context=context,
            angles=angles,
            headlines=headlines,
            draft=draft,
            seo_summary=seo_summary,
            stage_timings_ms=timings,
        )
        embeddings = await self._embed(release_id, draft.headline, draft.body)

        try:
            release = await self.repository.complete_release(
                release_id,
                artifacts,
                embeddings=embeddings,
            )
        except Exception as exc:
            raise await self._fail(release_id, PERSIST_STAGE, exc) from exc

        await self._emit(ProgressEvent.completed(release_id))
        logger.info(
            "Press release generation complete",
            extra={
                "org_id": self.org_id,
                "release_id": release_id,
                "angle": angles.selected_angle.angle_title,
                "headline_score": headlines.selected_headline.score,
                "word_count": draft.word_count,
                "readability_score": seo_summary.readability_score,
                "stage_timings_ms": timings,
            },
        )
        return release

    async def optimize_release(
        self,
        release_id: str,
    ) -> tuple[GeneratedRelease, OptimizationResult]:
        """Run the readability pass on a stored release and append it to its history."""
        release = await self.repository.get_release_or_raise(release_id)
        if release.status != "complete" or not release.body:
            raise ValidationError(
                f"Press release {release_id} has no completed draft to optimize",
                details={"status": release.status},
            )
        brief = GenerationInput.from_mapping(release.input_json)
        result = optimize_release_text(release.headline, release.body, brief, tables=self.tables)
        updated = await self.repository.save_optimization(release_id, result)
        logger.info(
            "Press release optimized",
            extra={
                "org_id": self.org_id,
                "release_id": release_id,
                "before_score": result.entry.before_score,
                "after_score": result.entry.after_score,
                "change_count": len(result.entry.changes),
            },
        )
        return updated, result

    async def _finish_stage(
        self,
        release_id: str,
        stage: str,
        started: float,
        timings: dict[str, float],
    ) -> None:
        timings[stage] = round((time.perf_counter() - started) * 1000, 2)
        logger.debug(
            "Release stage finished",
            extra={"release_id": release_id, "stage": stage, "duration_ms": timings[stage]},
        )
        await self._emit(ProgressEvent.stage(release_id, stage))

    async def _fail(self, release_id: str, stage: str, exc: Exception) -> GenerationError:
        message = exc.message if isinstance(exc, PressroomError) else str(exc) or type(exc).__name__
        error = GenerationError(stage, message)
        logger.warning(
            "Press release generation failed",
            extra={"org_id": self.org_id, "release_id": release_id, "stage": stage},
            exc_info=True,
        )
        try:
            await self.repository.update_status(
                release_id,
                "error",
                error_message=message,
                error_stage=stage,
            )
        except Exception:
            logger.exception(
                "Failed to mark press release as errored",
                extra={"release_id": release_id, "stage": stage},
            )
        await self._emit(ProgressEvent.failed(release_id, error.message, step=stage))
        return error

    async def _embed(self, release_id: str, headline: str, body: str) -> list[float] | None:
        try:
            return await compute_release_embedding(headline, body)
        except Exception:
            logger.warning(
                "Skipping release embeddings",
                extra={"release_id": release_id},
                exc_info=True,
            )
            return None

    async def _emit(self, event: ProgressEvent) -> None:
        await self.channel.publish(event)
        await self.task_manager.record_event(event, org_id=self.org_id)
