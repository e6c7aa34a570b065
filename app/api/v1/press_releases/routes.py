"""Press release API endpoints."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from datetime import date

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from app.api.v1.press_releases.constants import (
    DEFAULT_LIMIT,
    GENERATION_FAILED_DETAIL,
    INVALID_DATE_RANGE_DETAIL,
    MAX_LIMIT,
    MAX_SIMILAR_LIMIT,
    OPTIMIZATION_FAILED_DETAIL,
    ORGANIZATION_NOT_FOUND_DETAIL,
    PRESS_RELEASE_NOT_FOUND_DETAIL,
    QUOTA_EXCEEDED_DETAIL,
    SSE_HEADERS,
    SSE_MEDIA_TYPE,
)
from app.config import settings
from app.core.exceptions import (
    GenerationError,
    InvalidStatusTransitionError,
    OrganizationNotFoundError,
    QuotaExceededError,
    ReleaseNotFoundError,
    ValidationError,
)
from app.dependencies import CurrentOrg, DbSession
from app.models.press_release import GeneratedRelease
from app.repositories.press_release_repository import PressReleaseRepository
from app.schemas.press_release import (
    OptimizationEntryResponse,
    PressReleaseDetailResponse,
    PressReleaseGenerateRequest,
    PressReleaseGenerateResponse,
    PressReleaseListResponse,
    PressReleaseOptimizeResponse,
    PressReleaseResponse,
    PressReleaseStatusUpdate,
    ReleaseStatusLiteral,
    SemanticDiffRequest,
    SemanticDiffResponse,
    SEOSummaryRequest,
    SEOSummaryResponse,
    SimilarReleaseResponse,
)
from app.schemas.task import TaskStatusResponse
from app.services.press_release.diff import compute_semantic_diff
from app.services.press_release.progress import (
    STAGE_ORDER,
    ProgressEvent,
    ReleaseProgressChannel,
)
from app.services.press_release.seo import calculate_seo_summary
from app.services.press_release.types import GenerationInput
from app.services.press_release_orchestrator import PressReleaseOrchestrator
from app.services.release_similarity import find_similar_releases
from app.services.task_manager import TaskManager

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=PRESS_RELEASE_NOT_FOUND_DETAIL,
    )


def _validation_failed(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": exc.message, **exc.details},
    )


def _generation_failed(exc: GenerationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": GENERATION_FAILED_DETAIL, "stage": exc.stage, "error": exc.message},
    )


def _invalid_transition(exc: InvalidStatusTransitionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"message": exc.message, **exc.details},
    )


def _quota_exceeded(exc: QuotaExceededError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        detail={"message": QUOTA_EXCEEDED_DETAIL, **exc.details},
    )


def _format_sse(event: ProgressEvent) -> str:
    return f"event: {event.type}\ndata: {event.to_json()}\n\n"


def _terminal_event_for(release: GeneratedRelease) -> ProgressEvent | None:
    if release.status == "complete":
        return ProgressEvent.completed(str(release.id))
    if release.status == "error":
        return ProgressEvent.failed(
            str(release.id),
            release.error_message or GENERATION_FAILED_DETAIL,
            step=release.error_stage,
        )
    return None


def _snapshot_from_release(release: GeneratedRelease) -> TaskStatusResponse:
    completed_steps = len(STAGE_ORDER) if release.status == "complete" else 0
    return TaskStatusResponse(
        task_id=str(release.id),
        status=release.status,
        org_id=str(release.org_id),
        stage=release.error_stage,
        current_step_name=release.error_stage,
        completed_steps=completed_steps,
        total_steps=len(STAGE_ORDER),
        progress_percent=100.0 if release.status == "complete" else 0.0,
        error_message=release.error_message,
        created_at=release.created_at,
        updated_at=release.updated_at,
    )


@router.post(
    "/generate",
    response_model=PressReleaseGenerateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_press_release(
    request: PressReleaseGenerateRequest,
    org: CurrentOrg,
    session: DbSession,
) -> PressReleaseGenerateResponse:
    """Generate a press release from an announcement brief."""
    orchestrator = PressReleaseOrchestrator(session, org.org_id)
    try:
        release = await orchestrator.generate_release(
            request.to_generation_input(),
            user_id=org.user_id,
        )
    except ValidationError as exc:
        raise _validation_failed(exc) from exc
    except QuotaExceededError as exc:
        raise _quota_exceeded(exc) from exc
    except OrganizationNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ORGANIZATION_NOT_FOUND_DETAIL,
        ) from exc
    except GenerationError as exc:
        raise _generation_failed(exc) from exc

    return PressReleaseGenerateResponse(
        id=str(release.id),
        status=release.status,
        headline=release.headline,
        word_count=release.word_count,
    )


@router.get("/", response_model=PressReleaseListResponse)
async def list_press_releases(
    org: CurrentOrg,
    session: DbSession,
    status_filter: ReleaseStatusLiteral | None = Query(None, alias="status"),
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    offset: int = Query(0, ge=0),
) -> PressReleaseListResponse:
    """List the organization's releases, newest first."""
    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=INVALID_DATE_RANGE_DETAIL,
        )

    repository = PressReleaseRepository(org_id=org.org_id, session=session)
    items, total = await repository.list_releases(
        status=status_filter,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return PressReleaseListResponse(
        items=[PressReleaseResponse.model_validate(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/diff", response_model=SemanticDiffResponse)
async def diff_press_release_text(
    request: SemanticDiffRequest,
    org: CurrentOrg,
) -> SemanticDiffResponse:
    """Compare two versions of a text sentence by sentence."""
    return SemanticDiffResponse.from_diff(
        compute_semantic_diff(request.original, request.rewritten)
    )


@router.post("/seo-summary", response_model=SEOSummaryResponse)
async def summarize_press_release_seo(
    request: SEOSummaryRequest,
    org: CurrentOrg,
) -> SEOSummaryResponse:
    """Score arbitrary body text for keywords and readability."""
    brief = GenerationInput.from_mapping({"target_keywords": request.target_keywords})
    return SEOSummaryResponse.from_summary(calculate_seo_summary(request.body, brief))


@router.get("/{release_id}", response_model=PressReleaseDetailResponse)
async def get_press_release(
    release_id: str,
    org: CurrentOrg,
    session: DbSession,
) -> PressReleaseDetailResponse:
    """Get a release with its angle and headline audit trail."""
    repository = PressReleaseRepository(org_id=org.org_id, session=session)
    release = await repository.get_release(release_id)
    if release is None:
        raise _not_found()
    return PressReleaseDetailResponse.model_validate(release)


@router.patch("/{release_id}/status", response_model=PressReleaseDetailResponse)
async def update_press_release_status(
    release_id: str,
    request: PressReleaseStatusUpdate,
    org: CurrentOrg,
    session: DbSession,
) -> PressReleaseDetailResponse:
    """Move a release to another status when the transition is allowed."""
    repository = PressReleaseRepository(org_id=org.org_id, session=session)
    try:
        release = await repository.update_status(
            release_id,
            request.status,
            error_message=request.error_message,
            error_stage="manual" if request.status == "error" else None,
        )
    except ReleaseNotFoundError as exc:
        raise _not_found() from exc
    except InvalidStatusTransitionError as exc:
        raise _invalid_transition(exc) from exc
    except ValidationError as exc:
        raise _validation_failed(exc) from exc
    return PressReleaseDetailResponse.model_validate(release)


@router.post("/{release_id}/regenerate", response_model=PressReleaseGenerateResponse)
async def regenerate_press_release(
    release_id: str,
    org: CurrentOrg,
    session: DbSession,
) -> PressReleaseGenerateResponse:
    """Run generation again from the release's stored brief."""
    orchestrator = PressReleaseOrchestrator(session, org.org_id)
    try:
        release = await orchestrator.regenerate_release(release_id)
    except ReleaseNotFoundError as exc:
        raise _not_found() from exc
    except InvalidStatusTransitionError as exc:
        raise _invalid_transition(exc) from exc
    except ValidationError as exc:
        raise _validation_failed(exc) from exc
    except QuotaExceededError as exc:
        raise _quota_exceeded(exc) from exc
    except OrganizationNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ORGANIZATION_NOT_FOUND_DETAIL,
        ) from exc
    except GenerationError as exc:
        raise _generation_failed(exc) from exc

    return PressReleaseGenerateResponse(
        id=str(release.id),
        status=release.status,
        headline=release.headline,
        word_count=release.word_count,
    )


@router.post("/{release_id}/optimize", response_model=PressReleaseOptimizeResponse)
async def optimize_press_release(
    release_id: str,
    org: CurrentOrg,
    session: DbSession,
) -> PressReleaseOptimizeResponse:
    """Apply the readability pass and record it in the optimization history."""
    orchestrator = PressReleaseOrchestrator(
        session,
        org.org_id,
        repository=PressReleaseRepository(org_id=org.org_id, session=session),
        enricher=None,
    )
    try:
        release, result = await orchestrator.optimize_release(release_id)
    except ReleaseNotFoundError as exc:
        raise _not_found() from exc
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=OPTIMIZATION_FAILED_DETAIL,
        ) from exc

    return PressReleaseOptimizeResponse(
        release=PressReleaseDetailResponse.model_validate(release),
        changes=OptimizationEntryResponse.from_entry(result.entry),
        seo_summary=SEOSummaryResponse.from_summary(result.seo_after),
    )


@router.get("/{release_id}/similar", response_model=list[SimilarReleaseResponse])
async def list_similar_press_releases(
    release_id: str,
    org: CurrentOrg,
    session: DbSession,
    limit: int = Query(settings.similarity_default_limit, ge=1, le=MAX_SIMILAR_LIMIT),
) -> list[SimilarReleaseResponse]:
    """Releases of the same organization with the closest embeddings."""
    repository = PressReleaseRepository(org_id=org.org_id, session=session)
    try:
        matches = await find_similar_releases(repository, release_id, limit=limit)
    except ReleaseNotFoundError as exc:
        raise _not_found() from exc
    return [SimilarReleaseResponse.model_validate(match) for match in matches]


@router.get("/{release_id}/progress", response_model=TaskStatusResponse)
async def get_press_release_progress(
    release_id: str,
    org: CurrentOrg,
    session: DbSession,
) -> TaskStatusResponse:
    """Latest generation progress snapshot for a release."""
    repository = PressReleaseRepository(org_id=org.org_id, session=session)
    release = await repository.get_release(release_id)
    if release is None:
        raise _not_found()

    snapshot = await TaskManager().get_task_status(str(release.id))
    if snapshot is None:
        return _snapshot_from_release(release)
    return TaskStatusResponse.model_validate(snapshot)


@router.get("/{release_id}/stream")
async def stream_press_release_progress(
    release_id: str,
    org: CurrentOrg,
    session: DbSession,
) -> StreamingResponse:
    """Server-sent events for one release until generation completes or fails."""
    repository = PressReleaseRepository(org_id=org.org_id, session=session)
    release = await repository.get_release(release_id)
    if release is None:
        raise _not_found()

    terminal = _terminal_event_for(release)
    channel = ReleaseProgressChannel()
    task_manager = TaskManager()
    heartbeat = float(settings.progress_stream_heartbeat_seconds)

    async def _events() -> AsyncIterator[str]:
        if terminal is not None:
            yield _format_sse(terminal)
            return

        async with channel.subscribe(release_id) as subscription:
            # Generation may have ended between the status read and the subscribe.
            snapshot = await task_manager.get_task_status(release_id)
            if snapshot and snapshot.get("status") in ("complete", "error"):
                if snapshot["status"] == "complete":
                    yield _format_sse(ProgressEvent.completed(release_id))
                else:
                    yield _format_sse(
                        ProgressEvent.failed(
                            release_id,
                            snapshot.get("error_message") or GENERATION_FAILED_DETAIL,
                            step=snapshot.get("current_step_name"),
                        )
                    )
                return

            loop = asyncio.get_running_loop()
            last_sent = loop.time()
            while not subscription.finished:
                event = await subscription.next_event(
                    timeout=settings.progress_poll_interval_seconds
                )
                if event is not None:
                    last_sent = loop.time()
                    yield _format_sse(event)
                elif loop.time() - last_sent >= heartbeat:
                    last_sent = loop.time()
                    yield ": heartbeat\n\n"

        logger.debug("Progress stream closed", extra={"release_id": release_id})

    return StreamingResponse(_events(), media_type=SSE_MEDIA_TYPE, headers=SSE_HEADERS)
