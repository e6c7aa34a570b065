"""Unit tests for the press release generation orchestrator."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from app.core.exceptions import GenerationError, QuotaExceededError, ValidationError
from app.services.press_release.context import build_generation_context
from app.services.press_release.progress import ProgressEvent
from app.services.press_release_orchestrator import PressReleaseOrchestrator


class _FakeRepository:
    def __init__(self, *, fail_complete: bool = False) -> None:
        self.release = SimpleNamespace(
            id="rel-1",
            status="draft",
            input_json={},
            headline=None,
            body=None,
            optimization_history=None,
        )
        self.status_calls: list[tuple[str, str | None]] = []
        self.artifacts: Any = None
        self.embeddings: Any = None
        self.fail_complete = fail_complete
        self.optimizations: list[Any] = []

    async def create_release(self, *, brief: Any, user_id: str | None = None) -> Any:
        self.release.input_json = brief.to_dict()
        self.release.user_id = user_id
        return self.release

    async def get_release_or_raise(self, release_id: str) -> Any:
        return self.release

    async def update_status(
        self,
        release_id: str,
        status: str,
        *,
        error_message: str | None = None,
        error_stage: str | None = None,
    ) -> Any:
        self.status_calls.append((status, error_stage))
        self.release.status = status
        self.release.error_message = error_message
        return self.release

    async def complete_release(self, release_id: str, artifacts: Any, *, embeddings: Any = None) -> Any:
        if self.fail_complete:
            raise RuntimeError("disk full")
        self.artifacts = artifacts
        self.embeddings = embeddings
        self.release.status = "complete"
        self.release.headline = artifacts.draft.headline
        self.release.body = artifacts.draft.body
        return self.release

    async def save_optimization(self, release_id: str, result: Any) -> Any:
        self.optimizations.append(result)
        self.release.headline = result.headline
        self.release.body = result.body
        return self.release


class _FakeChannel:
    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []

    async def publish(self, event: ProgressEvent) -> int:
        self.events.append(event)
        return 1


class _FakeTaskManager:
    def __init__(self) -> None:
        self.events: list[tuple[ProgressEvent, str | None]] = []

    async def record_event(self, event: ProgressEvent, *, org_id: str | None = None) -> None:
        self.events.append((event, org_id))


class _FakeAssembler:
    def __init__(self, session: Any, **_kwargs: Any) -> None:
        self.session = session

    async def assemble_context(self, org_id: str, brief: Any) -> Any:
        return build_generation_context(brief)


@pytest.fixture
def patched_collaborators(monkeypatch: pytest.MonkeyPatch) -> dict[str, Any]:
    calls: dict[str, Any] = {"quota": []}

    async def fake_quota(session: Any, org_id: str, *, exclude_release_id: str | None = None) -> None:
        calls["quota"].append((org_id, exclude_release_id))

    async def fake_embedding(headline: str, body: str) -> list[float]:
        return [0.1, 0.2, 0.3]

    monkeypatch.setattr(
        "app.services.press_release_orchestrator.enforce_org_quota_or_throw",
        fake_quota,
    )
    monkeypatch.setattr(
        "app.services.press_release_orchestrator.compute_release_embedding",
        fake_embedding,
    )
    monkeypatch.setattr(
        "app.services.press_release_orchestrator.ContextAssembler",
        _FakeAssembler,
    )
    return calls


def _orchestrator(repository: _FakeRepository) -> tuple[PressReleaseOrchestrator, _FakeChannel, _FakeTaskManager]:
    channel = _FakeChannel()
    task_manager = _FakeTaskManager()
    orchestrator = PressReleaseOrchestrator(
        object(),  # type: ignore[arg-type]
        "org-1",
        repository=repository,  # type: ignore[arg-type]
        channel=channel,  # type: ignore[arg-type]
        task_manager=task_manager,  # type: ignore[arg-type]
        enricher=None,
    )
    return orchestrator, channel, task_manager


@pytest.mark.asyncio
async def test_generate_release_runs_all_stages_in_order(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
) -> None:
    repository = _FakeRepository()
    orchestrator, channel, task_manager = _orchestrator(repository)

    release = await orchestrator.generate_release(make_brief(), user_id="user-1")

    assert release.status == "complete"
    assert repository.status_calls == [("generating", None)]
    assert patched_collaborators["quota"] == [("org-1", None)]
    assert [(event.type, event.step) for event in channel.events] == [
        ("started", None),
        ("progress", "context"),
        ("progress", "angles"),
        ("progress", "headlines"),
        ("progress", "draft"),
        ("progress", "seo"),
        ("completed", None),
    ]
    assert [event for event, _org in task_manager.events] == channel.events
    assert repository.embeddings == [0.1, 0.2, 0.3]

    artifacts = repository.artifacts
    assert set(artifacts.stage_timings_ms) == {"context", "angles", "headlines", "draft", "seo"}
    assert artifacts.draft.headline == artifacts.headlines.selected_headline.headline
    assert artifacts.draft.word_count > 0


@pytest.mark.asyncio
async def test_generate_release_rejects_invalid_brief_before_any_write(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
) -> None:
    repository = _FakeRepository()
    orchestrator, channel, _task_manager = _orchestrator(repository)

    with pytest.raises(ValidationError):
        await orchestrator.generate_release(make_brief(announcement=""))

    assert patched_collaborators["quota"] == []
    assert repository.status_calls == []
    assert channel.events == []


@pytest.mark.asyncio
async def test_generate_release_propagates_quota_errors(
    make_brief: Any,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def exhausted(session: Any, org_id: str, *, exclude_release_id: str | None = None) -> None:
        raise QuotaExceededError(org_id, limit=3, used=3)

    monkeypatch.setattr(
        "app.services.press_release_orchestrator.enforce_org_quota_or_throw",
        exhausted,
    )
    repository = _FakeRepository()
    orchestrator, _channel, _task_manager = _orchestrator(repository)

    with pytest.raises(QuotaExceededError):
        await orchestrator.generate_release(make_brief())

    assert repository.status_calls == []


@pytest.mark.asyncio
async def test_stage_failure_marks_release_error_with_stage(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def broken_headlines(*_args: Any, **_kwargs: Any) -> Any:
        raise RuntimeError("template exploded")

    monkeypatch.setattr(
        "app.services.press_release_orchestrator.generate_headlines",
        broken_headlines,
    )
    repository = _FakeRepository()
    orchestrator, channel, _task_manager = _orchestrator(repository)

    with pytest.raises(GenerationError) as exc_info:
        await orchestrator.generate_release(make_brief())

    assert exc_info.value.stage == "headlines"
    assert repository.status_calls == [("generating", None), ("error", "headlines")]
    assert repository.release.error_message == "template exploded"
    assert channel.events[-1].type == "failed"
    assert channel.events[-1].step == "headlines"
    assert repository.artifacts is None


@pytest.mark.asyncio
async def test_persist_failure_is_reported_as_persist_stage(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
) -> None:
    repository = _FakeRepository(fail_complete=True)
    orchestrator, channel, _task_manager = _orchestrator(repository)

    with pytest.raises(GenerationError) as exc_info:
        await orchestrator.generate_release(make_brief())

    assert exc_info.value.stage == "persist"
    assert repository.status_calls[-1] == ("error", "persist")
    assert channel.events[-1].type == "failed"


@pytest.mark.asyncio
async def test_embedding_failure_does_not_fail_generation(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def broken_embedding(headline: str, body: str) -> list[float]:
        raise RuntimeError("embeddings offline")

    monkeypatch.setattr(
        "app.services.press_release_orchestrator.compute_release_embedding",
        broken_embedding,
    )
    repository = _FakeRepository()
    orchestrator, _channel, _task_manager = _orchestrator(repository)

    release = await orchestrator.generate_release(make_brief())

    assert release.status == "complete"
    assert repository.embeddings is None


@pytest.mark.asyncio
async def test_regenerate_release_reuses_stored_brief_and_excludes_itself_from_quota(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
) -> None:
    repository = _FakeRepository()
    repository.release.status = "error"
    repository.release.input_json = make_brief(news_type="funding").to_dict()
    orchestrator, _channel, _task_manager = _orchestrator(repository)

    release = await orchestrator.regenerate_release("rel-1")

    assert release.status == "complete"
    assert patched_collaborators["quota"] == [("org-1", "rel-1")]
    assert repository.artifacts.context.input.news_type == "funding"


@pytest.mark.asyncio
async def test_generation_is_deterministic_for_the_same_brief(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
) -> None:
    first_repository = _FakeRepository()
    second_repository = _FakeRepository()

    await _orchestrator(first_repository)[0].generate_release(make_brief())
    await _orchestrator(second_repository)[0].generate_release(make_brief())

    first = first_repository.artifacts
    second = second_repository.artifacts
    assert first.angles == second.angles
    assert first.headlines == second.headlines
    assert first.draft == second.draft
    assert first.seo_summary == second.seo_summary


@pytest.mark.asyncio
async def test_optimize_release_appends_history(
    make_brief: Any,
    patched_collaborators: dict[str, Any],
) -> None:
    repository = _FakeRepository()
    orchestrator, _channel, _task_manager = _orchestrator(repository)
    await orchestrator.generate_release(make_brief())
    repository.release.body = "In order to help teams, Acme launched Rocket."

    release, result = await orchestrator.optimize_release("rel-1")

    assert release.body == "To help teams, Acme launched Rocket."
    assert repository.optimizations == [result]
    assert result.entry.type == "readability"


@pytest.mark.asyncio
async def test_optimize_release_requires_completed_draft(
    patched_collaborators: dict[str, Any],
) -> None:
    repository = _FakeRepository()
    orchestrator, _channel, _task_manager = _orchestrator(repository)

    with pytest.raises(ValidationError):
        await orchestrator.optimize_release("rel-1")
