"""Unit tests for press release quota accounting."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.core.exceptions import OrganizationNotFoundError, QuotaExceededError
from app.services.subscription_limits import (
    enforce_org_quota_or_throw,
    resolve_release_usage_for_org,
)


class _FakeResult:
    def __init__(self, one: tuple[object, object] | None) -> None:
        self._one = one

    def one_or_none(self) -> tuple[object, object] | None:
        return self._one


class _FakeSession:
    def __init__(self, *, org: tuple[object, object] | None, used: int = 0) -> None:
        self._org = org
        self._used = used
        self.scalar_queries: list[object] = []

    async def execute(self, _query: object) -> _FakeResult:
        return _FakeResult(self._org)

    async def scalar(self, query: object) -> int:
        self.scalar_queries.append(query)
        return self._used


@pytest.mark.asyncio
async def test_usage_for_paid_org_uses_monthly_window() -> None:
    session = _FakeSession(org=("growth", "active"), used=12)

    usage = await resolve_release_usage_for_org(
        session=session,  # type: ignore[arg-type]
        org_id="org-1",
        now=datetime(2025, 3, 15, tzinfo=timezone.utc),
    )

    assert usage.plan == "growth"
    assert usage.release_limit == 50
    assert usage.used_releases == 12
    assert usage.remaining_release_slots == 38
    assert usage.usage_window.kind == "monthly"
    assert usage.usage_window.period_start == datetime(2025, 3, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_usage_for_lapsed_subscription_falls_back_to_free() -> None:
    session = _FakeSession(org=("agency", "canceled"), used=5)

    usage = await resolve_release_usage_for_org(session=session, org_id="org-1")  # type: ignore[arg-type]

    assert usage.plan is None
    assert usage.release_limit == 3
    assert usage.remaining_release_slots == 0
    assert usage.usage_window.kind == "lifetime"


@pytest.mark.asyncio
async def test_usage_excludes_given_release_from_count() -> None:
    session = _FakeSession(org=(None, None), used=1)

    await resolve_release_usage_for_org(
        session=session,  # type: ignore[arg-type]
        org_id="org-1",
        exclude_release_id="rel-9",
    )

    compiled = str(session.scalar_queries[0])
    assert "pr_generated_releases.id !=" in compiled


@pytest.mark.asyncio
async def test_unknown_org_raises() -> None:
    with pytest.raises(OrganizationNotFoundError):
        await resolve_release_usage_for_org(session=_FakeSession(org=None), org_id="missing")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_enforce_quota_raises_when_no_slots_left() -> None:
    with pytest.raises(QuotaExceededError) as exc_info:
        await enforce_org_quota_or_throw(_FakeSession(org=(None, None), used=3), "org-1")  # type: ignore[arg-type]

    assert exc_info.value.details == {"limit": 3, "used": 3}


@pytest.mark.asyncio
async def test_enforce_quota_returns_usage_with_capacity() -> None:
    usage = await enforce_org_quota_or_throw(_FakeSession(org=("starter", None), used=4), "org-1")  # type: ignore[arg-type]

    assert usage.remaining_release_slots == 6
