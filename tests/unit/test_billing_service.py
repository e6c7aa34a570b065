"""Unit tests for plan limits and usage windows."""

from __future__ import annotations

from datetime import datetime, timezone

from app.services.billing import (
    FREE_LIFETIME_RELEASE_LIMIT,
    MONTHLY_RELEASE_LIMITS,
    normalize_plan,
    resolve_release_limit,
    resolve_usage_window,
)


def test_normalize_plan_requires_known_plan_and_active_status() -> None:
    assert normalize_plan("growth") == "growth"
    assert normalize_plan("growth", "trialing") == "growth"
    assert normalize_plan("agency", "past_due") == "agency"
    assert normalize_plan("growth", "canceled") is None
    assert normalize_plan("enterprise", "active") is None
    assert normalize_plan(None) is None


def test_release_limits_by_plan() -> None:
    assert resolve_release_limit(None) == FREE_LIFETIME_RELEASE_LIMIT == 3
    assert resolve_release_limit("starter") == MONTHLY_RELEASE_LIMITS["starter"] == 10
    assert resolve_release_limit("growth") == 50
    assert resolve_release_limit("agency") == 200


def test_usage_window_is_lifetime_for_free_orgs() -> None:
    window = resolve_usage_window(None)

    assert window.kind == "lifetime"
    assert window.period_start is None
    assert window.period_end is None


def test_usage_window_is_calendar_month_for_paid_plans() -> None:
    window = resolve_usage_window("starter", now=datetime(2025, 12, 18, 9, 30, tzinfo=timezone.utc))

    assert window.kind == "monthly"
    assert window.period_start == datetime(2025, 12, 1, tzinfo=timezone.utc)
    assert window.period_end == datetime(2026, 1, 1, tzinfo=timezone.utc)

    mid_year = resolve_usage_window("growth", now=datetime(2025, 6, 1, tzinfo=timezone.utc))
    assert mid_year.period_end == datetime(2025, 7, 1, tzinfo=timezone.utc)
