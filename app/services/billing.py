"""Billing plan limits and usage accounting windows."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, cast

PlanKey = Literal["starter", "growth", "agency"]

MONTHLY_RELEASE_LIMITS: dict[PlanKey, int] = {
    "starter": 10,
    "growth": 50,
    "agency": 200,
}
FREE_LIFETIME_RELEASE_LIMIT = 3

# Subscription statuses that still grant the paid plan's limits.
ACTIVE_SUBSCRIPTION_STATUSES: frozenset[str] = frozenset({"active", "trialing", "past_due"})


@dataclass(frozen=True)
class UsageWindow:
    """Usage accounting window metadata."""

    kind: Literal["monthly", "lifetime"]
    period_start: datetime | None
    period_end: datetime | None


def normalize_plan(value: str | None, status: str | None = None) -> PlanKey | None:
    """Normalize a raw plan to a known plan key; lapsed subscriptions count as free."""
    if value not in {"starter", "growth", "agency"}:
        return None
    if status is not None and status not in ACTIVE_SUBSCRIPTION_STATUSES:
        return None
    return cast(PlanKey, value)


def resolve_release_limit(plan: PlanKey | None) -> int:
    """Resolve press release generation limit for the plan."""
    if plan is None:
        return FREE_LIFETIME_RELEASE_LIMIT
    return MONTHLY_RELEASE_LIMITS.get(plan, FREE_LIFETIME_RELEASE_LIMIT)


def resolve_usage_window(plan: PlanKey | None, *, now: datetime | None = None) -> UsageWindow:
    """Resolve usage window for usage accounting."""
    if plan is None:
        return UsageWindow(kind="lifetime", period_start=None, period_end=None)

    now_utc = now or datetime.now(timezone.utc)
    start = datetime(
        year=now_utc.year,
        month=now_utc.month,
        day=1,
        tzinfo=timezone.utc,
    )
    if start.month == 12:
        end = datetime(year=start.year + 1, month=1, day=1, tzinfo=timezone.utc)
    else:
        end = datetime(year=start.year, month=start.month + 1, day=1, tzinfo=timezone.utc)
    return UsageWindow(kind="monthly", period_start=start, period_end=end)
