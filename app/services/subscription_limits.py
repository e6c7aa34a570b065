"""Press release usage snapshots and the pre-generation quota guard."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import OrganizationNotFoundError, QuotaExceededError
from app.models.organization import Organization
from app.models.press_release import GeneratedRelease
from app.services.billing import (
    PlanKey,
    UsageWindow,
    normalize_plan,
    resolve_release_limit,
    resolve_usage_window,
)

logger = logging.getLogger(__name__)

# Failed runs do not consume quota.
COUNTED_RELEASE_STATUSES: tuple[str, ...] = ("draft", "generating", "complete")


@dataclass(frozen=True)
class ReleaseUsageSnapshot:
    """Usage/capacity snapshot for one organization."""

    plan: PlanKey | None
    usage_window: UsageWindow
    release_limit: int
    used_releases: int
    remaining_release_slots: int


async def resolve_release_usage_for_org(
    *,
    session: AsyncSession,
    org_id: str,
    exclude_release_id: str | None = None,
    now: datetime | None = None,
) -> ReleaseUsageSnapshot:
    """Resolve current usage and remaining capacity for one organization."""
    org_result = await session.execute(
        select(Organization.subscription_plan, Organization.subscription_status)
        .where(Organization.id == org_id)
        .limit(1)
    )
    org = org_result.one_or_none()
    if org is None:
        raise OrganizationNotFoundError(org_id)

    subscription_plan, subscription_status = org
    plan = normalize_plan(
        str(subscription_plan) if subscription_plan is not None else None,
        str(subscription_status) if subscription_status is not None else None,
    )
    usage_window = resolve_usage_window(plan, now=now)
    release_limit = resolve_release_limit(plan)

    used_query = (
        select(func.count())
        .select_from(GeneratedRelease)
        .where(
            GeneratedRelease.org_id == org_id,
            GeneratedRelease.status.in_(COUNTED_RELEASE_STATUSES),
        )
    )
    if usage_window.period_start is not None:
        used_query = used_query.where(GeneratedRelease.created_at >= usage_window.period_start)
    if usage_window.period_end is not None:
        used_query = used_query.where(GeneratedRelease.created_at < usage_window.period_end)
    if exclude_release_id:
        used_query = used_query.where(GeneratedRelease.id != exclude_release_id)
    used_releases = int(await session.scalar(used_query) or 0)

    return ReleaseUsageSnapshot(
        plan=plan,
        usage_window=usage_window,
        release_limit=release_limit,
        used_releases=used_releases,
        remaining_release_slots=max(release_limit - used_releases, 0),
    )


async def enforce_org_quota_or_throw(
    session: AsyncSession,
    org_id: str,
    *,
    exclude_release_id: str | None = None,
) -> ReleaseUsageSnapshot:
    """Raise ``QuotaExceededError`` when the organization has no slots left."""
    usage = await resolve_release_usage_for_org(
        session=session,
        org_id=org_id,
        exclude_release_id=exclude_release_id,
    )
    if usage.remaining_release_slots <= 0:
        logger.info(
            "Press release quota exceeded",
            extra={
                "org_id": org_id,
                "plan": usage.plan,
                "limit": usage.release_limit,
                "used": usage.used_releases,
            },
        )
        raise QuotaExceededError(org_id, limit=usage.release_limit, used=usage.used_releases)
    return usage
