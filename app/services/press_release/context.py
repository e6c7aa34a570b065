"""Generation context assembly from a brief plus organization records."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.organization import AgentPersonality, Organization
from app.models.organization import SEOOpportunity as SEOOpportunityRow
from app.services.press_release.scoring_tables import ScoringTables, get_scoring_tables
from app.services.press_release.types import (
    CompanyFootprint,
    GenerationContext,
    GenerationInput,
    OrgProfile,
    PersonalityProfile,
    SEOOpportunity,
)

logger = logging.getLogger(__name__)

DEFAULT_COMPANY_NAME = "Company"
DEFAULT_INDUSTRY = "Technology"
DEFAULT_TONE = "professional"
DEFAULT_WRITING_STYLE = "formal"


class BriefEnrichment(Protocol):
    """Optional enrichment source (e.g. an LLM agent) for trends and competitors."""

    async def enrich(self, context: GenerationContext) -> tuple[tuple[str, ...], tuple[str, ...]]:
        ...


def dedupe_preserving_order(values: Iterable[str]) -> tuple[str, ...]:
    """Drop blanks and case-insensitive duplicates; first spelling wins."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        cleaned = value.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return tuple(result)


def build_company_footprint(
    brief: GenerationInput,
    org_profile: OrgProfile | None = None,
    *,
    default_headquarters: str | None = None,
) -> CompanyFootprint:
    """Resolve company identity from the brief first, then the org record."""
    org = org_profile or OrgProfile()
    name = brief.company_name or org.name or DEFAULT_COMPANY_NAME
    description = brief.company_description or org.description or ""
    industry = brief.industry or org.industry or DEFAULT_INDUSTRY
    headquarters = (
        brief.headquarters
        or org.headquarters
        or default_headquarters
        or settings.default_dateline_location
    )

    if description:
        boilerplate = f"About {name}: {description}"
    else:
        boilerplate = (
            f"About {name}: {name} is a leading organization in its industry, "
            "committed to innovation and excellence."
        )

    return CompanyFootprint(
        name=name,
        description=description,
        industry=industry,
        headquarters=headquarters,
        boilerplate=boilerplate,
    )


def build_generation_context(
    brief: GenerationInput,
    *,
    org_profile: OrgProfile | None = None,
    personality: PersonalityProfile | None = None,
    seo_opportunities: Iterable[SEOOpportunity] = (),
    tables: ScoringTables | None = None,
) -> GenerationContext:
    """Build the read-only context every later stage consumes.

    Pure: the same arguments always produce an equal context.
    """
    tables = tables or get_scoring_tables()
    opportunities = tuple(seo_opportunities)

    return GenerationContext(
        input=brief,
        company_footprint=build_company_footprint(brief, org_profile),
        seo_keywords=dedupe_preserving_order(
            [*brief.target_keywords, *(item.keyword for item in opportunities)]
        ),
        seo_opportunities=opportunities,
        industry_trends=tables.trends_for(brief.news_type),
        personality=personality,
        competitor_context=dedupe_preserving_order(brief.competitor_mentions),
    )


def personality_from_row(row: AgentPersonality) -> PersonalityProfile:
    voice_attributes = row.voice_attributes if isinstance(row.voice_attributes, list) else []
    return PersonalityProfile(
        id=str(row.id),
        name=row.name,
        tone=row.tone or DEFAULT_TONE,
        voice_attributes=tuple(str(item) for item in voice_attributes),
        writing_style=row.writing_style or DEFAULT_WRITING_STYLE,
    )


def opportunity_from_row(row: SEOOpportunityRow) -> SEOOpportunity:
    return SEOOpportunity(
        keyword=row.keyword,
        search_volume=int(row.search_volume or 0),
        difficulty=float(row.difficulty if row.difficulty is not None else 50.0),
        relevance=float(row.relevance if row.relevance is not None else 0.5),
    )


class ContextAssembler:
    """Resolve organization records and build a generation context."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        tables: ScoringTables | None = None,
        enricher: BriefEnrichment | None = None,
    ) -> None:
        self.session = session
        self.tables = tables
        self.enricher = enricher

    async def assemble_context(self, org_id: str, brief: GenerationInput) -> GenerationContext:
        org_profile = await self._load_org_profile(org_id)
        personality = await self._load_personality(org_id, brief.personality_id)
        opportunities = await self._load_seo_opportunities(org_id)

        context = build_generation_context(
            brief,
            org_profile=org_profile,
            personality=personality,
            seo_opportunities=opportunities,
            tables=self.tables,
        )

        if self.enricher is not None:
            context = await self._enrich(self.enricher, context)
        return context

    async def _load_org_profile(self, org_id: str) -> OrgProfile | None:
        try:
            org = await self.session.get(Organization, org_id)
        except SQLAlchemyError:
            logger.warning(
                "Organization lookup failed; using brief data only",
                extra={"org_id": org_id},
                exc_info=True,
            )
            return None
        if org is None:
            return None
        return OrgProfile(
            name=org.name,
            description=org.description,
            industry=org.industry,
            headquarters=org.headquarters,
        )

    async def _load_personality(
        self,
        org_id: str,
        personality_id: str | None,
    ) -> PersonalityProfile | None:
        if not personality_id:
            return None
        try:
            result = await self.session.execute(
                select(AgentPersonality).where(
                    AgentPersonality.id == personality_id,
                    AgentPersonality.org_id == org_id,
                )
            )
            row = result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.warning(
                "Personality lookup failed",
                extra={"org_id": org_id, "personality_id": personality_id},
                exc_info=True,
            )
            return None
        if row is None:
            logger.info(
                "Personality not found for organization",
                extra={"org_id": org_id, "personality_id": personality_id},
            )
            return None
        return personality_from_row(row)

    async def _load_seo_opportunities(self, org_id: str) -> list[SEOOpportunity]:
        try:
            result = await self.session.execute(
                select(SEOOpportunityRow)
                .where(SEOOpportunityRow.org_id == org_id)
                .order_by(
                    SEOOpportunityRow.relevance.desc().nulls_last(),
                    SEOOpportunityRow.search_volume.desc().nulls_last(),
                    SEOOpportunityRow.keyword.asc(),
                )
                .limit(settings.seo_opportunity_lookup_limit)
            )
            rows = list(result.scalars().all())
        except SQLAlchemyError:
            logger.warning(
                "SEO opportunity lookup failed",
                extra={"org_id": org_id},
                exc_info=True,
            )
            return []
        return [opportunity_from_row(row) for row in rows if row.keyword]

    async def _enrich(
        self,
        enricher: BriefEnrichment,
        context: GenerationContext,
    ) -> GenerationContext:
        try:
            trends, competitors = await enricher.enrich(context)
        except Exception:
            logger.warning(
                "Brief enrichment failed; continuing without it",
                extra={"company": context.company_footprint.name},
                exc_info=True,
            )
            return context
        return context.with_enrichment(industry_trends=trends, competitor_context=competitors)
