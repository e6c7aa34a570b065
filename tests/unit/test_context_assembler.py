"""Unit tests for generation context assembly."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from sqlalchemy.exc import OperationalError

from app.config import settings
from app.services.press_release.context import (
    ContextAssembler,
    build_company_footprint,
    build_generation_context,
)
from app.services.press_release.types import OrgProfile, SEOOpportunity


class _FakeScalars:
    def __init__(self, rows: list[Any]) -> None:
        self._rows = rows

    def all(self) -> list[Any]:
        return self._rows


class _FakeResult:
    def __init__(self, rows: list[Any]) -> None:
        self._rows = rows

    def scalars(self) -> _FakeScalars:
        return _FakeScalars(self._rows)

    def scalar_one_or_none(self) -> Any:
        return self._rows[0] if self._rows else None


class _FakeSession:
    def __init__(
        self,
        *,
        org: Any = None,
        execute_results: list[_FakeResult] | None = None,
        fail: bool = False,
    ) -> None:
        self._org = org
        self._execute_results = iter(execute_results or [])
        self._fail = fail

    async def get(self, _model: Any, _key: str) -> Any:
        if self._fail:
            raise OperationalError("SELECT", {}, Exception("connection refused"))
        return self._org

    async def execute(self, _query: Any) -> _FakeResult:
        if self._fail:
            raise OperationalError("SELECT", {}, Exception("connection refused"))
        return next(self._execute_results)


class _FakeEnricher:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail

    async def enrich(self, context: Any) -> tuple[tuple[str, ...], tuple[str, ...]]:
        if self.fail:
            raise RuntimeError("model unavailable")
        return ("Innovation", "edge computing"), ("Globex",)


def test_company_footprint_prefers_brief_over_org(make_brief: Any) -> None:
    org = OrgProfile(name="Acme Corp", description="Org text.", industry="Retail", headquarters="Boston, MA")

    footprint = build_company_footprint(make_brief(), org)

    assert footprint.name == "Acme"
    assert footprint.industry == "Software"
    assert footprint.headquarters == "Austin, TX"
    assert footprint.boilerplate == "About Acme: Acme builds productivity software for teams."


def test_company_footprint_falls_back_to_org_then_defaults(make_brief: Any) -> None:
    brief = make_brief(company_description=None, industry=None, headquarters=None)

    from_org = build_company_footprint(brief, OrgProfile(industry="Retail", headquarters="Boston, MA"))
    assert from_org.industry == "Retail"
    assert from_org.headquarters == "Boston, MA"

    defaults = build_company_footprint(brief)
    assert defaults.industry == "Technology"
    assert defaults.headquarters == settings.default_dateline_location
    assert defaults.boilerplate.startswith("About Acme: Acme is a leading organization")


def test_generation_context_merges_keywords_and_trends(make_brief: Any) -> None:
    brief = make_brief(
        news_type="funding",
        target_keywords=["AI scheduling", "calendar automation"],
        competitor_mentions=["Globex", "globex", "Initech"],
    )
    opportunities = [
        SEOOpportunity(keyword="ai scheduling"),
        SEOOpportunity(keyword="meeting software"),
    ]

    context = build_generation_context(brief, seo_opportunities=opportunities)

    assert context.seo_keywords == ("AI scheduling", "calendar automation", "meeting software")
    assert context.industry_trends == ("growth potential", "investor confidence", "market opportunity")
    assert context.competitor_context == ("Globex", "Initech")
    assert build_generation_context(brief, seo_opportunities=opportunities) == context


@pytest.mark.asyncio
async def test_assembler_loads_org_personality_and_opportunities(make_brief: Any) -> None:
    org = SimpleNamespace(name="Acme Corp", description=None, industry="Retail", headquarters="Denver, CO")
    personality = SimpleNamespace(
        id="pers-1",
        name="Bold",
        tone="casual",
        voice_attributes=["direct"],
        writing_style=None,
    )
    opportunity = SimpleNamespace(keyword="team calendars", search_volume=900, difficulty=None, relevance=0.9)
    session = _FakeSession(
        org=org,
        execute_results=[_FakeResult([personality]), _FakeResult([opportunity])],
    )
    brief = make_brief(personality_id="pers-1", industry=None, headquarters=None)

    context = await ContextAssembler(session).assemble_context("org-1", brief)  # type: ignore[arg-type]

    assert context.company_footprint.industry == "Retail"
    assert context.company_footprint.headquarters == "Denver, CO"
    assert context.personality is not None
    assert context.personality.tone == "casual"
    assert context.personality.writing_style == "formal"
    assert context.seo_keywords == ("AI scheduling", "team calendars")
    assert context.seo_opportunities[0].difficulty == 50.0


@pytest.mark.asyncio
async def test_assembler_falls_back_to_brief_when_lookups_fail(make_brief: Any) -> None:
    brief = make_brief(personality_id="pers-1")

    context = await ContextAssembler(_FakeSession(fail=True)).assemble_context(  # type: ignore[arg-type]
        "org-1",
        brief,
    )

    assert context == build_generation_context(brief)


@pytest.mark.asyncio
async def test_assembler_applies_enrichment_and_survives_enricher_failure(make_brief: Any) -> None:
    brief = make_brief()

    enriched = await ContextAssembler(
        _FakeSession(execute_results=[_FakeResult([])]),  # type: ignore[arg-type]
        enricher=_FakeEnricher(),
    ).assemble_context("org-1", brief)
    assert enriched.industry_trends == (
        "innovation",
        "market expansion",
        "customer demand",
        "edge computing",
    )
    assert enriched.competitor_context == ("Globex",)

    unchanged = await ContextAssembler(
        _FakeSession(execute_results=[_FakeResult([])]),  # type: ignore[arg-type]
        enricher=_FakeEnricher(fail=True),
    ).assemble_context("org-1", brief)
    assert unchanged == build_generation_context(brief)
