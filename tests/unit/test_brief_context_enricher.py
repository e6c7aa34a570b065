"""Unit tests for the brief enrichment hook."""

from __future__ import annotations

from typing import Any

import pytest

from app.agents.brief_context_enricher import (
    BriefContextEnricher,
    BriefContextEnricherAgent,
    BriefContextInput,
    BriefContextOutput,
    build_brief_enricher,
)
from app.config import settings


class _FakeAgent:
    model_tier = "fast"

    def __init__(self, output: BriefContextOutput) -> None:
        self.output = output
        self.inputs: list[BriefContextInput] = []

    async def run(self, input_data: BriefContextInput) -> BriefContextOutput:
        self.inputs.append(input_data)
        return self.output


@pytest.mark.asyncio
async def test_enrich_normalizes_and_caps_agent_output(make_context: Any) -> None:
    agent = _FakeAgent(
        BriefContextOutput(
            industry_trends=["  Remote Work ", "", "AI Copilots", "Async Teams", "Calendar Fatigue"],
            competitors=["Calendly", " ", "Reclaim", "Motion", "Clockwise", "Doodle", "Cal.com"],
        )
    )
    enricher = BriefContextEnricher(agent)  # type: ignore[arg-type]
    context = make_context()

    trends, competitors = await enricher.enrich(context)

    assert trends == ("remote work", "ai copilots", "async teams")
    assert competitors == ("Calendly", "Reclaim", "Motion", "Clockwise", "Doodle")
    sent = agent.inputs[0]
    assert sent.company_name == "Acme"
    assert sent.news_type == "product_launch"
    assert sent.known_trends == list(context.industry_trends)


def test_agent_prompt_lists_known_context() -> None:
    agent = BriefContextEnricherAgent.__new__(BriefContextEnricherAgent)
    prompt = agent._build_prompt(
        BriefContextInput(
            company_name="Acme",
            industry="Software",
            news_type="funding",
            announcement="Series B",
            known_competitors=["Calendly"],
        )
    )

    assert "Company: Acme" in prompt
    assert "Description: n/a" in prompt
    assert "Known trends: none" in prompt
    assert "Known competitors: Calendly" in prompt


def test_build_brief_enricher_follows_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "brief_enrichment_enabled", False)
    assert build_brief_enricher() is None

    monkeypatch.setattr(settings, "brief_enrichment_enabled", True)
    assert isinstance(build_brief_enricher(), BriefContextEnricher)
