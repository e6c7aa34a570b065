"""Optional LLM enrichment of a brief's industry trends and competitors."""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, Field

from app.agents.base_agent import BaseAgent
from app.config import settings
from app.services.press_release.types import GenerationContext

logger = logging.getLogger(__name__)

MAX_EXTRA_TRENDS = 3
MAX_EXTRA_COMPETITORS = 5


class BriefContextInput(BaseModel):
    """Input payload for brief enrichment."""

    company_name: str
    company_description: str = ""
    industry: str
    news_type: str
    announcement: str
    known_trends: list[str] = Field(default_factory=list)
    known_competitors: list[str] = Field(default_factory=list)


class BriefContextOutput(BaseModel):
    """Extra context suggested by the model."""

    industry_trends: list[str] = Field(default_factory=list)
    competitors: list[str] = Field(default_factory=list)


class BriefContextEnricherAgent(BaseAgent[BriefContextInput, BriefContextOutput]):
    """Agent that proposes trend phrases and competitor names for a brief."""

    model_tier = "fast"
    temperature = 0.2

    @property
    def system_prompt(self) -> str:
        return """You support a PR team writing a press release.

Given a company, its industry and an announcement, return:
1. industry_trends: up to 3 short (2-4 word) lower-case trend phrases that make the news timely.
2. competitors: up to 5 well-known competitor company names in the same market.

Rules:
- Do not repeat phrases or names already listed as known.
- Only name real companies you are confident compete with this company.
- Return empty lists rather than guessing."""

    @property
    def output_type(self) -> type[BriefContextOutput]:
        return BriefContextOutput

    def _build_prompt(self, input_data: BriefContextInput) -> str:
        known_trends = ", ".join(input_data.known_trends) or "none"
        known_competitors = ", ".join(input_data.known_competitors) or "none"
        return (
            f"Company: {input_data.company_name}\n"
            f"Description: {input_data.company_description or 'n/a'}\n"
            f"Industry: {input_data.industry}\n"
            f"News type: {input_data.news_type}\n"
            f"Announcement: {input_data.announcement}\n"
            f"Known trends: {known_trends}\n"
            f"Known competitors: {known_competitors}"
        )


class BriefContextEnricher:
    """Adapts the agent to the context assembler's enrichment hook."""

    def __init__(self, agent: BriefContextEnricherAgent | None = None) -> None:
        self._agent = agent

    @property
    def agent(self) -> BriefContextEnricherAgent:
        if self._agent is None:
            self._agent = BriefContextEnricherAgent()
        return self._agent

    async def enrich(self, context: GenerationContext) -> tuple[tuple[str, ...], tuple[str, ...]]:
        footprint = context.company_footprint
        output = await asyncio.wait_for(
            self.agent.run(
                BriefContextInput(
                    company_name=footprint.name,
                    company_description=footprint.description,
                    industry=footprint.industry,
                    news_type=context.input.news_type,
                    announcement=context.input.announcement,
                    known_trends=list(context.industry_trends),
                    known_competitors=list(context.competitor_context),
                )
            ),
            timeout=settings.get_llm_timeout(self.agent.model_tier),
        )
        trends = tuple(item.strip().lower() for item in output.industry_trends if item.strip())
        competitors = tuple(item.strip() for item in output.competitors if item.strip())
        logger.info(
            "Brief enrichment finished",
            extra={
                "company": footprint.name,
                "trend_count": len(trends),
                "competitor_count": len(competitors),
            },
        )
        return trends[:MAX_EXTRA_TRENDS], competitors[:MAX_EXTRA_COMPETITORS]


def build_brief_enricher() -> BriefContextEnricher | None:
    """Return an enricher when enrichment is switched on."""
    if not settings.brief_enrichment_enabled:
        return None
    return BriefContextEnricher()
