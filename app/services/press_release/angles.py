"""Angle discovery: candidate generation, scoring, ranking and selection."""

from __future__ import annotations

import re
from dataclasses import replace

from app.services.press_release.scoring_tables import (
    AngleArchetype,
    AngleScoring,
    ScoringTables,
    get_scoring_tables,
)
from app.services.press_release.types import AngleFinderResult, AngleOption, GenerationContext

_TOKEN = re.compile(r"[a-z0-9$%]+")
_CURRENCY = re.compile(r"[$€£¥]")
_DIGIT = re.compile(r"\d")


def clamp_score(value: float) -> float:
    return float(min(100.0, max(0.0, value)))


def _tokens(text: str) -> set[str]:
    return set(_TOKEN.findall(text.lower()))


def _render(template: str, context: GenerationContext) -> str:
    return template.format_map(
        {
            "company": context.company_footprint.name,
            "announcement": context.input.announcement,
            "industry": context.company_footprint.industry,
            "trend": context.industry_trends[0] if context.industry_trends else "",
        }
    ).strip()


def build_candidate_angles(
    context: GenerationContext,
    tables: ScoringTables,
) -> list[AngleOption]:
    """News-type archetypes first, then the generic ones, in table order."""
    archetypes: tuple[AngleArchetype, ...] = tables.angles_for(context.input.news_type)
    return [
        AngleOption(
            angle_title=archetype.title,
            angle_description=_render(archetype.description, context),
        )
        for archetype in archetypes
    ]


def has_size_signal(text: str, magnitude_terms: tuple[str, ...]) -> bool:
    """Digits, currency symbols or magnitude words such as 'million'."""
    if _DIGIT.search(text) or _CURRENCY.search(text):
        return True
    tokens = _tokens(text)
    return any(term in tokens for term in magnitude_terms)


def score_newsworthiness(angle: AngleOption, context: GenerationContext, rules: AngleScoring) -> float:
    config = rules.newsworthiness
    score = float(config.base_by_news_type.get(context.input.news_type, config.default_base))

    title = angle.angle_title.lower()
    if any(term in title for term in config.impact_terms):
        score += config.impact_bonus
    if has_size_signal(context.input.announcement, config.magnitude_terms):
        score += config.numeric_signal_bonus

    return clamp_score(score)


def score_uniqueness(angle: AngleOption, context: GenerationContext, rules: AngleScoring) -> float:
    config = rules.uniqueness
    score = float(config.base)

    title = angle.angle_title.lower()
    score -= config.stock_penalty * sum(1 for term in config.stock_terms if term in title)

    if len(angle.angle_description) > config.long_description_chars:
        score += config.long_description_bonus

    detail_tokens = {
        token
        for token in _tokens(context.input.announcement)
        if len(token) >= config.min_detail_token_length
    }
    if detail_tokens & _tokens(angle.angle_description):
        score += config.detail_bonus

    return clamp_score(score)


def score_relevance(angle: AngleOption, context: GenerationContext, rules: AngleScoring) -> float:
    config = rules.relevance
    haystack = f"{angle.angle_title} {angle.angle_description}".lower()
    matches = sum(1 for keyword in context.seo_keywords if keyword.lower() in haystack)
    return clamp_score(config.base + config.keyword_bonus * matches)


def score_angle(angle: AngleOption, context: GenerationContext, rules: AngleScoring) -> AngleOption:
    newsworthiness = score_newsworthiness(angle, context, rules)
    uniqueness = score_uniqueness(angle, context, rules)
    relevance = score_relevance(angle, context, rules)
    weights = rules.weights
    total = (
        newsworthiness * weights.newsworthiness
        + uniqueness * weights.uniqueness
        + relevance * weights.relevance
    )
    return replace(
        angle,
        newsworthiness_score=newsworthiness,
        uniqueness_score=uniqueness,
        relevance_score=relevance,
        total_score=round(total, 2),
    )


def select_angle(ranked: list[AngleOption], preferred_angle: str | None) -> int:
    """Index of the winner: a preferred-angle title match, else the top ranked."""
    hint = (preferred_angle or "").strip().lower()
    if hint:
        for index, angle in enumerate(ranked):
            if hint in angle.angle_title.lower():
                return index
    return 0


def find_angles(
    context: GenerationContext,
    tables: ScoringTables | None = None,
) -> AngleFinderResult:
    """Generate, score and rank angles, then mark exactly one as selected.

    Ranking is a stable sort on ``total_score`` so equal scores keep
    generation order.
    """
    tables = tables or get_scoring_tables()
    candidates = build_candidate_angles(context, tables)
    scored = [score_angle(angle, context, tables.angle_scoring) for angle in candidates]
    ranked = sorted(scored, key=lambda angle: angle.total_score, reverse=True)

    winner_index = select_angle(ranked, context.input.preferred_angle)
    ranked = [
        replace(angle, is_selected=(index == winner_index))
        for index, angle in enumerate(ranked)
    ]
    selected = ranked[winner_index]

    if winner_index == 0:
        reasoning = (
            f"Selected '{selected.angle_title}' with the highest total score "
            f"({selected.total_score:.2f}) of {len(ranked)} candidates."
        )
    else:
        reasoning = (
            f"Selected '{selected.angle_title}' because it matches the preferred angle "
            f"'{context.input.preferred_angle}'."
        )

    return AngleFinderResult(angles=tuple(ranked), selected_angle=selected, reasoning=reasoning)
