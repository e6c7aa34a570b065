"""Headline variant generation and scoring."""

from __future__ import annotations

import re
from dataclasses import replace

from app.services.press_release.angles import clamp_score
from app.services.press_release.scoring_tables import (
    HeadlineScoring,
    ScoringTables,
    get_scoring_tables,
)
from app.services.press_release.text import count_words
from app.services.press_release.types import (
    AngleOption,
    GenerationContext,
    HeadlineGenerationResult,
    HeadlineVariant,
)

_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"[a-z0-9']+")
_DIGIT = re.compile(r"\d")
_HEAVY_PUNCTUATION = re.compile(r"[;:—]")


def _render(template: str, values: dict[str, str]) -> str:
    return _WHITESPACE.sub(" ", template.format_map(values)).strip()


def build_headline_candidates(
    context: GenerationContext,
    angle: AngleOption,
    tables: ScoringTables,
) -> list[str]:
    """News-type, angle and keyword templates, deduplicated and capped."""
    values = {
        "company": context.company_footprint.name,
        "announcement": context.input.announcement,
        "angle": angle.angle_title,
        "keyword": "",
    }
    templates = list(tables.headline_templates_for(context.input.news_type))
    templates.extend(tables.headline_templates.by_angle)

    rendered = [_render(template, values) for template in templates]
    if context.seo_keywords:
        keyword_values = {**values, "keyword": context.seo_keywords[0]}
        rendered.extend(
            _render(template, keyword_values)
            for template in tables.headline_templates.by_keyword
        )

    seen: set[str] = set()
    headlines: list[str] = []
    for headline in rendered:
        key = headline.lower()
        if not headline or key in seen:
            continue
        seen.add(key)
        headlines.append(headline)
    return headlines[: tables.headline_templates.max_variants]


def score_headline_seo(headline: str, context: GenerationContext, rules: HeadlineScoring) -> float:
    config = rules.seo
    lowered = headline.lower()
    score = float(config.base)

    matched = [keyword for keyword in context.seo_keywords if keyword.lower() in lowered]
    score += config.keyword_bonus * len(matched)
    if matched and lowered.find(matched[0].lower()) < len(lowered) / 2:
        score += config.front_keyword_bonus

    word_count = count_words(headline)
    low, high = config.ideal_word_range
    if low <= word_count <= high:
        score += config.ideal_length_bonus
    if word_count < config.min_words or word_count > config.max_words:
        score -= config.length_penalty

    company = context.company_footprint.name.lower()
    if company and company in lowered:
        score += config.company_bonus
        if lowered.startswith(company):
            score += config.company_lead_bonus

    return clamp_score(score)


def score_headline_virality(headline: str, rules: HeadlineScoring) -> float:
    config = rules.virality
    lowered = headline.lower()
    words = set(_WORD.findall(lowered))
    score = float(config.base)

    score += config.power_word_bonus * sum(1 for word in config.power_words if word in words)
    if _DIGIT.search(headline):
        score += config.digit_bonus

    low, high = config.brevity_range
    if low <= count_words(headline) <= high:
        score += config.brevity_bonus

    score -= config.clickbait_penalty * sum(
        1 for term in config.clickbait_terms if term in lowered
    )
    return clamp_score(score)


def score_headline_readability(headline: str, rules: HeadlineScoring) -> float:
    config = rules.readability
    tokens = [token for token in headline.split() if token]
    score = float(config.base)
    if not tokens:
        return clamp_score(score)

    average_length = sum(len(token) for token in tokens) / len(tokens)
    if average_length > config.long_word_threshold:
        score -= config.long_word_penalty
    elif average_length < config.short_word_threshold:
        score += config.short_word_bonus

    if len(_HEAVY_PUNCTUATION.findall(headline)) > 1:
        score -= config.punctuation_penalty
    if len(tokens) > config.max_words:
        score -= config.length_penalty

    words = _WORD.findall(headline.lower())
    if sum(1 for word in words if word in config.clause_markers) > 1:
        score -= config.clause_penalty

    return clamp_score(score)


def score_headline(headline: str, context: GenerationContext, rules: HeadlineScoring) -> HeadlineVariant:
    seo = score_headline_seo(headline, context, rules)
    virality = score_headline_virality(headline, rules)
    readability = score_headline_readability(headline, rules)
    weights = rules.weights
    combined = seo * weights.seo + virality * weights.virality + readability * weights.readability
    return HeadlineVariant(
        headline=headline,
        seo_score=seo,
        virality_score=virality,
        readability_score=readability,
        score=round(combined, 2),
    )


def generate_headlines(
    context: GenerationContext,
    angle: AngleOption,
    tables: ScoringTables | None = None,
) -> HeadlineGenerationResult:
    """Score every candidate; the top of a stable ranking is selected."""
    tables = tables or get_scoring_tables()
    candidates = build_headline_candidates(context, angle, tables)
    scored = [score_headline(headline, context, tables.headline_scoring) for headline in candidates]
    ranked = sorted(scored, key=lambda variant: variant.score, reverse=True)
    ranked = [replace(variant, is_selected=(index == 0)) for index, variant in enumerate(ranked)]
    selected = ranked[0]

    return HeadlineGenerationResult(
        variants=tuple(ranked),
        selected_headline=selected,
        reasoning=(
            f"Selected the highest scoring of {len(ranked)} variants "
            f"(score {selected.score:.2f}, seo {selected.seo_score:.0f}, "
            f"virality {selected.virality_score:.0f}, "
            f"readability {selected.readability_score:.0f})."
        ),
    )
