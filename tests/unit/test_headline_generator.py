"""Unit tests for headline variant generation and scoring."""

from __future__ import annotations

from typing import Any

import pytest

from app.services.press_release.angles import find_angles
from app.services.press_release.headlines import (
    build_headline_candidates,
    generate_headlines,
    score_headline_readability,
    score_headline_seo,
    score_headline_virality,
)
from app.services.press_release.scoring_tables import get_scoring_tables
from app.services.press_release.types import NEWS_TYPES


def test_generate_headlines_selects_single_top_variant(make_context: Any) -> None:
    context = make_context()
    angle = find_angles(context).selected_angle

    result = generate_headlines(context, angle)

    scores = [variant.score for variant in result.variants]
    assert scores == sorted(scores, reverse=True)
    assert [variant.is_selected for variant in result.variants].count(True) == 1
    assert result.variants[0] == result.selected_headline
    assert result.selected_headline.score == max(scores)
    assert 0 < len(result.variants) <= get_scoring_tables().headline_templates.max_variants


def test_candidates_are_unique_and_include_keyword_templates(make_context: Any) -> None:
    context = make_context()
    angle = find_angles(context).selected_angle

    candidates = build_headline_candidates(context, angle, get_scoring_tables())

    lowered = [headline.lower() for headline in candidates]
    assert len(lowered) == len(set(lowered))
    assert candidates[0] == "Acme Launches Rocket, an AI scheduling assistant"
    assert any(headline.startswith("AI scheduling: Acme Announces") for headline in candidates)


def test_candidates_without_keywords_skip_keyword_templates(make_context: Any) -> None:
    context = make_context(target_keywords=[])
    angle = find_angles(context).selected_angle

    candidates = build_headline_candidates(context, angle, get_scoring_tables())

    assert not any("Advances" in headline for headline in candidates)


def test_generate_headlines_is_deterministic(make_context: Any) -> None:
    context = make_context(news_type="partnership")
    angle = find_angles(context).selected_angle

    assert generate_headlines(context, angle) == generate_headlines(context, angle)


def test_seo_score_rewards_company_lead_and_penalizes_short_headlines(make_context: Any) -> None:
    rules = get_scoring_tables().headline_scoring

    assert score_headline_seo("Acme Launches Rocket", make_context(), rules) == 50


def test_virality_score_counts_power_words_and_clickbait() -> None:
    rules = get_scoring_tables().headline_scoring

    assert score_headline_virality("Acme Launches Rocket", rules) == 58
    assert score_headline_virality("You won't believe this shocking offer", rules) == 15


def test_readability_penalizes_heavy_punctuation() -> None:
    rules = get_scoring_tables().headline_scoring

    assert score_headline_readability("Acme: Rocket; Now", rules) == 60
    assert score_headline_readability("", rules) == 70


@pytest.mark.parametrize("keywords", [["AI scheduling"], []])
@pytest.mark.parametrize("news_type", NEWS_TYPES)
def test_every_news_type_yields_at_least_five_headlines(
    make_context: Any,
    news_type: str,
    keywords: list[str],
) -> None:
    context = make_context(news_type=news_type, target_keywords=keywords)
    angles = find_angles(context).angles

    for angle in angles:
        result = generate_headlines(context, angle)
        assert len(result.variants) >= 5
        assert [variant.is_selected for variant in result.variants].count(True) == 1
