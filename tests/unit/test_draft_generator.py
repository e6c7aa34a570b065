"""Unit tests for draft assembly."""

from __future__ import annotations

from datetime import date
from typing import Any

from app.services.press_release.angles import find_angles
from app.services.press_release.draft import (
    RELEASE_DATE_PLACEHOLDER,
    generate_draft,
    join_phrases,
)
from app.services.press_release.headlines import generate_headlines
from app.services.press_release.scoring_tables import get_scoring_tables
from app.services.press_release.text import count_words


def _draft_for(context: Any) -> Any:
    angle = find_angles(context).selected_angle
    headline = generate_headlines(context, angle).selected_headline
    return generate_draft(context, angle, headline)


def test_draft_body_paragraphs_and_word_count(make_context: Any) -> None:
    context = make_context()

    draft = _draft_for(context)

    assert len(draft.paragraphs) >= 2
    assert draft.body == "\n\n".join(draft.paragraphs)
    assert draft.word_count == count_words(draft.body)
    assert draft.paragraphs[0].startswith("Acme today announced Rocket, an AI scheduling assistant.")
    assert draft.boilerplate == "About Acme: Acme builds productivity software for teams."


def test_dateline_uses_release_date_or_placeholder(make_context: Any) -> None:
    dated = _draft_for(make_context(release_date=date(2025, 3, 4)))
    undated = _draft_for(make_context())

    assert dated.dateline == "AUSTIN, TX, March 4, 2025"
    assert undated.dateline == f"AUSTIN, TX, {RELEASE_DATE_PLACEHOLDER}"


def test_quotes_follow_tone_and_spokespeople(make_context: Any) -> None:
    tables = get_scoring_tables()

    formal = _draft_for(
        make_context(
            tone="formal",
            secondary_spokesperson="Sam Lee",
            secondary_spokesperson_title="CTO",
        )
    )
    assert formal.quote1.startswith(f'"{tables.draft.quote_openers["formal"]}')
    assert formal.quote1_attribution == "Jane Doe, CEO"
    assert formal.quote2 == f'"{tables.draft.secondary_quote}"'
    assert formal.quote2_attribution == "Sam Lee, CTO"

    anonymous = _draft_for(make_context(spokesperson_name=None, spokesperson_title=None))
    assert anonymous.quote1_attribution == "A spokesperson for Acme"
    assert anonymous.quote2 == ""


def test_detail_paragraph_uses_additional_context_and_competitors(make_context: Any) -> None:
    draft = _draft_for(
        make_context(
            additional_context="Rocket ships with calendar sync.",
            competitor_mentions=["Globex", "Initech"],
        )
    )

    assert draft.paragraphs[2] == (
        "Rocket ships with calendar sync. The move sharpens Acme's position against "
        "Globex and Initech."
    )


def test_generate_draft_is_deterministic(make_context: Any) -> None:
    assert _draft_for(make_context()) == _draft_for(make_context())


def test_join_phrases() -> None:
    assert join_phrases([]) == ""
    assert join_phrases(["a"]) == "a"
    assert join_phrases(["a", "b"]) == "a and b"
    assert join_phrases(("a", "b", "c")) == "a, b and c"
