"""Unit tests for the post-generation readability pass."""

from __future__ import annotations

from datetime import datetime, timezone

from app.services.press_release.optimization import (
    optimize_release_text,
    replace_redundant_phrases,
    split_long_sentences,
    title_case_headline,
)


def test_split_long_sentences_breaks_at_conjunction() -> None:
    body = " ".join(["word"] * 40) + " and more words follow."

    optimized, count = split_long_sentences(body)

    assert count == 1
    assert optimized.endswith("word. More words follow.")


def test_split_long_sentences_leaves_short_sentences() -> None:
    body = "Cats and dogs are friends."

    assert split_long_sentences(body) == (body, 0)


def test_replace_redundant_phrases_keeps_leading_capital() -> None:
    body, changes = replace_redundant_phrases(
        "In order to win, we act due to the fact that it matters."
    )

    assert body == "To win, we act because it matters."
    assert changes == [
        "Replaced 'in order to' with 'to' (1x)",
        "Replaced 'due to the fact that' with 'because' (1x)",
    ]


def test_title_case_headline() -> None:
    assert title_case_headline("acme launches rocket for the teams") == (
        "Acme Launches Rocket for the Teams"
    )
    assert title_case_headline("the rocket") == "The Rocket"


def test_optimize_release_text_records_entry() -> None:
    now = datetime(2025, 3, 4, 12, 0, tzinfo=timezone.utc)

    result = optimize_release_text(
        "acme launches rocket",
        "In order to help teams, Acme launched Rocket.",
        now=now,
    )

    assert result.headline == "Acme Launches Rocket"
    assert result.body == "To help teams, Acme launched Rocket."
    assert result.entry.type == "readability"
    assert result.entry.timestamp == now.isoformat()
    assert "Applied title case to headline" in result.entry.changes
    assert result.entry.before_score == result.seo_before.readability_score
    assert result.entry.after_score == result.seo_after.readability_score


def test_optimize_release_text_without_changes() -> None:
    now = datetime(2025, 3, 4, tzinfo=timezone.utc)

    result = optimize_release_text("Acme Launches Rocket", "Acme launched Rocket.", now=now)

    assert result.entry.changes == ()
    assert result.body == "Acme launched Rocket."
