"""Post-generation readability pass over a finished release."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from app.services.press_release.scoring_tables import ScoringTables
from app.services.press_release.seo import calculate_seo_summary
from app.services.press_release.types import (
    GenerationInput,
    OptimizationEntry,
    OptimizationResult,
)

OPTIMIZATION_TYPE = "readability"

TITLE_CASE_SMALL_WORDS = frozenset(
    {"a", "an", "the", "and", "but", "or", "for", "nor", "on", "at", "to", "by"}
)

REDUNDANT_PHRASES: tuple[tuple[str, str], ...] = (
    ("in order to", "to"),
    ("due to the fact that", "because"),
    ("at this point in time", "now"),
    ("in the event that", "if"),
)

# Break a run-on sentence at the first " and " after 150 characters.
_LONG_SENTENCE = re.compile(r"([^.!?\n]{150,}?)\s+and\s+(\w)")


def split_long_sentences(body: str) -> tuple[str, int]:
    return _LONG_SENTENCE.subn(lambda match: f"{match.group(1)}. {match.group(2).upper()}", body)


def replace_redundant_phrases(body: str) -> tuple[str, list[str]]:
    changes: list[str] = []
    for phrase, replacement in REDUNDANT_PHRASES:
        pattern = re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)

        def substitute(match: re.Match[str], replacement: str = replacement) -> str:
            if match.group(0)[0].isupper():
                return replacement[0].upper() + replacement[1:]
            return replacement

        body, count = pattern.subn(substitute, body)
        if count:
            changes.append(f"Replaced '{phrase}' with '{replacement}' ({count}x)")
    return body, changes


def title_case_headline(headline: str) -> str:
    """Capitalize each word; small words stay lower-case except the first."""
    words = headline.split()
    cased: list[str] = []
    for index, word in enumerate(words):
        if index > 0 and word.lower() in TITLE_CASE_SMALL_WORDS:
            cased.append(word.lower())
        else:
            cased.append(word[:1].upper() + word[1:])
    return " ".join(cased)


def optimize_release_text(
    headline: str | None,
    body: str | None,
    brief: GenerationInput | None = None,
    *,
    now: datetime | None = None,
    tables: ScoringTables | None = None,
) -> OptimizationResult:
    """Tighten the body and title-case the headline, scoring before and after."""
    original_headline = headline or ""
    original_body = body or ""
    seo_before = calculate_seo_summary(original_body, brief, tables)

    changes: list[str] = []
    optimized_body, split_count = split_long_sentences(original_body)
    if split_count:
        changes.append(f"Split {split_count} long sentence(s)")
    optimized_body, phrase_changes = replace_redundant_phrases(optimized_body)
    changes.extend(phrase_changes)

    optimized_headline = title_case_headline(original_headline)
    if optimized_headline != original_headline:
        changes.append("Applied title case to headline")

    seo_after = calculate_seo_summary(optimized_body, brief, tables)
    timestamp = (now or datetime.now(timezone.utc)).isoformat()

    return OptimizationResult(
        headline=optimized_headline,
        body=optimized_body,
        seo_before=seo_before,
        seo_after=seo_after,
        entry=OptimizationEntry(
            timestamp=timestamp,
            type=OPTIMIZATION_TYPE,
            changes=tuple(changes),
            before_score=seo_before.readability_score,
            after_score=seo_after.readability_score,
        ),
    )
