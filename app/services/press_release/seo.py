"""Keyword density, readability and improvement suggestions for a release body."""

from __future__ import annotations

import re

from app.services.press_release.scoring_tables import SEORules, ScoringTables, get_scoring_tables
from app.services.press_release.text import keyword_occurrences, split_into_sentences
from app.services.press_release.types import GenerationInput, SEOSummary

UNRATED_GRADE = "Unrated"

_PASSIVE_VOICE = re.compile(r"\b(was|were|been|being|is|are|am)\s+\w+ed\b", re.IGNORECASE)
_EDGE_PUNCTUATION = "\"'“”‘’()[]{},.;:!?"


def readability_grade(score: float, rules: SEORules) -> str:
    for threshold, label in rules.readability_grades:
        if score >= threshold:
            return label
    return rules.readability_grades[-1][1]


def flesch_reading_ease(words: list[str], sentence_count: int, rules: SEORules) -> float:
    """Flesch reading ease with syllables estimated from average word length."""
    if not words:
        return 0.0
    letters = [len(word.strip(_EDGE_PUNCTUATION)) or len(word) for word in words]
    average_word_length = sum(letters) / len(words)
    syllables_per_word = max(1.0, average_word_length / rules.chars_per_syllable)
    words_per_sentence = len(words) / max(sentence_count, 1)
    score = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
    return round(min(100.0, max(0.0, score)), 2)


def build_suggestions(
    *,
    word_total: int,
    missing_keywords: list[str],
    avg_sentence_length: float,
    rules: SEORules,
) -> list[str]:
    suggestions: list[str] = []
    if word_total < rules.min_word_count:
        suggestions.append(
            f"Press release is {word_total} words; expand it to at least "
            f"{rules.min_word_count} words with more detail."
        )
    if missing_keywords:
        quoted = ", ".join(f'"{keyword}"' for keyword in missing_keywords)
        suggestions.append(f"Work the target keywords {quoted} into the body copy.")
    if avg_sentence_length > rules.max_avg_sentence_length:
        suggestions.append(
            f"Average sentence length is {avg_sentence_length:.1f} words; keep sentences under "
            f"{rules.max_avg_sentence_length:g} words for readability."
        )
    return suggestions


def calculate_seo_summary(
    body: str | None,
    brief: GenerationInput | None = None,
    tables: ScoringTables | None = None,
) -> SEOSummary:
    """Summarize keyword coverage and readability of ``body``.

    An empty body yields an empty density map and zero counts.
    """
    rules = (tables or get_scoring_tables()).seo
    text = body or ""
    keywords = list(brief.target_keywords) if brief else []
    words = text.split()
    word_total = len(words)

    keyword_density: dict[str, float] = {}
    missing_keywords: list[str] = []
    for keyword in keywords:
        occurrences = keyword_occurrences(text, keyword)
        if occurrences == 0:
            missing_keywords.append(keyword)
        if word_total:
            keyword_density[keyword] = round(occurrences / word_total * 100, 4)

    sentence_count = len(split_into_sentences(text))
    avg_sentence_length = round(word_total / sentence_count, 2) if sentence_count else 0.0

    readability_score = flesch_reading_ease(words, sentence_count, rules)
    grade = readability_grade(readability_score, rules) if word_total else UNRATED_GRADE

    return SEOSummary(
        primary_keyword=keywords[0] if keywords else None,
        secondary_keywords=tuple(keywords[1:]),
        keyword_density=keyword_density,
        sentence_count=sentence_count,
        avg_sentence_length=avg_sentence_length,
        readability_score=readability_score,
        readability_grade=grade,
        passive_voice_count=len(_PASSIVE_VOICE.findall(text)),
        suggestions=tuple(
            build_suggestions(
                word_total=word_total,
                missing_keywords=missing_keywords,
                avg_sentence_length=avg_sentence_length,
                rules=rules,
            )
        ),
    )
