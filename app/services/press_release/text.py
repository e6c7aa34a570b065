"""Sentence and word primitives shared by every generation stage."""

from __future__ import annotations

import re

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
_WHITESPACE = re.compile(r"\s+")


def split_into_sentences(text: str | None) -> list[str]:
    """Split text on `.`, `?` and `!` runs, returning trimmed, non-empty sentences."""
    if not text:
        return []
    return [
        fragment.strip()
        for fragment in _SENTENCE_BOUNDARY.split(text)
        if fragment.strip()
    ]


def count_words(text: str | None) -> int:
    """Count whitespace-delimited tokens."""
    if not text:
        return 0
    return len([token for token in _WHITESPACE.split(text) if token])


def normalize_sentence(sentence: str) -> str:
    """Collapse whitespace and lower-case a sentence for comparisons."""
    return _WHITESPACE.sub(" ", sentence).strip().lower()


def collect_words(text: str) -> list[str]:
    return re.findall(r"\b[\w'-]+\b", text.lower())


def keyword_occurrences(text: str | None, keyword: str) -> int:
    """Whole-word, case-insensitive matches of ``keyword``; inner whitespace may vary."""
    keyword_words = collect_words(keyword)
    if not text or not keyword_words:
        return 0
    pattern = r"\b" + r"\s+".join(re.escape(word) for word in keyword_words) + r"\b"
    return len(re.findall(pattern, text.lower()))
