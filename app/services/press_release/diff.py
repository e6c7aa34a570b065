"""Sentence-level diff between two versions of a text."""

from __future__ import annotations

from collections import defaultdict, deque

from app.services.press_release.text import normalize_sentence, split_into_sentences
from app.services.press_release.types import (
    SemanticDiff,
    SemanticDiffEntry,
    SemanticDiffSummary,
)


def compute_semantic_diff(original: str | None, rewritten: str | None) -> SemanticDiff:
    """Content-based diff: sentence order is ignored.

    Each rewritten sentence consumes one equal (normalized) original sentence
    and is ``unchanged``; leftovers on either side are ``added`` or
    ``removed``. Near-matches are not paired, so ``modified`` stays 0.
    """
    original_sentences = split_into_sentences(original)
    rewritten_sentences = split_into_sentences(rewritten)

    available: dict[str, deque[str]] = defaultdict(deque)
    for sentence in original_sentences:
        available[normalize_sentence(sentence)].append(sentence)

    entries: list[SemanticDiffEntry] = []
    unchanged = 0
    added = 0
    for sentence in rewritten_sentences:
        matches = available.get(normalize_sentence(sentence))
        if matches:
            entries.append(
                SemanticDiffEntry(type="unchanged", original=matches.popleft(), rewritten=sentence)
            )
            unchanged += 1
        else:
            entries.append(SemanticDiffEntry(type="added", rewritten=sentence))
            added += 1

    removed = 0
    for leftovers in available.values():
        for sentence in leftovers:
            entries.append(SemanticDiffEntry(type="removed", original=sentence))
            removed += 1

    return SemanticDiff(
        entries=tuple(entries),
        summary=SemanticDiffSummary(
            added=added,
            removed=removed,
            modified=0,
            unchanged=unchanged,
        ),
    )
