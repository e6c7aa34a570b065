"""Embedding-based duplicate detection across an organization's releases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from app.config import settings
from app.core.exceptions import ExternalAPIError
from app.integrations.embeddings import EmbeddingsClient
from app.repositories.press_release_repository import PressReleaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimilarRelease:
    """Another release whose embedding is close to the target's."""

    id: str
    headline: str | None
    similarity: float
    created_at: datetime


def release_embedding_text(headline: str | None, body: str | None) -> str:
    return "\n\n".join(part for part in (headline, body) if part)


async def compute_release_embedding(headline: str | None, body: str | None) -> list[float] | None:
    """Embed a release; ``None`` when embeddings are not configured or fail."""
    text = release_embedding_text(headline, body)
    if not text or not settings.openrouter_api_key:
        return None

    try:
        async with EmbeddingsClient() as client:
            return await client.embed_text(text)
    except ExternalAPIError:
        logger.warning("Release embedding failed", exc_info=True)
        return None


def rank_similar(
    target: list[float],
    candidates: list[tuple[str, str | None, datetime, list[float]]],
    *,
    limit: int,
    threshold: float,
) -> list[SimilarRelease]:
    """Candidates at or above ``threshold``, most similar first."""
    matches = [
        SimilarRelease(
            id=release_id,
            headline=headline,
            similarity=round(EmbeddingsClient.cosine_similarity(target, vector), 4),
            created_at=created_at,
        )
        for release_id, headline, created_at, vector in candidates
    ]
    matches = [match for match in matches if match.similarity >= threshold]
    matches.sort(key=lambda match: match.similarity, reverse=True)
    return matches[: max(limit, 0)]


async def find_similar_releases(
    repository: PressReleaseRepository,
    release_id: str,
    *,
    limit: int | None = None,
    threshold: float | None = None,
) -> list[SimilarRelease]:
    """Find the org's releases most similar to ``release_id``.

    A release without stored embeddings has no similar releases.
    """
    release = await repository.get_release_or_raise(release_id)
    if not release.embeddings:
        return []

    candidates = await repository.list_embedding_candidates(
        exclude_release_id=str(release.id),
        limit=settings.similarity_candidate_limit,
    )
    return rank_similar(
        list(release.embeddings),
        candidates,
        limit=limit if limit is not None else settings.similarity_default_limit,
        threshold=threshold if threshold is not None else settings.similarity_threshold,
    )
