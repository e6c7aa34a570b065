"""Embeddings integration for release similarity.

Calls the OpenRouter embeddings endpoint and compares vectors with cosine
similarity.
"""

import logging
from typing import Any

import httpx
import numpy as np

from app.config import settings
from app.core.exceptions import APIKeyMissingError, ExternalAPIError

logger = logging.getLogger(__name__)


class EmbeddingsClient:
    """Client for generating text embeddings through OpenRouter."""

    EMBEDDING_URL = "https://openrouter.ai/api/v1/embeddings"
    MAX_BATCH_SIZE = 100
    # Characters, to stay well inside provider token limits.
    MAX_INPUT_CHARS = 8000

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.api_key = api_key or settings.openrouter_api_key
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

        if not self.api_key:
            raise APIKeyMissingError("OpenRouter (for embeddings)")

    async def __aenter__(self) -> "EmbeddingsClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("Client must be used as async context manager")
        return self._client

    def _payload(self, batch: list[str], model: str | None) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model or settings.embeddings_model,
            "input": batch,
        }
        if settings.embeddings_provider:
            payload["provider"] = {
                "order": [settings.embeddings_provider],
                "allow_fallbacks": settings.embeddings_allow_fallbacks,
            }
        return payload

    async def get_embeddings(
        self,
        texts: list[str],
        model: str | None = None,
    ) -> list[list[float]]:
        """Generate embeddings for a list of texts, preserving input order."""
        logger.info(
            "Generating embeddings",
            extra={"text_count": len(texts), "model": model or settings.embeddings_model},
        )
        if not texts:
            return []

        all_embeddings: list[list[float]] = []

        for i in range(0, len(texts), self.MAX_BATCH_SIZE):
            batch = [text[: self.MAX_INPUT_CHARS] for text in texts[i:i + self.MAX_BATCH_SIZE]]

            try:
                response = await self.client.post(
                    self.EMBEDDING_URL,
                    json=self._payload(batch, model),
                )
            except httpx.HTTPError as e:
                logger.warning("Embeddings HTTP error", extra={"error": str(e)})
                raise ExternalAPIError("OpenRouter Embeddings", str(e)) from e

            if response.status_code != 200:
                logger.warning("Embeddings API error", extra={"status": response.status_code})
                raise ExternalAPIError(
                    "OpenRouter Embeddings",
                    f"API error: {response.status_code} - {response.text}",
                )

            data = response.json().get("data", [])
            sorted_data = sorted(data, key=lambda x: x.get("index", 0))
            all_embeddings.extend(item["embedding"] for item in sorted_data)

        return all_embeddings

    async def embed_text(self, text: str, model: str | None = None) -> list[float]:
        """Embed a single text."""
        vectors = await self.get_embeddings([text], model=model)
        if not vectors:
            raise ExternalAPIError("OpenRouter Embeddings", "empty embeddings response")
        return vectors[0]

    @staticmethod
    def cosine_similarity(vec1: list[float], vec2: list[float]) -> float:
        """Calculate cosine similarity between two vectors."""
        a = np.array(vec1, dtype=float)
        b = np.array(vec2, dtype=float)
        if a.shape != b.shape:
            return 0.0

        dot_product = np.dot(a, b)
        norm_a = np.linalg.norm(a)
        norm_b = np.linalg.norm(b)

        if norm_a == 0 or norm_b == 0:
            return 0.0

        return float(dot_product / (norm_a * norm_b))
