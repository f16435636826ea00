"""Embedding provider backed by a remote embedding service.

Talks to the embedding service's ``/api/v1/embed`` endpoint with ``httpx``:

    POST {base_url}/api/v1/embed
    {"items": [{"text": "..."}], "model": "..."}

and expects ``{"vectors": [[...]], ...}`` back.
"""

from typing import Optional

import httpx
import numpy as np
import structlog

from .base import EmbeddingProvider, EmbeddingProviderError

logger = structlog.get_logger("wiki_search.http_embedding_provider")


class HttpEmbeddingProvider(EmbeddingProvider):
    """Async client for an HTTP embedding service.

    Parameters
    - base_url: Service root, e.g. ``http://localhost:9006``
    - model: Model name forwarded with every request
    - timeout: Request timeout in seconds (ignored when ``client`` is given)
    - client: Optional pre-built ``httpx.AsyncClient`` (shared pools, tests)
    """

    def __init__(
        self,
        base_url: str,
        model: str = "default",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(timeout=timeout)

    async def embed(self, text: str) -> np.ndarray:
        """POST the text to the embedding service and return its vector."""
        try:
            response = await self.http_client.post(
                f"{self.base_url}/api/v1/embed",
                json={
                    "items": [{"text": text}],
                    "model": self.model
                }
            )
        except httpx.HTTPError as e:
            logger.error("Embedding service request failed", error=str(e))
            raise EmbeddingProviderError(f"Embedding service request failed: {e}") from e

        if response.status_code != 200:
            raise EmbeddingProviderError(
                f"Embedding service returned status {response.status_code}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise EmbeddingProviderError("Embedding service returned invalid JSON") from e

        vectors = data.get("vectors") if isinstance(data, dict) else None
        if not vectors or not vectors[0]:
            raise EmbeddingProviderError("Embedding service returned no vectors")

        return np.asarray(vectors[0], dtype=float)

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self.http_client.aclose()
