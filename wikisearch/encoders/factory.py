"""Embedding provider factory.

Centralizes creation of concrete ``EmbeddingProvider`` backends so the engine
does not depend on implementation details.
"""

from typing import Optional

import structlog

from ..common.config import EmbeddingConfig
from .base import EmbeddingProvider
from .http_provider import HttpEmbeddingProvider

logger = structlog.get_logger("wiki_search.encoders.factory")


def create_embedding_provider(config: EmbeddingConfig) -> Optional[EmbeddingProvider]:
    """Create the provider described by ``config``.

    Returns ``None`` when no embedding service URL is configured; the engine
    then relies on fallback embeddings.
    """
    if not config.wiki_embedding_service_url:
        logger.info("No embedding service configured, using fallback embeddings")
        return None

    logger.info(
        "Using HTTP embedding provider",
        url=config.wiki_embedding_service_url,
        model=config.wiki_embedding_model
    )
    return HttpEmbeddingProvider(
        base_url=config.wiki_embedding_service_url,
        model=config.wiki_embedding_model,
        timeout=config.wiki_embedding_timeout
    )
