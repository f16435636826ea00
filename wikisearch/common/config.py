"""Configuration management for the wiki search engine.

This module centralizes environment-driven configuration for the retrieval
engine and its embedding layer. It builds on ``pydantic_settings.BaseSettings``
so configuration can be provided via environment variables, ``.env`` files,
or defaults.

Highlights
- Strongly-typed settings with sensible defaults
- Field names match the environment variable names (case-insensitive)
- Small purpose-specific subclasses to keep concerns clear

Usage
- Inject the appropriate config where the engine is built:
  ``config = SearchConfig()``
- Or select dynamically: ``config = get_config("search")``
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration shared by every component.

    Notes
    - Add new shared settings here so the specialised configs inherit them.
    - Prefer a typed field over reading ``os.environ`` directly.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    wiki_env: str = Field(default="local", description="Deployment environment name")

    # Logging
    wiki_log_level: str = Field(default="INFO", description="Root log level")
    wiki_log_format: str = Field(default="json", description="json or console")


class EmbeddingConfig(BaseConfig):
    """Configuration for the embedding layer.

    When ``wiki_embedding_service_url`` is unset no remote provider is built
    and embeddings come from the random unit-vector fallback.
    """

    wiki_embedding_model: str = Field(default="text-embedding-ada-002")
    wiki_vector_dimension: int = Field(default=1536, gt=0)
    wiki_embedding_batch_size: int = Field(default=100, gt=0)
    wiki_embedding_service_url: Optional[str] = Field(default=None)
    wiki_embedding_timeout: float = Field(default=30.0, gt=0)
    wiki_random_seed: Optional[int] = Field(
        default=None,
        description="Seed for fallback embeddings and k-means initialization",
    )


class SearchConfig(EmbeddingConfig):
    """Configuration for the hybrid search engine.

    Search defaults match what the wiki CLI forwards when the caller does not
    supply options of its own.
    """

    wiki_search_max_results: int = Field(default=10, ge=1)
    wiki_search_threshold: float = Field(default=0.0)
    wiki_search_keyword_weight: float = Field(default=0.5)
    wiki_search_semantic_weight: float = Field(default=0.5)
    wiki_search_include_highlights: bool = Field(default=False)
    wiki_kmeans_max_iterations: int = Field(default=100, ge=1)
    wiki_snippet_context_chars: int = Field(default=50, ge=0)
    wiki_snippet_fallback_chars: int = Field(default=100, ge=0)


def get_config(component: str) -> BaseConfig:
    """Get configuration for a component.

    Parameters
    - component: ``embedding`` or ``search``

    Returns
    - A concrete ``BaseConfig`` subclass reading the right env vars.
    """
    config_map = {
        "embedding": EmbeddingConfig,
        "search": SearchConfig,
    }

    # Unknown names get ``BaseConfig``.
    config_class = config_map.get(component, BaseConfig)
    return config_class()
