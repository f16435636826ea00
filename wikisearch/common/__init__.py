"""Common utilities shared across the engine.

Includes:
- ``config``: Pydantic-based configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers.

Import pattern:
- from wikisearch.common.config import SearchConfig
- from wikisearch.common.logging import configure_logging
"""
