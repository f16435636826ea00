"""Structured logging for the wiki search engine.

Every module logs through ``structlog.get_logger("wiki_search.<area>")`` with
key/value fields. Nothing is configured at import time; the host process
(the wiki CLI, a test run) calls one of the ``configure_*`` functions once.

Typical usage
- ``configure_logging_from_config(SearchConfig())`` reads ``WIKI_LOG_LEVEL``,
  ``WIKI_LOG_FORMAT`` and ``WIKI_ENV``
- ``configure_logging(service_name, log_level, log_format)`` for explicit setup
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.stdlib import LoggerFactory, add_logger_name

from .config import BaseConfig

LOG_FORMATS = ("json", "console")

_performance_logger = structlog.get_logger("wiki_search.performance")


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def _renderer(log_format: str) -> Any:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    raise ValueError(f"Unknown log format {log_format!r}, expected one of {LOG_FORMATS}")


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
    environment: Optional[str] = None
) -> None:
    """Configure stdlib logging and structlog for the engine.

    Parameters
    - service_name: Bound to every log line as ``service``
    - log_level: ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` (case-insensitive)
    - log_format: ``json`` or ``console``
    - environment: Bound as ``environment`` when given

    Raises ``ValueError`` for an unknown level or format.
    """
    level = _resolve_level(log_level)
    renderer = _renderer(log_format)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_logger_name,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    context = {"service": service_name}
    if environment:
        context["environment"] = environment
    structlog.contextvars.bind_contextvars(**context)


def configure_logging_from_config(config: BaseConfig, service_name: str = "wiki-search") -> None:
    """Configure logging from the ``WIKI_LOG_*`` settings of ``config``."""
    configure_logging(
        service_name,
        log_level=config.wiki_log_level,
        log_format=config.wiki_log_format,
        environment=config.wiki_env
    )


def log_performance(operation: str, duration_ms: float, **kwargs: Any) -> None:
    """Emit one timing event for an engine operation (``index``, ``search``)."""
    _performance_logger.info(
        "Operation completed",
        operation=operation,
        duration_ms=round(duration_ms, 3),
        **kwargs
    )
