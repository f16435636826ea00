"""Metrics collection for the wiki search engine.

Provides a thin convenience wrapper around ``prometheus_client`` so the engine
consistently records search, embedding and index maintenance metrics.

Design notes
- Metrics and labels are predeclared to avoid cardinality explosions
- Each collector owns its registry (inject one per engine in tests)
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
import structlog

logger = structlog.get_logger("metrics")


class MetricsCollector:
    """Centralized metrics collection for the retrieval engine.

    Parameters
    - service_name: Logical name used for scoping
    - registry: Optional custom ``CollectorRegistry``
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry or CollectorRegistry()

        self.search_requests = Counter(
            'wiki_search_requests_total',
            'Total search requests',
            ['search_type'],
            registry=self.registry
        )

        self.search_duration = Histogram(
            'wiki_search_duration_seconds',
            'Search duration',
            ['search_type'],
            registry=self.registry
        )

        self.embedding_requests = Counter(
            'wiki_embedding_requests_total',
            'Total embedding generation requests',
            ['source'],
            registry=self.registry
        )

        self.embedding_duration = Histogram(
            'wiki_embedding_duration_seconds',
            'Embedding generation duration',
            ['source'],
            registry=self.registry
        )

        self.index_operations = Counter(
            'wiki_index_operations_total',
            'Total index maintenance operations',
            ['operation'],
            registry=self.registry
        )

        self.indexed_documents = Gauge(
            'wiki_indexed_documents',
            'Number of documents currently indexed',
            registry=self.registry
        )

    def record_search(self, search_type: str, duration: float) -> None:
        """Record search metrics.

        duration is expected in seconds to match Prometheus histogram units.
        """
        self.search_requests.labels(search_type=search_type).inc()
        self.search_duration.labels(search_type=search_type).observe(duration)

    def record_embedding(self, source: str, duration: float) -> None:
        """Record embedding generation metrics (``provider`` or ``fallback``)."""
        self.embedding_requests.labels(source=source).inc()
        self.embedding_duration.labels(source=source).observe(duration)

    def record_index_operation(self, operation: str, count: int = 1) -> None:
        """Record index maintenance operations."""
        self.index_operations.labels(operation=operation).inc(count)

    def set_indexed_documents(self, count: int) -> None:
        """Set the number of indexed documents."""
        self.indexed_documents.set(count)

    def get_metrics(self) -> str:
        """Get metrics in Prometheus exposition format for scraping."""
        return generate_latest(self.registry).decode('utf-8')


# Global metrics collector instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector(service_name: str) -> MetricsCollector:
    """Get or create the process-wide default metrics collector."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector(service_name)
        logger.debug("Metrics collector created", service=service_name)
    return _metrics_collector
