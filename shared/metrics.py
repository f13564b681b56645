"""
Shared metrics configuration for the dispensary specials service.
"""

from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Histogram


class MetricsCollector:
    """Prometheus metrics for cache and upstream activity."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        # Private registry per collector so repeated construction never collides
        self.registry = registry or CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up the specials metrics."""
        self._metrics["specials_cache_hits_total"] = Counter(
            "specials_cache_hits_total",
            "Total cache hits",
            ["kind"],
            registry=self.registry
        )

        self._metrics["specials_cache_misses_total"] = Counter(
            "specials_cache_misses_total",
            "Total cache misses",
            ["kind"],
            registry=self.registry
        )

        self._metrics["specials_upstream_errors_total"] = Counter(
            "specials_upstream_errors_total",
            "Total upstream inventory API failures",
            ["error_type"],
            registry=self.registry
        )

        self._metrics["specials_aggregate_duration_seconds"] = Histogram(
            "specials_aggregate_duration_seconds",
            "Wall-clock duration of a multi-store specials fetch",
            registry=self.registry
        )

    def get_sample_value(self, name: str, **labels) -> Optional[float]:
        """Read the current value of a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels)

    def record_cache_access(self, kind: str, hit: bool):
        """Record a cache hit or miss for a key kind (stores, specials)."""
        metric_name = "specials_cache_hits_total" if hit else "specials_cache_misses_total"
        self._metrics[metric_name].labels(kind=kind).inc()

    def record_upstream_error(self, error_type: str):
        """Record an upstream failure by exception class name."""
        self._metrics["specials_upstream_errors_total"].labels(error_type=error_type).inc()

    def observe_duration(self, seconds: float):
        self._metrics["specials_aggregate_duration_seconds"].observe(seconds)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
