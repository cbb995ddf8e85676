"""
Shared metrics configuration for the map locations service.
"""

from prometheus_client import Counter, Histogram, Gauge, Info, CollectorRegistry
from typing import Dict, Any, Optional
import time
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for services."""

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        # Service info
        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        # HTTP metrics
        self._metrics["http_requests_total"] = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status_code"],
            registry=self.registry
        )

        self._metrics["http_request_duration_seconds"] = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=self.registry
        )

        # Health check metrics
        self._metrics["health_check_total"] = Counter(
            "health_check_total",
            "Total health check requests",
            ["status"],
            registry=self.registry
        )

        # Error metrics
        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        if self.service_name == "maplocations":
            self._setup_maplocations_metrics()

    def _setup_maplocations_metrics(self):
        """Set up snapshot cache metrics."""
        self._metrics["cache_refresh_total"] = Counter(
            "cache_refresh_total",
            "Total snapshot refresh attempts",
            ["trigger", "status"],
            registry=self.registry
        )

        self._metrics["cache_refresh_duration_seconds"] = Histogram(
            "cache_refresh_duration_seconds",
            "Snapshot fetch duration in seconds",
            ["trigger"],
            registry=self.registry
        )

        self._metrics["cache_snapshot_records"] = Gauge(
            "cache_snapshot_records",
            "Number of records in the current snapshot",
            registry=self.registry
        )

        self._metrics["cache_hits_total"] = Counter(
            "cache_hits_total",
            "Requests served from a populated snapshot",
            registry=self.registry
        )

        self._metrics["cache_misses_total"] = Counter(
            "cache_misses_total",
            "Requests that found the snapshot empty",
            registry=self.registry
        )

    def record_http_request(self, method: str, endpoint: str, status_code: int, duration: float):
        """Record HTTP request metrics."""
        self._metrics["http_requests_total"].labels(
            method=method,
            endpoint=endpoint,
            status_code=str(status_code)
        ).inc()

        self._metrics["http_request_duration_seconds"].labels(
            method=method,
            endpoint=endpoint
        ).observe(duration)

    def record_health_check(self, status: str):
        """Record health check metrics."""
        self._metrics["health_check_total"].labels(status=status).inc()

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                metric = self._metrics[operation_name]
                (metric.labels(**labels) if labels else metric).observe(duration)

    def increment_counter(self, metric_name: str, **labels):
        """Increment a counter metric."""
        if metric_name in self._metrics:
            metric = self._metrics[metric_name]
            (metric.labels(**labels) if labels else metric).inc()

    def set_gauge(self, metric_name: str, value: float, **labels):
        """Set a gauge metric value."""
        if metric_name in self._metrics:
            metric = self._metrics[metric_name]
            (metric.labels(**labels) if labels else metric).set(value)

    def get_sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a sample from this collector's registry."""
        return self.registry.get_sample_value(name, labels or {})


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
