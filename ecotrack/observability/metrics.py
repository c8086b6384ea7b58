from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)


_LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10)


class ServiceMetrics:
    """Prometheus instruments bound to one registry.

    Each application gets its own registry so that several apps (tests) can
    live in one process without duplicate-registration errors.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None, *, process_metrics: bool = True) -> None:
        self.registry = registry or CollectorRegistry(auto_describe=True)
        if process_metrics:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        self.http_requests_total = Counter(
            "http_requests_total",
            "HTTP requests handled",
            ["method", "path", "status"],
            registry=self.registry,
        )
        self.http_request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "HTTP request latency in seconds",
            ["method", "path"],
            buckets=_LATENCY_BUCKETS,
            registry=self.registry,
        )
        self.http_requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently being handled",
            ["method"],
            registry=self.registry,
        )
        self.items_created_total = Counter(
            "items_created_total",
            "Items created through the API",
            registry=self.registry,
        )

    def observe_http_request(self, *, method: str, path: str, status_code: int, elapsed_seconds: float) -> None:
        self.http_requests_total.labels(method=method, path=path, status=str(status_code)).inc()
        self.http_request_duration_seconds.labels(method=method, path=path).observe(elapsed_seconds)

    def render(self) -> bytes:
        return generate_latest(self.registry)
