"""
Core metrics collection using Prometheus
"""
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, Info, generate_latest

from core.logging import get_logger

# Create a global registry for the application
REGISTRY = CollectorRegistry()

# Application info
app_info = Info("musi_dashboard_app", "Dashboard application information", registry=REGISTRY)

# Request metrics
request_count = Counter(
    "musi_dashboard_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "musi_dashboard_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# Report metrics
reports_rendered = Counter(
    "musi_dashboard_reports_rendered_total",
    "Total number of rendered reports",
    ["template", "mode"],
    registry=REGISTRY,
)

report_render_duration = Histogram(
    "musi_dashboard_report_render_duration_seconds",
    "Time taken to query and serialize a report",
    ["template"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.5),
    registry=REGISTRY,
)

# Cache metrics
cache_hits = Counter(
    "musi_dashboard_cache_hits_total",
    "Total render cache hits",
    ["scope"],
    registry=REGISTRY,
)

cache_misses = Counter(
    "musi_dashboard_cache_misses_total",
    "Total render cache misses",
    ["scope"],
    registry=REGISTRY,
)

# Error metrics
error_count = Counter(
    "musi_dashboard_errors_total",
    "Total number of errors",
    ["error_type", "domain"],
    registry=REGISTRY,
)


class MetricsCollector:
    """Central metrics collector"""

    def __init__(self):
        self.logger = get_logger(__name__)
        app_info.info({"app": "musi_dashboard"})

    def track_request(self, method: str, endpoint: str, status: int, duration: float):
        request_count.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def track_report_rendered(self, template: str, mode: str, duration: float = None):
        reports_rendered.labels(template=template, mode=mode).inc()
        if duration is not None:
            report_render_duration.labels(template=template).observe(duration)

    def track_cache_hit(self, scope: str):
        cache_hits.labels(scope=scope).inc()

    def track_cache_miss(self, scope: str):
        cache_misses.labels(scope=scope).inc()

    def track_error(self, error_type: str, domain: str):
        error_count.labels(error_type=error_type, domain=domain).inc()

    def get_metrics(self) -> bytes:
        """Get current metrics in Prometheus format"""
        return generate_latest(REGISTRY)


metrics = MetricsCollector()


def get_metrics_response() -> tuple[bytes, str]:
    """Get metrics data and content type for HTTP response"""
    return metrics.get_metrics(), CONTENT_TYPE_LATEST
