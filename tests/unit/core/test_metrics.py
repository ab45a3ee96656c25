"""
Tests for Prometheus metrics
"""
from prometheus_client import CONTENT_TYPE_LATEST

from core.metrics import REGISTRY, get_metrics_response, metrics


def sample(name, **labels):
    return REGISTRY.get_sample_value(name, labels) or 0


class TestMetricsCollector:
    def test_cache_counters(self):
        hits = sample("musi_dashboard_cache_hits_total", scope="metrics-test")
        misses = sample("musi_dashboard_cache_misses_total", scope="metrics-test")

        metrics.track_cache_hit("metrics-test")
        metrics.track_cache_miss("metrics-test")
        metrics.track_cache_miss("metrics-test")

        assert sample("musi_dashboard_cache_hits_total", scope="metrics-test") == hits + 1
        assert sample("musi_dashboard_cache_misses_total", scope="metrics-test") == misses + 2

    def test_error_counter(self):
        before = sample("musi_dashboard_errors_total", error_type="MALFORMED_QUERY", domain="metrics-test")

        metrics.track_error("MALFORMED_QUERY", "metrics-test")

        assert sample("musi_dashboard_errors_total", error_type="MALFORMED_QUERY", domain="metrics-test") == before + 1

    def test_render_duration_only_when_given(self):
        count = sample("musi_dashboard_report_render_duration_seconds_count", template="metrics-test")

        metrics.track_report_rendered("metrics-test", "placeholder")
        metrics.track_report_rendered("metrics-test", "eager", 0.02)

        assert sample("musi_dashboard_report_render_duration_seconds_count", template="metrics-test") == count + 1
        assert sample("musi_dashboard_reports_rendered_total", template="metrics-test", mode="placeholder") >= 1

    def test_metrics_response(self):
        body, content_type = get_metrics_response()

        assert content_type == CONTENT_TYPE_LATEST
        assert b"musi_dashboard_http_requests_total" in body or b"musi_dashboard_app_info" in body
