"""Tests for the exporter's instruments."""

import pytest

from turf_exporter.services.metrics_service import REQUEST_DURATION_BUCKETS, MetricsService

USER_GAUGES = [
    "turfgame_user_points",
    "turfgame_user_zones_owned",
    "turfgame_user_points_per_hour",
    "turfgame_user_blocktime",
    "turfgame_user_taken",
    "turfgame_user_total_points",
    "turfgame_user_rank",
    "turfgame_user_place",
    "turfgame_user_unique_zones_taken",
    "turfgame_user_medals_taken",
]


class TestMetricsService:
    def test_all_instruments_exposed(self, metrics_service):
        text = metrics_service.get_metrics_text()

        for name in USER_GAUGES:
            assert f"# TYPE {name} gauge" in text
        assert "# TYPE turfgame_user_region gauge" in text
        assert "# TYPE turfgame_api_requests_total counter" in text
        assert "# TYPE http_request_duration_seconds histogram" in text

    def test_label_schemas(self, metrics_service):
        assert metrics_service.round_points._labelnames == ("user",)
        assert metrics_service.region._labelnames == ("user", "region")
        assert metrics_service.api_requests_total._labelnames == ("status",)
        assert metrics_service.request_duration_seconds._labelnames == ("url",)

    def test_record_api_request_by_status(self, metrics_service, registry):
        metrics_service.record_api_request("200")
        metrics_service.record_api_request("200")
        metrics_service.record_api_request("503")
        metrics_service.record_api_request("error")

        def value(status):
            return registry.get_sample_value("turfgame_api_requests_total", {"status": status})

        assert value("200") == 2.0
        assert value("503") == 1.0
        assert value("error") == 1.0

    def test_record_api_request_duration_buckets(self, metrics_service, registry):
        url = "http://turf.test/v5/users"

        metrics_service.record_api_request_duration(url, 0.03)
        metrics_service.record_api_request_duration(url, 4.0)

        def bucket(le):
            return registry.get_sample_value(
                "http_request_duration_seconds_bucket", {"url": url, "le": le}
            )

        assert bucket("0.025") == 0.0
        assert bucket("0.05") == 1.0
        assert bucket("5.0") == 2.0
        assert bucket("+Inf") == 2.0
        assert registry.get_sample_value(
            "http_request_duration_seconds_count", {"url": url}
        ) == 2.0

    def test_duration_buckets(self):
        assert REQUEST_DURATION_BUCKETS == (
            0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0,
        )

    def test_record_helpers_swallow_instrument_errors(self, metrics_service, caplog):
        metrics_service.api_requests_total = None

        metrics_service.record_api_request("200")

        assert "Error recording API request metric" in caplog.text

    def test_instruments_are_registered_once(self, registry):
        MetricsService(registry=registry)

        with pytest.raises(ValueError):
            MetricsService(registry=registry)
