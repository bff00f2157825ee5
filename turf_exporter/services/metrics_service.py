"""Prometheus instruments for the Turf exporter."""

import logging

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

REQUEST_DURATION_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsService:
    """Owns every instrument the exporter exposes.

    Instruments are registered once against the given registry. The poller
    is the only writer of the request counter and duration histogram, the
    publisher the only writer of the per-player gauges.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        """Initialize metrics service.

        Args:
            registry: Registry to register instruments with; defaults to the
                process-wide prometheus_client registry
        """
        self.registry = registry if registry is not None else REGISTRY
        self._initialize_metrics()

    def _initialize_metrics(self) -> None:
        """Initialize Prometheus metric objects."""
        # Upstream request metrics
        self.api_requests_total = Counter(
            "turfgame_api_requests_total",
            "Total number of requests to Turfgame API",
            ["status"],
            registry=self.registry,
        )
        self.request_duration_seconds = Histogram(
            "http_request_duration_seconds",
            "A histogram of the HTTP request durations in seconds.",
            ["url"],
            buckets=REQUEST_DURATION_BUCKETS,
            registry=self.registry,
        )

        # Per player gauges
        self.round_points = self._user_gauge(
            "turfgame_user_points", "Number of points received in this round"
        )
        self.zones_owned = self._user_gauge(
            "turfgame_user_zones_owned", "Number of zones owned"
        )
        self.points_per_hour = self._user_gauge(
            "turfgame_user_points_per_hour", "Number of points received per hour"
        )
        self.blocktime = self._user_gauge(
            "turfgame_user_blocktime", "The users blocktime"
        )
        self.taken_zones = self._user_gauge(
            "turfgame_user_taken", "Number of zones taken"
        )
        self.total_points = self._user_gauge(
            "turfgame_user_total_points", "The users total points"
        )
        self.rank = self._user_gauge("turfgame_user_rank", "The users rank")
        self.place = self._user_gauge("turfgame_user_place", "The users place")
        self.unique_zones_taken = self._user_gauge(
            "turfgame_user_unique_zones_taken",
            "Number of unique zones the user has taken",
        )
        self.medals_taken = self._user_gauge(
            "turfgame_user_medals_taken", "Number of medals the user has taken"
        )
        self.region = Gauge(
            "turfgame_user_region",
            "The users current region",
            ["user", "region"],
            registry=self.registry,
        )

    def _user_gauge(self, name: str, documentation: str) -> Gauge:
        return Gauge(name, documentation, ["user"], registry=self.registry)

    def record_api_request(self, status: str) -> None:
        """Count one upstream request.

        Args:
            status: HTTP status code as a string, or "error" on transport failure
        """
        try:
            self.api_requests_total.labels(status=status).inc()
        except Exception as e:
            logger.error(f"Error recording API request metric: {e}")

    def record_api_request_duration(self, url: str, duration: float) -> None:
        """Record the wall-clock duration of one upstream request."""
        try:
            self.request_duration_seconds.labels(url=url).observe(duration)
        except Exception as e:
            logger.error(f"Error recording API request duration: {e}")

    def get_metrics_text(self) -> str:
        """Generate metrics in Prometheus text format."""
        return generate_latest(self.registry).decode("utf-8")
