"""Applies decoded player records to the per-player gauges."""

import logging
import threading

from turf_exporter.schemas.player_record import PlayerRecord
from turf_exporter.services.metrics_service import MetricsService
from turf_exporter.utils.handoff_channel import HandoffChannel
from turf_exporter.utils.lifecycle_coordinator import (
    LifecycleCoordinatorProtocol,
    LifecycleEvent,
)

logger = logging.getLogger(__name__)


class PublisherService:
    """Consumes record batches from the handoff channel and sets gauges.

    Every gauge is overwritten, never accumulated, so publishing the same
    batch twice leaves the exposed values unchanged. The region gauge is
    only ever set to 1. By default a player's previous (user, region) series
    stays exposed after they move region; with ``prune_stale_regions`` the old
    series is removed first.
    """

    def __init__(
        self,
        metrics_service: MetricsService,
        channel: HandoffChannel[list[PlayerRecord]],
        lifecycle_coordinator: LifecycleCoordinatorProtocol,
        prune_stale_regions: bool = False,
    ):
        self.metrics_service = metrics_service
        self.channel = channel
        self.prune_stale_regions = prune_stale_regions

        self._last_region: dict[str, str] = {}
        self._thread: threading.Thread | None = None

        lifecycle_coordinator.register_lifecycle_notification(self._on_lifecycle_event)
        lifecycle_coordinator.register_shutdown_waiter("publisher", self._wait_for_stop)

    def start(self) -> None:
        """Start the background consumer thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Publisher already running")
            return

        self._thread = threading.Thread(
            target=self._consume_loop,
            daemon=True,
            name="TurfPublisher",
        )
        self._thread.start()
        logger.info("Started publisher")

    def _consume_loop(self) -> None:
        while True:
            records = self.channel.receive()
            if records is None:
                break
            self.publish(records)

        logger.info("Publisher stopped")

    def publish(self, records: list[PlayerRecord]) -> None:
        """Set every per-player gauge from one decoded batch."""
        metrics = self.metrics_service

        for record in records:
            user = record.name

            metrics.round_points.labels(user=user).set(record.points)
            metrics.zones_owned.labels(user=user).set(len(record.zones))
            metrics.points_per_hour.labels(user=user).set(record.points_per_hour)
            metrics.blocktime.labels(user=user).set(record.blocktime)
            metrics.taken_zones.labels(user=user).set(record.taken)
            metrics.total_points.labels(user=user).set(record.total_points)
            metrics.rank.labels(user=user).set(record.rank)
            metrics.place.labels(user=user).set(record.place)
            metrics.unique_zones_taken.labels(user=user).set(record.unique_zones_taken)
            metrics.medals_taken.labels(user=user).set(len(record.medals))

            self._publish_region(user, record.region.name)

        logger.debug(f"Published {len(records)} player records")

    def _publish_region(self, user: str, region: str) -> None:
        previous = self._last_region.get(user)
        if self.prune_stale_regions and previous is not None and previous != region:
            try:
                self.metrics_service.region.remove(user, previous)
            except KeyError:
                pass
            logger.info(f"Player {user} moved from region {previous!r} to {region!r}")

        self.metrics_service.region.labels(user=user, region=region).set(1)
        self._last_region[user] = region

    def _wait_for_stop(self, timeout: float) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def _on_lifecycle_event(self, event: LifecycleEvent) -> None:
        if event == LifecycleEvent.PREPARE_SHUTDOWN:
            self.channel.close()
