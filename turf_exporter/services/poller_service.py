"""Polls the Turf users API and hands decoded batches to the publisher."""

import logging
import threading
from time import perf_counter

import requests
from pydantic import ValidationError

from turf_exporter.config import Settings
from turf_exporter.exceptions import ConfigurationError
from turf_exporter.schemas.player_record import (
    PlayerRecord,
    build_request_body,
    decode_player_records,
)
from turf_exporter.services.metrics_service import MetricsService
from turf_exporter.utils.handoff_channel import HandoffChannel
from turf_exporter.utils.lifecycle_coordinator import (
    LifecycleCoordinatorProtocol,
    LifecycleEvent,
)

logger = logging.getLogger(__name__)


class PollerService:
    """Issues one POST per cycle for the configured roster.

    Transport, body-read and decode failures are logged and the cycle is
    skipped; nothing reaches the publisher unless the whole response decoded.
    There is no retry and no backoff, the poll interval is the only throttle.
    """

    def __init__(
        self,
        settings: Settings,
        metrics_service: MetricsService,
        channel: HandoffChannel[list[PlayerRecord]],
        lifecycle_coordinator: LifecycleCoordinatorProtocol,
        session: requests.Session | None = None,
    ):
        """Initialize PollerService.

        Args:
            settings: Endpoint, roster, interval and timeout
            metrics_service: Owner of the request counter and duration histogram
            channel: Handoff channel to the publisher
            lifecycle_coordinator: Stops the loop on shutdown
            session: HTTP session; a new one is created when omitted

        Raises:
            ConfigurationError: the player roster is empty
        """
        if not settings.players:
            raise ConfigurationError("TURF_USERS cannot be an empty string")

        self.endpoint = settings.endpoint
        self.poll_interval = settings.poll_interval_seconds
        self.http_timeout = settings.http_timeout_seconds
        self.metrics_service = metrics_service
        self.channel = channel
        self.session = session if session is not None else requests.Session()

        # The roster is fixed for the process lifetime
        self.request_body = build_request_body(settings.players)

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        lifecycle_coordinator.register_lifecycle_notification(self._on_lifecycle_event)
        lifecycle_coordinator.register_shutdown_waiter("poller", self._wait_for_stop)

    def start(self) -> None:
        """Start the background polling thread."""
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Poller already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="TurfPoller",
        )
        self._thread.start()
        logger.info(
            f"Started poller for {len(self.request_body)} players "
            f"(interval: {self.poll_interval}s)"
        )

    def stop(self) -> None:
        """Ask the polling loop to exit after the current cycle."""
        self._stop_event.set()

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Unexpected error in poll cycle: {e}", exc_info=True)

            if self._stop_event.wait(self.poll_interval):
                break

        logger.info("Poller stopped")

    def poll_once(self) -> bool:
        """Run one poll cycle.

        Returns:
            True if a decoded batch was handed to the publisher
        """
        records = self._fetch()
        if records is None:
            return False

        return self.channel.send(records)

    def _fetch(self) -> list[PlayerRecord] | None:
        start_time = perf_counter()
        try:
            response = self.session.post(
                self.endpoint,
                json=self.request_body,
                timeout=self.http_timeout,
                headers={"Content-Type": "application/json"},
                stream=True,
            )
        except requests.RequestException as e:
            logger.error(f"Request to {self.endpoint} failed: {e}")
            self.metrics_service.record_api_request("error")
            return None
        finally:
            duration = perf_counter() - start_time
            self.metrics_service.record_api_request_duration(self.endpoint, duration)

        logger.info(f"Successfully called {self.endpoint} in {duration:.3f} seconds")
        self.metrics_service.record_api_request(str(response.status_code))

        if response.status_code != 200:
            logger.warning(
                f"{self.endpoint} returned status {response.status_code}, "
                "decoding body anyway"
            )

        try:
            body = response.content
        except requests.RequestException as e:
            logger.error(f"Failed to read response body from {self.endpoint}: {e}")
            return None
        finally:
            response.close()

        try:
            return decode_player_records(body)
        except ValidationError as e:
            logger.error(
                f"Failed to decode response from {self.endpoint}: "
                f"{e.error_count()} errors, first: {e.errors()[0]['msg']}"
            )
            return None

    def _wait_for_stop(self, timeout: float) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def _on_lifecycle_event(self, event: LifecycleEvent) -> None:
        if event == LifecycleEvent.PREPARE_SHUTDOWN:
            self.stop()
            # Unblocks a send waiting on a publisher that is going away
            self.channel.close()
        elif event == LifecycleEvent.SHUTDOWN:
            self.session.close()
