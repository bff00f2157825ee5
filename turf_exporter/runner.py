"""Exporter entry point."""

import logging
import sys
import threading

from pydantic import ValidationError
from waitress import serve

from turf_exporter.config import Settings
from turf_exporter.exceptions import ConfigurationError
from turf_exporter.utils.lifecycle_coordinator import LifecycleEvent

logger = logging.getLogger(__name__)


def main() -> None:
    """Poll the Turf API and serve /metrics until SIGTERM/SIGINT.

    Exits with status 1 before anything is started when the configuration
    cannot be loaded or does not validate.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        settings = Settings.load()
    except ValidationError as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)

    from turf_exporter import create_app

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical(str(e))
        sys.exit(1)

    lifecycle_coordinator = app.container.lifecycle_coordinator()
    lifecycle_coordinator.initialize()

    event = threading.Event()

    def signal_shutdown(lifecycle_event: LifecycleEvent) -> None:
        if lifecycle_event == LifecycleEvent.AFTER_SHUTDOWN:
            event.set()

    # Registered before the server starts so a bind failure cannot be missed
    lifecycle_coordinator.register_lifecycle_notification(signal_shutdown)

    def runner() -> None:
        logger.info(
            f"Serving metrics on {settings.metrics_host}:{settings.metrics_port} "
            f"with {settings.waitress_threads} threads"
        )
        try:
            serve(
                app,
                host=settings.metrics_host,
                port=int(settings.metrics_port),
                threads=settings.waitress_threads,
            )
        except Exception as e:
            logger.critical(f"Metrics server failed: {e}", exc_info=True)
            lifecycle_coordinator.shutdown(exit_code=1)

    # Run server in daemon thread so the lifecycle coordinator controls exit
    thread = threading.Thread(target=runner, daemon=True)
    thread.start()

    event.wait()

    if lifecycle_coordinator.exit_code:
        sys.exit(lifecycle_coordinator.exit_code)
