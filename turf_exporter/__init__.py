"""Flask application factory."""

from prometheus_client import CollectorRegistry

from turf_exporter.app import App
from turf_exporter.config import Settings


def create_app(
    settings: "Settings | None" = None,
    registry: "CollectorRegistry | None" = None,
    skip_background_services: bool = False,
) -> App:
    """Create and configure the Flask application.

    Args:
        settings: Settings instance (loaded from the environment if not provided)
        registry: Prometheus registry for the exporter's instruments (the
            process-wide registry if not provided)
        skip_background_services: Skip starting the poller and publisher (for tests)

    Raises:
        ConfigurationError: settings fail validation
    """
    app = App(__name__)

    if settings is None:
        settings = Settings.load()

    # Validate configuration before anything is started
    settings.validate_config()

    from turf_exporter.services.container import (
        ServiceContainer,
        start_background_services,
    )

    container = ServiceContainer()
    container.config.override(settings)
    if registry is not None:
        container.registry.override(registry)

    container.wire(packages=["turf_exporter.api"])

    app.container = container

    from turf_exporter.api.metrics import metrics_bp

    app.register_blueprint(metrics_bp)

    if not skip_background_services:
        start_background_services(container)
        app.logger.info("Turf polling started")

    return app
