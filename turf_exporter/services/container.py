"""Dependency injection container for the exporter."""

import requests
from dependency_injector import containers, providers
from prometheus_client import REGISTRY, CollectorRegistry

from turf_exporter.config import Settings
from turf_exporter.services.metrics_service import MetricsService
from turf_exporter.services.poller_service import PollerService
from turf_exporter.services.publisher_service import PublisherService
from turf_exporter.utils.handoff_channel import HandoffChannel
from turf_exporter.utils.lifecycle_coordinator import LifecycleCoordinator


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration providers
    config = providers.Dependency(instance_of=Settings)
    registry = providers.Dependency(instance_of=CollectorRegistry, default=REGISTRY)

    # Lifecycle coordinator - signal handling and shutdown ordering
    lifecycle_coordinator = providers.Singleton(
        LifecycleCoordinator,
        graceful_shutdown_timeout=config.provided.graceful_shutdown_timeout,
    )

    # Metrics service - owns every exposed instrument
    metrics_service = providers.Singleton(MetricsService, registry=registry)

    # Outbound HTTP session for the users API
    http_session = providers.Singleton(requests.Session)

    # Poller -> publisher handoff
    handoff_channel = providers.Singleton(HandoffChannel)

    publisher_service = providers.Singleton(
        PublisherService,
        metrics_service=metrics_service,
        channel=handoff_channel,
        lifecycle_coordinator=lifecycle_coordinator,
        prune_stale_regions=config.provided.prune_stale_regions,
    )

    poller_service = providers.Singleton(
        PollerService,
        settings=config,
        metrics_service=metrics_service,
        channel=handoff_channel,
        lifecycle_coordinator=lifecycle_coordinator,
        session=http_session,
    )


def start_background_services(container: ServiceContainer) -> None:
    """Start the publisher before the poller so the first batch has a receiver."""
    container.publisher_service().start()
    container.poller_service().start()
