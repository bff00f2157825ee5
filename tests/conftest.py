"""Pytest fixtures for the exporter tests."""

from typing import Any
from unittest.mock import MagicMock

import pytest
import requests
from prometheus_client import CollectorRegistry

from turf_exporter import create_app
from turf_exporter.config import Settings
from turf_exporter.services.metrics_service import MetricsService
from tests.testing_utils import TEST_ENDPOINT, StubLifecycleCoordinator


@pytest.fixture
def registry() -> CollectorRegistry:
    """Fresh Prometheus registry so instruments never collide between tests."""
    return CollectorRegistry()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        endpoint=TEST_ENDPOINT,
        players=["alice", "bob"],
        poll_interval_seconds=300,
        http_timeout_seconds=10.0,
        metrics_host="127.0.0.1",
        metrics_port="9097",
        graceful_shutdown_timeout=5,
    )


@pytest.fixture
def metrics_service(registry: CollectorRegistry) -> MetricsService:
    return MetricsService(registry=registry)


@pytest.fixture
def lifecycle_coordinator() -> StubLifecycleCoordinator:
    return StubLifecycleCoordinator()


@pytest.fixture
def mock_session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def app(settings: Settings, registry: CollectorRegistry) -> Any:
    """Application with background services not started."""
    return create_app(settings, registry=registry, skip_background_services=True)


@pytest.fixture
def client(app: Any) -> Any:
    return app.test_client()


@pytest.fixture
def container(app: Any) -> Any:
    return app.container
