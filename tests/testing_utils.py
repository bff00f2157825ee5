"""Shared testing utilities."""

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from turf_exporter.utils.lifecycle_coordinator import (
    LifecycleCoordinatorProtocol,
    LifecycleEvent,
)

TEST_ENDPOINT = "http://turf.test/v5/users"


class StubLifecycleCoordinator(LifecycleCoordinatorProtocol):
    """Basic lifecycle coordinator stub for testing.

    This stub only stores registrations and maintains state - it never
    executes callbacks or waiters unless asked to via simulate_full_shutdown.
    """

    def __init__(self):
        self._shutting_down = False
        self._exit_code = 0
        self._notifications: list[Callable[[LifecycleEvent], None]] = []
        self._waiters: dict[str, Callable[[float], bool]] = {}

    def initialize(self) -> None:
        """Initialize (noop)."""
        pass

    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None:
        """Store notification callback."""
        self._notifications.append(callback)

    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None:
        """Store shutdown waiter."""
        self._waiters[name] = handler

    def is_shutting_down(self) -> bool:
        """Return current shutdown state."""
        return self._shutting_down

    def shutdown(self, exit_code: int = 0) -> None:
        """Record the exit code only."""
        self._exit_code = max(self._exit_code, exit_code)

    @property
    def exit_code(self) -> int:
        return self._exit_code

    def simulate_full_shutdown(self, timeout: float = 5.0) -> dict[str, bool]:
        """Raise PREPARE_SHUTDOWN, run the waiters, then raise SHUTDOWN.

        Returns:
            Waiter name to whether it reported a clean stop
        """
        self._shutting_down = True
        for callback in self._notifications:
            callback(LifecycleEvent.PREPARE_SHUTDOWN)

        results = {}
        for name, waiter in self._waiters.items():
            try:
                results[name] = waiter(timeout)
            except Exception as e:
                logging.getLogger(__name__).error(f"Error in test waiter {name}: {e}")
                results[name] = False

        for callback in self._notifications:
            callback(LifecycleEvent.SHUTDOWN)

        return results


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(
        self,
        status_code: int = 200,
        body: bytes | str | Any = b"",
        read_error: Exception | None = None,
    ):
        if not isinstance(body, (bytes, str)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")

        self.status_code = status_code
        self._body = body
        self._read_error = read_error
        self.closed = False

    @property
    def content(self) -> bytes:
        if self._read_error is not None:
            raise self._read_error
        return self._body

    def close(self) -> None:
        self.closed = True


def player(name: str, **fields: Any) -> dict[str, Any]:
    """Build a users API record with realistic defaults."""
    record = {
        "name": name,
        "id": 1000,
        "country": "se",
        "medals": [],
        "zones": [],
        "pointsPerHour": 0,
        "points": 0,
        "blocktime": 0,
        "taken": 0,
        "totalPoints": 0,
        "rank": 1,
        "place": 1,
        "uniqueZonesTaken": 0,
        "region": {"name": "Stockholm", "id": 141},
    }
    record.update(fields)
    return record


def wait_for(condition: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Poll condition until it holds or the timeout elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()
