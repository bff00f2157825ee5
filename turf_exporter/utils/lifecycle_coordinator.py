"""Lifecycle coordinator for process shutdown of the polling threads."""

import logging
import signal
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class LifecycleEvent(str, Enum):
    PREPARE_SHUTDOWN = "prepare-shutdown"
    SHUTDOWN = "shutdown"
    AFTER_SHUTDOWN = "after-shutdown"


class LifecycleCoordinatorProtocol(ABC):
    """Protocol for lifecycle coordinator implementations."""

    @abstractmethod
    def initialize(self) -> None: ...

    @abstractmethod
    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None: ...

    @abstractmethod
    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None: ...

    @abstractmethod
    def is_shutting_down(self) -> bool: ...

    @abstractmethod
    def shutdown(self, exit_code: int = 0) -> None: ...

    @property
    @abstractmethod
    def exit_code(self) -> int: ...


class LifecycleCoordinator(LifecycleCoordinatorProtocol):
    """Turns SIGTERM/SIGINT into an ordered sequence of lifecycle events.

    PREPARE_SHUTDOWN asks the background threads to stop, registered waiters
    then get the remaining timeout to let their thread exit, and SHUTDOWN and
    AFTER_SHUTDOWN follow regardless of whether every waiter finished.
    """

    def __init__(self, graceful_shutdown_timeout: int):
        self._graceful_shutdown_timeout = graceful_shutdown_timeout
        self._shutting_down = False
        self._exit_code = 0
        self._lifecycle_lock = threading.RLock()
        self._lifecycle_notifications: list[Callable[[LifecycleEvent], None]] = []
        self._shutdown_waiters: dict[str, Callable[[float], bool]] = {}

    def initialize(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_sigterm)
        signal.signal(signal.SIGINT, self._handle_sigterm)

    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None:
        with self._lifecycle_lock:
            self._lifecycle_notifications.append(callback)

    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None:
        with self._lifecycle_lock:
            self._shutdown_waiters[name] = handler

    def is_shutting_down(self) -> bool:
        with self._lifecycle_lock:
            return self._shutting_down

    def _handle_sigterm(self, signum: int, frame: object) -> None:
        logger.info(f"Received signal {signum}, shutting down")
        self.shutdown()

    @property
    def exit_code(self) -> int:
        with self._lifecycle_lock:
            return self._exit_code

    def shutdown(self, exit_code: int = 0) -> None:
        """Stop the background threads and release the main thread.

        Args:
            exit_code: Status the process should exit with; a failure wins
                over a concurrent clean shutdown
        """
        with self._lifecycle_lock:
            self._exit_code = max(self._exit_code, exit_code)
            if self._shutting_down:
                return
            self._shutting_down = True
            self._raise_lifecycle_event(LifecycleEvent.PREPARE_SHUTDOWN)

        start_time = time.perf_counter()

        for name, waiter in self._shutdown_waiters.items():
            remaining = self._graceful_shutdown_timeout - (time.perf_counter() - start_time)
            if remaining <= 0:
                logger.warning(f"Shutdown timeout exceeded before waiting for {name}")
                break
            try:
                if not waiter(remaining):
                    logger.warning(f"{name} did not stop within {remaining:.1f}s")
            except Exception as e:
                logger.error(f"Error in shutdown waiter {name}: {e}")

        self._raise_lifecycle_event(LifecycleEvent.SHUTDOWN)
        self._raise_lifecycle_event(LifecycleEvent.AFTER_SHUTDOWN)

    def _raise_lifecycle_event(self, event: LifecycleEvent) -> None:
        for callback in self._lifecycle_notifications:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in lifecycle event notification: {e}")
