"""Zero-capacity handoff between one producer and one consumer thread."""

import threading
from typing import Generic, TypeVar

T = TypeVar("T")


class HandoffChannel(Generic[T]):
    """Synchronous rendezvous channel.

    A send does not return until a receiver has taken the item, so at most
    one item is ever in flight and nothing is buffered between cycles.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._item: T | None = None
        self._pending = False
        self._closed = False

    def send(self, item: T) -> bool:
        """Hand an item to the receiver, blocking until it is taken.

        Returns:
            True once the receiver took the item, False if the channel was
            closed before that happened
        """
        with self._cond:
            # Another sender's item is still waiting to be taken
            self._cond.wait_for(lambda: not self._pending or self._closed)
            if self._closed:
                return False

            self._item = item
            self._pending = True
            self._cond.notify_all()

            self._cond.wait_for(lambda: not self._pending or self._closed)
            if self._pending:
                # Closed before anyone took it
                self._item = None
                self._pending = False
                return False

            return True

    def receive(self, timeout: float | None = None) -> T | None:
        """Take the next item, blocking until one is sent.

        Returns:
            The item, or None when the channel is closed or the timeout elapses
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._pending or self._closed, timeout=timeout
            )
            if not ready or not self._pending:
                return None

            item = self._item
            self._item = None
            self._pending = False
            self._cond.notify_all()
            return item

    def close(self) -> None:
        """Close the channel and wake every blocked sender and receiver."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed
