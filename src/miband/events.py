"""Typed event channels for device-originated events."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from .exceptions import BLETimeoutError

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class EventChannel(Generic[T]):
    """Multi-consumer channel for one kind of device event.

    Every subscriber is called for every published value, in subscription
    order. Any number of one-shot waiters can also be pending; each is
    resolved by the next published value and then removed. A waiter that
    times out is removed before the timeout is reported, so a later event
    never resolves it.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Callable[[T], None]] = []
        self._waiters: list[asyncio.Future[T]] = []

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register a callback; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def publish(self, value: T) -> None:
        """Deliver value to all subscribers and pending waiters."""
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(value)

        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception:
                _LOGGER.exception("Subscriber for %s event raised", self.name)

    def create_waiter(self) -> asyncio.Future[T]:
        """Register a one-shot waiter resolved by the next published value.

        Use this when the waiter must exist before the command that triggers
        the event is written, then pass it to wait().
        """
        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        return future

    def discard_waiter(self, future: asyncio.Future[T]) -> None:
        """Drop a waiter without resolving it."""
        if future in self._waiters:
            self._waiters.remove(future)
        if not future.done():
            future.cancel()

    async def wait(
            self,
            timeout: float,
            waiter: asyncio.Future[T] | None = None,
    ) -> T:
        """Wait for the next published value.

        Args:
            timeout: Seconds to wait
            waiter: Waiter from create_waiter() (a new one is made if omitted)

        Raises:
            BLETimeoutError: If nothing was published within timeout
        """
        future = waiter if waiter is not None else self.create_waiter()
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"No {self.name} event received within {timeout}s"
            ) from e
        finally:
            self.discard_waiter(future)

    @property
    def subscriber_count(self) -> int:
        """Number of registered subscribers."""
        return len(self._subscribers)

    @property
    def pending_waiters(self) -> int:
        """Number of one-shot waiters not yet resolved."""
        return len(self._waiters)
