"""Endpoint transport interface."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from ..protocol.uuids import EndpointId

NotificationCallback = Callable[[EndpointId, bytes], None]


class EndpointTransport(Protocol):
    """Read/write/subscribe access to already-discovered characteristics.

    Implementations raise TransportError subclasses on failure and
    EndpointNotFoundError when the device does not expose the endpoint.
    """

    async def read(self, endpoint: EndpointId) -> bytes:
        """Read the current value of a characteristic."""

    async def write(
            self,
            endpoint: EndpointId,
            data: bytes,
            response: bool = True,
    ) -> None:
        """Write a value to a characteristic."""

    async def subscribe(
            self,
            endpoint: EndpointId,
            callback: NotificationCallback,
    ) -> None:
        """Start notifications; callback receives (endpoint, data)."""
