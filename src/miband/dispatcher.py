"""Route inbound notifications to handlers by endpoint identity."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .exceptions import InvalidResponseError
from .protocol.uuids import EndpointId

_LOGGER = logging.getLogger(__name__)

NotificationHandler = Callable[[bytes], None]


class NotificationDispatcher:
    """Table of EndpointId -> handler, filled once when endpoints are bound.

    Routing only looks at the originating endpoint, never at session phase,
    so a sample that arrives early is still delivered (or dropped) sanely.
    """

    def __init__(self) -> None:
        self._handlers: dict[EndpointId, NotificationHandler] = {}

    def bind(self, endpoint: EndpointId, handler: NotificationHandler) -> None:
        """Register the handler for one endpoint.

        Raises:
            ValueError: If the endpoint already has a handler
        """
        if endpoint in self._handlers:
            raise ValueError(f"Endpoint {endpoint} already bound")
        self._handlers[endpoint] = handler

    def is_bound(self, endpoint: EndpointId) -> bool:
        return endpoint in self._handlers

    def dispatch(self, endpoint: EndpointId, data: bytes) -> None:
        """Deliver one notification. Never raises."""
        handler = self._handlers.get(endpoint)
        if handler is None:
            _LOGGER.debug("Dropping notification from unbound %s: %s", endpoint, data.hex())
            return

        try:
            handler(data)
        except InvalidResponseError as e:
            _LOGGER.warning("Dropping malformed notification from %s: %s", endpoint, e)
        except Exception:
            _LOGGER.exception("Handler for %s failed on %s", endpoint, data.hex())
