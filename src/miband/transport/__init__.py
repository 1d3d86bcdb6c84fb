"""BLE transport layer."""

from .base import EndpointTransport, NotificationCallback
from .connection import BLEConnection

__all__ = [
    "BLEConnection",
    "EndpointTransport",
    "NotificationCallback",
]
