"""Mi Band 2 BLE Protocol Package.

  Pure Python asyncio driver for authenticating to and talking with
  Mi Band 2 wearables.
  """

from .auth import AuthStateMachine
from .device import MiBandDevice
from .dispatcher import NotificationDispatcher
from .events import EventChannel
from .exceptions import (
    AuthError,
    AuthInProgressError,
    AuthKeyMismatchError,
    AuthRejectedError,
    BLEConnectionError,
    BLETimeoutError,
    EndpointNotFoundError,
    InvalidResponseError,
    MalformedPayloadError,
    MiBandError,
    ProtocolError,
    TransportError,
)
from .heart_rate import HeartRateSession
from .models import (
    AlertType,
    AuthState,
    BatteryInfo,
    HrmCommand,
    PedometerStats,
    Sex,
    UserInfo,
)
from .protocol import DEFAULT_DEVICE_KEY, Endpoint, EndpointId, generate_device_key
from .transport import BLEConnection, EndpointTransport

__version__ = "0.1.0"

__all__ = [
    # Main API
    "MiBandDevice",
    "BLEConnection",
    "EndpointTransport",
    # Components
    "AuthStateMachine",
    "HeartRateSession",
    "NotificationDispatcher",
    "EventChannel",
    # Exceptions
    "MiBandError",
    "TransportError",
    "BLEConnectionError",
    "EndpointNotFoundError",
    "BLETimeoutError",
    "ProtocolError",
    "InvalidResponseError",
    "MalformedPayloadError",
    "AuthError",
    "AuthRejectedError",
    "AuthKeyMismatchError",
    "AuthInProgressError",
    # Models
    "BatteryInfo",
    "PedometerStats",
    "UserInfo",
    # Enums
    "AlertType",
    "AuthState",
    "HrmCommand",
    "Sex",
    # Endpoints and keys
    "Endpoint",
    "EndpointId",
    "DEFAULT_DEVICE_KEY",
    "generate_device_key",
]
