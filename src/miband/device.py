"""Main Mi Band device class."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime

from .auth import AuthStateMachine
from .dispatcher import NotificationDispatcher
from .events import EventChannel
from .exceptions import EndpointNotFoundError, MiBandError
from .heart_rate import HeartRateSession
from .models.enums import AlertType
from .models.readouts import BatteryInfo, PedometerStats
from .models.user import UserInfo
from .protocol.commands import (
    AUTH_TIMEOUT,
    BUTTON_TIMEOUT,
    HEART_RATE_TIMEOUT,
    HRM_PING_INTERVAL,
    SETTLE_DELAY,
    build_alert_command,
    build_user_info_command,
)
from .protocol.responses import (
    is_button_event,
    parse_battery_info,
    parse_heart_rate,
    parse_pedometer_stats,
    parse_timestamp,
    parse_version_string,
)
from .protocol.uuids import Endpoint, EndpointId
from .transport import EndpointTransport

_LOGGER = logging.getLogger(__name__)


class MiBandDevice:
    """Mi Band 2 wearable.

    Main API for talking to an authenticated band over an endpoint
    transport (BLEConnection, or any object with async read/write/subscribe).

    Usage:
        async with BLEConnection(ble_device) as connection:
            band = MiBandDevice(connection, device_key=key)
            await band.init()

            band.heart_rate.subscribe(lambda bpm: print("Heart rate:", bpm))
            await band.hrm_start()

    Events (EventChannel, multi-consumer):
        heart_rate: int samples from the heart rate data characteristic
        button: None on every button press
        authenticated: None when the handshake completes
        error: MiBandError on device-side auth failures
    """

    def __init__(
            self,
            transport: EndpointTransport,
            device_key: bytes,
            settle_delay: float = SETTLE_DELAY,
            ping_interval: float = HRM_PING_INTERVAL,
    ):
        """Initialize Mi Band device.

        Args:
            transport: Connected transport with discovered characteristics
            device_key: 16-byte AES key (generate and persist one per band)
            settle_delay: Pause between enabling auth notifications and authenticating
            ping_interval: Heart rate keepalive period in seconds (default: 12)
        """
        self._transport = transport
        self.settle_delay = settle_delay

        self.heart_rate: EventChannel[int] = EventChannel("heart_rate")
        self.button: EventChannel[None] = EventChannel("button")
        self.authenticated: EventChannel[None] = EventChannel("authenticated")
        self.error: EventChannel[MiBandError] = EventChannel("error")

        self._auth = AuthStateMachine(
            send_func=lambda data: self._write(Endpoint.AUTH, data),
            device_key=device_key,
        )
        self._auth.on_authenticated = lambda: self.authenticated.publish(None)
        self._auth.on_error = self.error.publish

        self._hrm = HeartRateSession(
            send_func=lambda data: self._write(Endpoint.HEART_RATE_CONTROL, data),
            heart_rate=self.heart_rate,
            ping_interval=ping_interval,
        )

        self._dispatcher = NotificationDispatcher()
        self._dispatcher.bind(Endpoint.AUTH.id, self._auth.handle_notification)
        self._dispatcher.bind(Endpoint.HEART_RATE_DATA.id, self._handle_heart_rate)
        self._dispatcher.bind(Endpoint.HEART_RATE_CONTROL.id, self._handle_hrm_control)
        self._dispatcher.bind(Endpoint.EVENT.id, self._handle_event)
        self._dispatcher.bind(Endpoint.RAW_DATA.id, self._handle_raw_data)

        # A callback already set on the transport keeps running after ours
        self._previous_on_disconnect: Callable[[], None] | None = None
        if hasattr(transport, "on_disconnect"):
            self._previous_on_disconnect = transport.on_disconnect
            transport.on_disconnect = self._on_disconnect

    async def __aenter__(self) -> MiBandDevice:
        """Subscribe and authenticate."""
        await self.init()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Stop background activity."""
        self.close()

    @property
    def is_authenticated(self) -> bool:
        return self._auth.is_authenticated

    @property
    def hrm_running(self) -> bool:
        """True while continuous heart rate keepalive is armed."""
        return self._hrm.is_running

    async def init(self, auth_timeout: float = AUTH_TIMEOUT) -> None:
        """Enable notifications and authenticate.

        Raises:
            AuthError: If the band rejects the handshake
            BLETimeoutError: If the handshake times out
            TransportError: If a subscription fails
        """
        await self._subscribe(Endpoint.AUTH)
        await asyncio.sleep(self.settle_delay)
        await self.authenticate(timeout=auth_timeout)
        await self._subscribe(Endpoint.HEART_RATE_DATA)
        await self._subscribe(Endpoint.HEART_RATE_CONTROL)
        await self._subscribe(Endpoint.EVENT)
        _LOGGER.info("Band initialized")

    async def authenticate(self, timeout: float = AUTH_TIMEOUT) -> None:
        """Run the auth handshake (see AuthStateMachine)."""
        await self._auth.authenticate(timeout=timeout)

    def close(self) -> None:
        """Cancel the heart rate keepalive and any pending handshake."""
        self._hrm.close()
        self._auth.close()

    # Notifications

    def _on_notification(self, endpoint: EndpointId, data: bytes) -> None:
        self._dispatcher.dispatch(endpoint, data)

    def _on_disconnect(self) -> None:
        _LOGGER.debug("Transport disconnected, tearing down session")
        self.close()
        if self._previous_on_disconnect:
            self._previous_on_disconnect()

    def _handle_heart_rate(self, data: bytes) -> None:
        rate = parse_heart_rate(data)
        _LOGGER.debug("Heart rate: %d", rate)
        self.heart_rate.publish(rate)

    def _handle_hrm_control(self, data: bytes) -> None:
        _LOGGER.debug("HRM control notification: %s", data.hex())

    def _handle_event(self, data: bytes) -> None:
        if is_button_event(data):
            _LOGGER.debug("Button pressed")
            self.button.publish(None)
        else:
            _LOGGER.debug("Unhandled event: %s", data.hex())

    def _handle_raw_data(self, data: bytes) -> None:
        # Raw accelerometer samples are not decoded
        _LOGGER.debug("RAW data: %s", data.hex())

    # Transport helpers

    async def _subscribe(self, endpoint: Endpoint) -> None:
        await self._transport.subscribe(endpoint.id, self._on_notification)
        _LOGGER.debug("Subscribed to %s", endpoint.name)

    async def _write(self, endpoint: Endpoint, data: bytes) -> None:
        await self._transport.write(endpoint.id, data)

    async def _read(self, endpoint: Endpoint) -> bytes:
        return await self._transport.read(endpoint.id)

    # Buttons and alerts

    async def wait_button(self, timeout: float = BUTTON_TIMEOUT) -> None:
        """Wait for the next button press.

        Raises:
            BLETimeoutError: If the button is not pressed within timeout
        """
        await self.button.wait(timeout)

    async def show_notification(self, alert: AlertType | str = AlertType.MESSAGE) -> None:
        """Trigger an immediate alert on the band.

        Args:
            alert: AlertType, or one of "message", "phone", "vibrate", "off"

        Raises:
            ValueError: If the alert name is not recognized
        """
        if isinstance(alert, str):
            alert = AlertType.from_name(alert)
        _LOGGER.debug("Notification: %s", alert.name.lower())
        await self._write(Endpoint.ALERT, build_alert_command(alert))

    # Heart rate monitor

    async def hrm_read(self, timeout: float = HEART_RATE_TIMEOUT) -> int:
        """Take a single heart rate measurement (bpm)."""
        return await self._hrm.read_once(timeout=timeout)

    async def hrm_start(self) -> None:
        """Start continuous heart rate monitoring; samples arrive on heart_rate."""
        await self._hrm.start_continuous()

    async def hrm_stop(self) -> None:
        """Stop continuous heart rate monitoring."""
        await self._hrm.stop_continuous()

    # Readouts

    async def get_pedometer_stats(self) -> PedometerStats:
        """Read steps, distance and calories."""
        return parse_pedometer_stats(await self._read(Endpoint.STEPS))

    async def get_battery_info(self) -> BatteryInfo | None:
        """Read battery state; None when the band reports nothing."""
        return parse_battery_info(await self._read(Endpoint.BATTERY))

    async def get_time(self) -> datetime:
        """Read the band's clock."""
        return parse_timestamp(await self._read(Endpoint.TIME))

    async def get_serial(self) -> str | None:
        """Read the serial number; None if the band does not expose it."""
        try:
            data = await self._read(Endpoint.SERIAL)
        except EndpointNotFoundError:
            _LOGGER.debug("Serial number characteristic not available")
            return None
        return bytes(data).decode("utf-8", errors="replace")

    async def get_hw_revision(self) -> str:
        """Read the hardware revision (leading 'V' stripped)."""
        return parse_version_string(await self._read(Endpoint.HW_REVISION))

    async def get_sw_revision(self) -> str:
        """Read the firmware revision (leading 'V' stripped)."""
        return parse_version_string(await self._read(Endpoint.SW_REVISION))

    async def set_user_info(self, user: UserInfo) -> None:
        """Write the wearer profile. The band does not reply."""
        _LOGGER.debug("Setting user info for id %d", user.user_id)
        await self._write(Endpoint.USER, build_user_info_command(user))
