"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from bleak import BleakClient
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import BLEConnectionError, BLETimeoutError, EndpointNotFoundError
from ..protocol.uuids import EndpointId
from .base import NotificationCallback

if TYPE_CHECKING:
    from bleak.backends.characteristic import BleakGATTCharacteristic
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class BLEConnection:
    """Endpoint transport backed by a bleak client.

    Features:
    - Connection via bleak-retry-connector with service caching
    - Characteristic lookup by (service, characteristic) identity
    - Context manager for automatic cleanup
    - Disconnect callback so sessions can tear down timers

    Discovery is the caller's job: pass the BLEDevice found by a scanner
    (or by Home Assistant's bluetooth integration).
    """

    def __init__(
            self,
            ble_device: BLEDevice,
            timeout: float = 10.0,
            max_attempts: int = 3,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        Args:
            ble_device: Already-discovered device
            timeout: Connection and GATT operation timeout in seconds (default: 10)
            max_attempts: Maximum connection attempts for bleak-retry-connector (default: 3)
            use_services_cache: Enable GATT service caching for faster reconnections (default: True)
        """
        self.ble_device = ble_device
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._characteristics: dict[EndpointId, BleakGATTCharacteristic] = {}
        self.on_disconnect: Callable[[], None] | None = None

    @property
    def address(self) -> str:
        """Device BLE address."""
        return self.ble_device.address

    async def __aenter__(self) -> BLEConnection:
        """Connect to device (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device (context manager exit)."""
        await self.disconnect()

    async def connect(self) -> None:
        """Establish BLE connection to device.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return  # Already connected

        try:
            _LOGGER.debug(
                "Connecting to %s with bleak-retry-connector (max_attempts=%d)",
                self.address,
                self.max_attempts,
            )
            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=self.ble_device,
                name=self.ble_device.name or self.address,
                disconnected_callback=self._on_disconnected,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
            )
            self._characteristics.clear()
            _LOGGER.debug("Connected to %s", self.address)

        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from device."""
        if self._client and self._client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self.address)
                await self._client.disconnect()
            except BleakError as e:
                _LOGGER.warning("Error during disconnect: %s", e)
            finally:
                self._client = None
                self._characteristics.clear()

    def _on_disconnected(self, client: BleakClient) -> None:
        _LOGGER.info("Disconnected from %s", self.address)
        self._characteristics.clear()
        if self.on_disconnect:
            self.on_disconnect()

    def _require_client(self) -> BleakClient:
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")
        return self._client

    def _resolve(self, endpoint: EndpointId) -> BleakGATTCharacteristic:
        """Find the GATT characteristic for an endpoint identity.

        Falls back to a lookup by characteristic UUID alone when the
        characteristic lives under a different service on this firmware.

        Raises:
            EndpointNotFoundError: If the device does not expose it
        """
        cached = self._characteristics.get(endpoint)
        if cached is not None:
            return cached

        services = self._require_client().services
        characteristic = None

        try:
            service = services.get_service(endpoint.service)
            if service is not None:
                characteristic = service.get_characteristic(endpoint.characteristic)
            if characteristic is None:
                characteristic = services.get_characteristic(endpoint.characteristic)
        except BleakError as e:
            raise EndpointNotFoundError(f"Ambiguous endpoint {endpoint}: {e}") from e

        if characteristic is None:
            raise EndpointNotFoundError(f"Endpoint {endpoint} not found")

        self._characteristics[endpoint] = characteristic
        return characteristic

    async def read(self, endpoint: EndpointId) -> bytes:
        """Read a characteristic value.

        Raises:
            BLEConnectionError: If not connected or read fails
            BLETimeoutError: If the read does not complete within timeout
        """
        characteristic = self._resolve(endpoint)
        try:
            data = await asyncio.wait_for(
                self._require_client().read_gatt_char(characteristic),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Read of {endpoint} timed out after {self.timeout}s") from e
        except BleakError as e:
            raise BLEConnectionError(f"Read failed: {e}") from e

        _LOGGER.debug("RX read %s: %s", endpoint.characteristic, bytes(data).hex())
        return bytes(data)

    async def write(
            self,
            endpoint: EndpointId,
            data: bytes,
            response: bool = True,
    ) -> None:
        """Write a value to a characteristic.

        Raises:
            BLEConnectionError: If not connected or write fails
            BLETimeoutError: If the write does not complete within timeout
        """
        characteristic = self._resolve(endpoint)
        _LOGGER.debug("TX %s: %s", endpoint.characteristic, bytes(data).hex())
        try:
            await asyncio.wait_for(
                self._require_client().write_gatt_char(
                    characteristic,
                    data,
                    response=response,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Write to {endpoint} timed out after {self.timeout}s") from e
        except BleakError as e:
            raise BLEConnectionError(f"Write failed: {e}") from e

    async def subscribe(
            self,
            endpoint: EndpointId,
            callback: NotificationCallback,
    ) -> None:
        """Start notifications on a characteristic.

        Raises:
            BLEConnectionError: If not connected or subscription fails
        """
        characteristic = self._resolve(endpoint)

        def _notification_callback(_: BleakGATTCharacteristic, data: bytearray) -> None:
            callback(endpoint, bytes(data))

        try:
            await self._require_client().start_notify(characteristic, _notification_callback)
        except BleakError as e:
            raise BLEConnectionError(f"Subscribe to {endpoint} failed: {e}") from e

        _LOGGER.debug("Notifications started for %s", endpoint.characteristic)

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to device."""
        return self._client is not None and self._client.is_connected
