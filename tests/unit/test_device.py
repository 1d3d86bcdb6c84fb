"""Test MiBandDevice against a fake endpoint transport."""

from __future__ import annotations

import asyncio
import struct
from datetime import date, datetime

import pytest
from miband import MiBandDevice
from miband.exceptions import (
    AuthRejectedError,
    BLETimeoutError,
    EndpointNotFoundError,
    MiBandError,
)
from miband.models import AlertType, PedometerStats, Sex, UserInfo
from miband.protocol.crypto import DEFAULT_DEVICE_KEY
from miband.protocol.uuids import Endpoint, EndpointId

CHALLENGE_OK = b"\x10\x02\x01" + bytes(range(16))
AUTH_OK = b"\x10\x03\x01"


class _FakeTransport:
    def __init__(
            self,
            reads: dict[Endpoint, bytes] | None = None,
            auth_replies: list[bytes] | None = None,
    ):
        self._reads = {endpoint.id: data for endpoint, data in (reads or {}).items()}
        self._auth_replies = [CHALLENGE_OK, AUTH_OK] if auth_replies is None else auth_replies[:]
        self.written: list[tuple[EndpointId, bytes]] = []
        self.subscribed: list[EndpointId] = []
        self.callback = None
        self.on_disconnect = None

    async def read(self, endpoint: EndpointId) -> bytes:
        if endpoint not in self._reads:
            raise EndpointNotFoundError(f"Characteristic {endpoint} not found")
        return self._reads[endpoint]

    async def write(self, endpoint: EndpointId, data: bytes, response: bool = True) -> None:
        self.written.append((endpoint, bytes(data)))
        if endpoint == Endpoint.AUTH.id and self._auth_replies:
            self.notify(Endpoint.AUTH, self._auth_replies.pop(0))

    async def subscribe(self, endpoint: EndpointId, callback) -> None:
        self.subscribed.append(endpoint)
        self.callback = callback

    def notify(self, endpoint: Endpoint, data: bytes) -> None:
        asyncio.get_running_loop().call_soon(self.callback, endpoint.id, data)

    def writes_to(self, endpoint: Endpoint) -> list[bytes]:
        return [data for target, data in self.written if target == endpoint.id]


def _device(transport: _FakeTransport) -> MiBandDevice:
    return MiBandDevice(transport, device_key=DEFAULT_DEVICE_KEY, settle_delay=0)


@pytest.mark.asyncio
async def test_init_subscribes_and_authenticates() -> None:
    transport = _FakeTransport()
    device = _device(transport)
    authenticated: list[None] = []
    device.authenticated.subscribe(authenticated.append)

    await device.init(auth_timeout=1.0)

    assert device.is_authenticated
    assert authenticated == [None]
    assert transport.subscribed == [
        Endpoint.AUTH.id,
        Endpoint.HEART_RATE_DATA.id,
        Endpoint.HEART_RATE_CONTROL.id,
        Endpoint.EVENT.id,
    ]
    auth_writes = transport.writes_to(Endpoint.AUTH)
    assert auth_writes[0] == b"\x02\x08"
    assert auth_writes[1][:2] == b"\x03\x08"


@pytest.mark.asyncio
async def test_init_auth_rejected() -> None:
    """A rejected handshake stops init before the other subscriptions."""
    transport = _FakeTransport(auth_replies=[b"\x10\x02\x04"])
    device = _device(transport)
    errors: list[MiBandError] = []
    device.error.subscribe(errors.append)

    with pytest.raises(AuthRejectedError):
        await device.init(auth_timeout=1.0)

    assert transport.subscribed == [Endpoint.AUTH.id]
    assert len(errors) == 1
    assert not device.is_authenticated


@pytest.mark.asyncio
async def test_context_manager() -> None:
    transport = _FakeTransport()

    async with _device(transport) as device:
        assert device.is_authenticated


@pytest.mark.asyncio
async def test_heart_rate_notifications_published() -> None:
    transport = _FakeTransport()
    device = _device(transport)
    await device.init(auth_timeout=1.0)
    rates: list[int] = []
    device.heart_rate.subscribe(rates.append)

    transport.callback(Endpoint.HEART_RATE_DATA.id, b"\x00\x48")
    transport.callback(Endpoint.HEART_RATE_DATA.id, b"\x48")  # malformed, dropped

    assert rates == [72]


@pytest.mark.asyncio
async def test_button_notifications() -> None:
    transport = _FakeTransport()
    device = _device(transport)
    await device.init(auth_timeout=1.0)

    transport.notify(Endpoint.EVENT, b"\x04")
    await device.wait_button(timeout=1.0)


@pytest.mark.asyncio
async def test_other_events_are_not_button_presses() -> None:
    transport = _FakeTransport()
    device = _device(transport)
    await device.init(auth_timeout=1.0)

    transport.notify(Endpoint.EVENT, b"\x05")
    with pytest.raises(BLETimeoutError):
        await device.wait_button(timeout=0.05)


@pytest.mark.asyncio
async def test_hrm_read() -> None:
    transport = _FakeTransport()
    device = _device(transport)
    await device.init(auth_timeout=1.0)

    async def _measure() -> int:
        return await device.hrm_read(timeout=1.0)

    task = asyncio.create_task(_measure())
    await asyncio.sleep(0.01)
    transport.notify(Endpoint.HEART_RATE_DATA, b"\x00\x3C")

    assert await task == 60
    assert transport.writes_to(Endpoint.HEART_RATE_CONTROL) == [
        b"\x15\x02\x00",
        b"\x15\x01\x00",
        b"\x15\x02\x01",
    ]


@pytest.mark.asyncio
async def test_hrm_start_stop() -> None:
    transport = _FakeTransport()
    device = MiBandDevice(
        transport, device_key=DEFAULT_DEVICE_KEY, settle_delay=0, ping_interval=0.01
    )
    await device.init(auth_timeout=1.0)

    await device.hrm_start()
    assert device.hrm_running
    await asyncio.sleep(0.05)
    await device.hrm_stop()

    assert not device.hrm_running
    control = transport.writes_to(Endpoint.HEART_RATE_CONTROL)
    assert control[:3] == [b"\x15\x01\x00", b"\x15\x02\x00", b"\x15\x01\x01"]
    assert b"\x16" in control
    assert control[-1] == b"\x15\x01\x00"


@pytest.mark.asyncio
async def test_disconnect_stops_keepalive() -> None:
    transport = _FakeTransport()
    device = MiBandDevice(
        transport, device_key=DEFAULT_DEVICE_KEY, settle_delay=0, ping_interval=0.01
    )
    await device.init(auth_timeout=1.0)
    await device.hrm_start()

    transport.on_disconnect()

    assert not device.hrm_running


@pytest.mark.asyncio
async def test_disconnect_keeps_existing_callback() -> None:
    transport = _FakeTransport()
    calls: list[str] = []
    transport.on_disconnect = lambda: calls.append("caller")
    device = MiBandDevice(
        transport, device_key=DEFAULT_DEVICE_KEY, settle_delay=0, ping_interval=0.01
    )
    await device.init(auth_timeout=1.0)
    await device.hrm_start()

    transport.on_disconnect()

    assert not device.hrm_running
    assert calls == ["caller"]


@pytest.mark.asyncio
async def test_show_notification() -> None:
    transport = _FakeTransport()
    device = _device(transport)

    await device.show_notification("phone")
    await device.show_notification(AlertType.VIBRATE)
    await device.show_notification()

    assert transport.writes_to(Endpoint.ALERT) == [b"\x02", b"\x03", b"\x01"]


@pytest.mark.asyncio
async def test_show_notification_unknown_name() -> None:
    transport = _FakeTransport()
    device = _device(transport)

    with pytest.raises(ValueError):
        await device.show_notification("email")
    assert transport.written == []


@pytest.mark.asyncio
async def test_readouts() -> None:
    clock = struct.pack("<HBBBBBBB", 2024, 5, 17, 8, 30, 15, 5, 0x40)
    transport = _FakeTransport(reads={
        Endpoint.STEPS: b"\x0C" + (4321).to_bytes(2, "little") + b"\x00\x00"
                        + (3100).to_bytes(4, "little") + (150).to_bytes(4, "little"),
        Endpoint.BATTERY: bytes([0x0F, 42, 0x00]),
        Endpoint.TIME: clock,
        Endpoint.HW_REVISION: b"V0.1.3",
        Endpoint.SW_REVISION: b"V1.0.0.39",
    })
    device = _device(transport)

    assert await device.get_pedometer_stats() == PedometerStats(4321, 3100, 150)
    battery = await device.get_battery_info()
    assert battery.level == 42
    assert battery.charging is False
    assert await device.get_time() == datetime(2024, 5, 17, 8, 30, 15)
    assert await device.get_hw_revision() == "0.1.3"
    assert await device.get_sw_revision() == "1.0.0.39"


@pytest.mark.asyncio
async def test_battery_without_data() -> None:
    transport = _FakeTransport(reads={Endpoint.BATTERY: b"\x0F"})
    device = _device(transport)

    assert await device.get_battery_info() is None


@pytest.mark.asyncio
async def test_serial() -> None:
    transport = _FakeTransport(reads={Endpoint.SERIAL: b"12345678"})
    assert await _device(transport).get_serial() == "12345678"


@pytest.mark.asyncio
async def test_serial_missing_returns_none() -> None:
    transport = _FakeTransport()
    assert await _device(transport).get_serial() is None


@pytest.mark.asyncio
async def test_missing_characteristic_propagates() -> None:
    transport = _FakeTransport()

    with pytest.raises(EndpointNotFoundError):
        await _device(transport).get_pedometer_stats()


@pytest.mark.asyncio
async def test_set_user_info() -> None:
    transport = _FakeTransport()
    device = _device(transport)
    user = UserInfo(born=date(1988, 11, 3), sex=Sex.MALE, height_cm=180, weight_kg=80, user_id=7)

    await device.set_user_info(user)

    assert transport.writes_to(Endpoint.USER) == [user.to_bytes()]


def test_invalid_device_key() -> None:
    with pytest.raises(ValueError):
        MiBandDevice(_FakeTransport(), device_key=b"\x00" * 15)
