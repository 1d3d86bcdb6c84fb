"""Test notification routing."""

from __future__ import annotations

import pytest
from miband.dispatcher import NotificationDispatcher
from miband.protocol.responses import parse_heart_rate
from miband.protocol.uuids import Endpoint, EndpointId, sig_uuid


def test_routes_by_endpoint() -> None:
    dispatcher = NotificationDispatcher()
    rates: list[int] = []
    events: list[bytes] = []
    dispatcher.bind(Endpoint.HEART_RATE_DATA.id, lambda d: rates.append(parse_heart_rate(d)))
    dispatcher.bind(Endpoint.EVENT.id, events.append)

    dispatcher.dispatch(Endpoint.HEART_RATE_DATA.id, b"\x00\x48")
    dispatcher.dispatch(Endpoint.EVENT.id, b"\x04")

    assert rates == [72]
    assert events == [b"\x04"]


def test_same_characteristic_in_other_service_is_not_routed() -> None:
    """Routing keys on the full (service, characteristic) pair."""
    dispatcher = NotificationDispatcher()
    seen: list[bytes] = []
    dispatcher.bind(Endpoint.HEART_RATE_DATA.id, seen.append)

    other = EndpointId(sig_uuid("1800"), Endpoint.HEART_RATE_DATA.id.characteristic)
    dispatcher.dispatch(other, b"\x00\x48")

    assert seen == []


def test_unbound_endpoint_dropped() -> None:
    dispatcher = NotificationDispatcher()

    dispatcher.dispatch(Endpoint.BATTERY.id, b"\x00\x01\x02")

    assert not dispatcher.is_bound(Endpoint.BATTERY.id)


def test_malformed_payload_dropped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    dispatcher = NotificationDispatcher()
    seen: list[int] = []
    dispatcher.bind(Endpoint.HEART_RATE_DATA.id, lambda d: seen.append(parse_heart_rate(d)))

    dispatcher.dispatch(Endpoint.HEART_RATE_DATA.id, b"\x48")
    dispatcher.dispatch(Endpoint.HEART_RATE_DATA.id, b"\x00\x50")

    assert seen == [80]
    assert "malformed" in caplog.text


def test_handler_bug_does_not_escape() -> None:
    dispatcher = NotificationDispatcher()

    def _broken(data: bytes) -> None:
        raise KeyError("bug")

    dispatcher.bind(Endpoint.EVENT.id, _broken)
    dispatcher.dispatch(Endpoint.EVENT.id, b"\x04")


def test_bind_twice_rejected() -> None:
    dispatcher = NotificationDispatcher()
    dispatcher.bind(Endpoint.AUTH.id, lambda d: None)

    with pytest.raises(ValueError, match="already bound"):
        dispatcher.bind(Endpoint.AUTH.id, lambda d: None)
