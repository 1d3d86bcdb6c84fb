"""BLE response and notification parsing."""

from __future__ import annotations

import logging
import struct
from datetime import MAXYEAR, MINYEAR, datetime, timedelta

from ..exceptions import MalformedPayloadError
from ..models.enums import AuthReplyKind
from ..models.readouts import AuthReply, BatteryInfo, PedometerStats
from .commands import BUTTON_EVENT

_LOGGER = logging.getLogger(__name__)

AUTH_STATUS_LENGTH = 3
TIMESTAMP_LENGTH = 7

_AUTH_REPLY_CODES = {
    kind.value: kind for kind in AuthReplyKind if kind is not AuthReplyKind.UNKNOWN
}


def parse_auth_reply(data: bytes) -> AuthReply:
    """Decode a notification from the auth characteristic.

    Format: [status:3][payload...]
    The first three bytes select the reply; CHALLENGE_OK carries the
    16-byte challenge as payload.

    Args:
        data: Raw notification data

    Returns:
        AuthReply; unrecognized codes map to UNKNOWN with the raw bytes
    """
    status = bytes(data[:AUTH_STATUS_LENGTH]).hex()
    kind = _AUTH_REPLY_CODES.get(status) if len(data) >= AUTH_STATUS_LENGTH else None

    if kind is None:
        return AuthReply(kind=AuthReplyKind.UNKNOWN, payload=bytes(data))
    if kind is AuthReplyKind.CHALLENGE_OK:
        return AuthReply(kind=kind, payload=bytes(data[AUTH_STATUS_LENGTH:]))
    return AuthReply(kind=kind)


def parse_heart_rate(data: bytes) -> int:
    """Decode a heart rate measurement notification.

    Format: [bpm:2 BE]

    Raises:
        MalformedPayloadError: If fewer than 2 bytes
    """
    if len(data) < 2:
        raise MalformedPayloadError(
            f"Heart rate payload too short: {len(data)} bytes (need 2)"
        )
    return struct.unpack(">H", data[0:2])[0]


def is_button_event(data: bytes) -> bool:
    """Check whether an event characteristic notification is a button press."""
    return bytes(data) == BUTTON_EVENT


def parse_timestamp(data: bytes) -> datetime:
    """Decode a device timestamp.

    Format: [year:2 LE][month:1][day:1][hour:1][min:1][sec:1][weekday:1][frac:1]
    Month is 1-based on the wire.

    Out-of-range fields roll over into the next larger unit (month 0 is
    December of the previous year, day 0 the last day of the previous
    month, hour 25 is 01:00 the next day), so any 7 bytes decode. Years
    outside what datetime can hold are clamped.

    The fractional byte is scaled to milliseconds but not applied, so the
    result is truncated to whole seconds.

    Raises:
        MalformedPayloadError: If fewer than 7 bytes
    """
    if len(data) < TIMESTAMP_LENGTH:
        raise MalformedPayloadError(
            f"Timestamp too short: {len(data)} bytes (need {TIMESTAMP_LENGTH})"
        )

    year = struct.unpack("<H", data[0:2])[0]
    month, day, hour, minute, second = data[2:7]
    # TODO: apply msec once the band's sub-second precision is confirmed
    msec = data[8] * 1000 / 256 if len(data) > 8 else 0.0

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    # Leave a year of headroom so the rolled-over offset below never overflows
    clamped = min(max(year, MINYEAR + 1), MAXYEAR - 1)
    if clamped != year:
        _LOGGER.debug("Timestamp year %d clamped to %d", year, clamped)

    offset = timedelta(days=day - 1, hours=hour, minutes=minute, seconds=second)
    result = datetime(clamped, month, 1) + offset
    _LOGGER.debug("Decoded timestamp %s (+%.0fms dropped)", result, msec)
    return result


def parse_battery_info(data: bytes) -> BatteryInfo | None:
    """Decode the battery characteristic.

    Format:
        [0]: unknown
        [1]: level (percent)
        [2]: charging flag
        [3-9]: last off-charger timestamp
        [10]: charge counter (ignored)
        [11-17]: last charge timestamp
        [18]: unknown
        [19]: last charge level

    Returns:
        BatteryInfo, or None when the band reports no data (<= 2 bytes)
    """
    if len(data) <= 2:
        return None

    off_date = parse_timestamp(data[3:10]) if len(data) >= 10 else None
    charge_date = parse_timestamp(data[11:18]) if len(data) >= 18 else None

    return BatteryInfo(
        level=data[1],
        charging=bool(data[2]),
        off_date=off_date,
        charge_date=charge_date,
        charge_level=data[19] if len(data) >= 20 else None,
    )


def parse_pedometer_stats(data: bytes) -> PedometerStats:
    """Decode the steps characteristic.

    Format: [unknown:1][steps:2 LE][unknown:2][distance:4 LE][calories:4 LE]

    Raises:
        MalformedPayloadError: If the steps field is missing
    """
    if len(data) < 2:
        raise MalformedPayloadError(
            f"Pedometer payload too short: {len(data)} bytes (need at least 2)"
        )

    # Fields cut short by the payload end read their missing high bytes as zero
    steps = int.from_bytes(data[1:3], "little")
    distance = int.from_bytes(data[5:9], "little") if len(data) >= 8 else None
    calories = int.from_bytes(data[9:13], "little") if len(data) >= 12 else None

    return PedometerStats(steps=steps, distance=distance, calories=calories)


def parse_version_string(data: bytes) -> str:
    """Decode a revision string, dropping a leading 'V'/'v'."""
    text = bytes(data).decode("utf-8", errors="replace")
    if text[:1] in ("V", "v"):
        return text[1:]
    return text
