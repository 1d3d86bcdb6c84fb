"""Device readout models (battery, pedometer, auth replies)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .enums import AuthReplyKind


@dataclass(frozen=True)
class BatteryInfo:
    """Battery characteristic readout.

    Attributes:
        level: Charge percentage (0-100)
        charging: True while on the charger
        off_date: When the band was last taken off the charger
        charge_date: When the band was last charged
        charge_level: Level reached on the last charge
    """

    level: int
    charging: bool
    off_date: datetime | None = None
    charge_date: datetime | None = None
    charge_level: int | None = None


@dataclass(frozen=True)
class PedometerStats:
    """Activity counters from the steps characteristic.

    Older firmware only sends steps; distance (meters) and calories are
    present when the payload is long enough.
    """

    steps: int
    distance: int | None = None
    calories: int | None = None


@dataclass(frozen=True)
class AuthReply:
    """One decoded notification from the auth characteristic."""

    kind: AuthReplyKind
    payload: bytes = field(default_factory=bytes)
