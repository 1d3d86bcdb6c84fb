from __future__ import annotations

from enum import Enum, IntEnum, auto
from typing import Final


class AuthState(Enum):
    """Phases of the authentication handshake."""
    IDLE = auto()
    KEY_EXCHANGE_REQUESTED = auto()
    CHALLENGE_RECEIVED = auto()
    CHALLENGE_ANSWERED = auto()
    AUTHENTICATED = auto()
    FAILED = auto()


class AuthReplyKind(Enum):
    """Decoded status of an auth characteristic notification."""
    SET_KEY_OK = "100101"
    SET_KEY_FAIL = "100104"
    CHALLENGE_OK = "100201"
    CHALLENGE_FAIL = "100204"
    AUTH_OK = "100301"
    AUTH_FAIL = "100304"
    UNKNOWN = "unknown"


class HrmCommand(Enum):
    """Heart rate monitor control commands (written to 0x2a39)."""
    STOP_MANUAL = b"\x15\x02\x00"
    START_MANUAL = b"\x15\x02\x01"
    STOP_CONTINUOUS = b"\x15\x01\x00"
    START_CONTINUOUS = b"\x15\x01\x01"
    PING = b"\x16"


class AlertType(IntEnum):
    """Immediate alert levels (written to 0x2a06)."""
    OFF = 0x00
    MESSAGE = 0x01
    PHONE = 0x02
    VIBRATE = 0x03

    @classmethod
    def from_name(cls, name: str) -> AlertType:
        """Look up an alert by case-insensitive name ("message", "phone", ...)."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unrecognized notification type: {name!r}") from None


class Sex(IntEnum):
    """Sex field of the user profile record."""
    MALE = 0
    FEMALE = 1
    OTHER = 2


SEX_NAMES: Final[dict[str, Sex]] = {
    "male": Sex.MALE,
    "female": Sex.FEMALE,
}


def get_sex(value: Sex | str | int) -> Sex:
    """Map a profile sex value to the wire enum; anything unknown is OTHER."""
    if isinstance(value, Sex):
        return value
    if isinstance(value, str):
        return SEX_NAMES.get(value.lower(), Sex.OTHER)
    try:
        return Sex(value)
    except ValueError:
        return Sex.OTHER
