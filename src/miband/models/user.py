"""User profile record written to the user characteristic."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from datetime import date

from .enums import Sex, get_sex

USER_INFO_COMMAND = 0x4F
USER_INFO_LENGTH = 16


def _check_range(name: str, value: int, upper: int) -> None:
    if not 0 <= value <= upper:
        raise ValueError(f"{name} out of range: {value} (must be 0-{upper})")


@dataclass(frozen=True, slots=True)
class UserInfo:
    """Wearer profile used by the band for distance and calorie estimates."""

    born: date
    sex: Sex | str = Sex.OTHER
    height_cm: int = 170
    weight_kg: int = 70
    user_id: int = 0

    def __post_init__(self) -> None:
        _check_range("birth year", self.born.year, 0xFFFF)
        _check_range("height_cm", self.height_cm, 0xFFFF)
        _check_range("weight_kg", self.weight_kg, 0xFFFF)
        _check_range("user_id", self.user_id, 0xFFFFFFFF)

    def to_bytes(self) -> bytes:
        """Serialize to the 16-byte profile record.

        Format:
            [cmd:1][reserved:2][year:2 LE][month:1][day:1][sex:1]
            [height_cm:2 LE][weight_kg:2 LE][id:4 LE]
        """
        return struct.pack(
            "<B2xHBBBHHI",
            USER_INFO_COMMAND,
            self.born.year,
            self.born.month,
            self.born.day,
            get_sex(self.sex),
            self.height_cm,
            self.weight_kg,
            self.user_id,
        )
