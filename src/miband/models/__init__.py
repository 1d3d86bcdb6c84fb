"""Data models for Mi Band devices."""

from .enums import (
    AlertType,
    AuthReplyKind,
    AuthState,
    HrmCommand,
    Sex,
    get_sex,
)
from .readouts import AuthReply, BatteryInfo, PedometerStats
from .user import UserInfo

__all__ = [
    "AlertType",
    "AuthReply",
    "AuthReplyKind",
    "AuthState",
    "BatteryInfo",
    "HrmCommand",
    "PedometerStats",
    "Sex",
    "UserInfo",
    "get_sex",
]
