"""BLE protocol commands for Mi Band 2 devices."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

from ..models.enums import AlertType, HrmCommand

if TYPE_CHECKING:
    from ..models.user import UserInfo


class AuthCommand(IntEnum):
    """Auth characteristic opcodes (first byte, followed by AUTH_FLAGS)."""

    SEND_KEY = 0x01              # Store a new 16-byte key on the band
    REQUEST_RANDOM_KEY = 0x02    # Ask the band for a 16-byte challenge
    SEND_ENCRYPTED_KEY = 0x03    # Answer the challenge


AUTH_FLAGS = 0x08
KEY_LENGTH = 16
BUTTON_EVENT = b"\x04"

# Timing constants (seconds)
AUTH_TIMEOUT = 30.0
HEART_RATE_TIMEOUT = 30.0
BUTTON_TIMEOUT = 30.0
HRM_PING_INTERVAL = 12.0
SETTLE_DELAY = 1.0


def _auth_header(command: AuthCommand) -> bytes:
    return bytes([command, AUTH_FLAGS])


def build_auth_request_random_key() -> bytes:
    """Build command asking the band for a random challenge.

    Returns:
        Command bytes: 0x02 0x08
    """
    return _auth_header(AuthCommand.REQUEST_RANDOM_KEY)


def build_auth_send_key(key: bytes) -> bytes:
    """Build command storing our key on the band.

    Only used to recover when the band rejects the encrypted challenge.

    Args:
        key: 16-byte device key

    Returns:
        Command bytes: 0x01 0x08 + key
    """
    if len(key) != KEY_LENGTH:
        raise ValueError(f"Device key must be {KEY_LENGTH} bytes, got {len(key)}")
    return _auth_header(AuthCommand.SEND_KEY) + bytes(key)


def build_auth_send_encrypted_challenge(ciphertext: bytes) -> bytes:
    """Build command answering the band's challenge.

    Args:
        ciphertext: AES-128-ECB encrypted challenge (one 16-byte block)

    Returns:
        Command bytes: 0x03 0x08 + ciphertext
    """
    if len(ciphertext) != KEY_LENGTH:
        raise ValueError(
            f"Encrypted challenge must be {KEY_LENGTH} bytes, got {len(ciphertext)}"
        )
    return _auth_header(AuthCommand.SEND_ENCRYPTED_KEY) + bytes(ciphertext)


def build_hrm_command(kind: HrmCommand) -> bytes:
    """Build a heart rate monitor control command."""
    return kind.value


def build_alert_command(alert: AlertType) -> bytes:
    """Build an immediate alert command (single level byte)."""
    return bytes([AlertType(alert)])


def build_user_info_command(user: UserInfo) -> bytes:
    """Build the 16-byte set-user-info command."""
    return user.to_bytes()
