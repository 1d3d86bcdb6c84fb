"""BLE protocol implementation."""

from .commands import (
    AUTH_FLAGS,
    AUTH_TIMEOUT,
    BUTTON_EVENT,
    BUTTON_TIMEOUT,
    HEART_RATE_TIMEOUT,
    HRM_PING_INTERVAL,
    KEY_LENGTH,
    SETTLE_DELAY,
    AuthCommand,
    build_alert_command,
    build_auth_request_random_key,
    build_auth_send_encrypted_challenge,
    build_auth_send_key,
    build_hrm_command,
    build_user_info_command,
)
from .crypto import (
    DEFAULT_DEVICE_KEY,
    decrypt_challenge,
    encrypt_challenge,
    generate_device_key,
)
from .responses import (
    is_button_event,
    parse_auth_reply,
    parse_battery_info,
    parse_heart_rate,
    parse_pedometer_stats,
    parse_timestamp,
    parse_version_string,
)
from .uuids import Endpoint, EndpointId, sig_uuid, vendor_uuid

__all__ = [
    "AuthCommand",
    "AUTH_FLAGS",
    "AUTH_TIMEOUT",
    "BUTTON_EVENT",
    "BUTTON_TIMEOUT",
    "HEART_RATE_TIMEOUT",
    "HRM_PING_INTERVAL",
    "KEY_LENGTH",
    "SETTLE_DELAY",
    "build_auth_request_random_key",
    "build_auth_send_key",
    "build_auth_send_encrypted_challenge",
    "build_hrm_command",
    "build_alert_command",
    "build_user_info_command",
    "DEFAULT_DEVICE_KEY",
    "encrypt_challenge",
    "decrypt_challenge",
    "generate_device_key",
    "parse_auth_reply",
    "parse_heart_rate",
    "is_button_event",
    "parse_battery_info",
    "parse_pedometer_stats",
    "parse_timestamp",
    "parse_version_string",
    "Endpoint",
    "EndpointId",
    "sig_uuid",
    "vendor_uuid",
]
