"""GATT endpoint identities used by the Mi Band 2."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from bleak.uuids import normalize_uuid_str


def vendor_uuid(short: str) -> str:
    """Expand a 4-hex-digit suffix into the vendor 128-bit UUID."""
    if len(short) != 4:
        raise ValueError(f"Vendor UUID suffix must be 4 hex digits, got {short!r}")
    int(short, 16)
    return f"0000{short.lower()}-0000-3512-2118-0009af100700"


def sig_uuid(short: str) -> str:
    """Expand a 16-bit Bluetooth SIG identifier into a 128-bit UUID."""
    return normalize_uuid_str(short)


# Services
SERVICE_MIBAND_1 = sig_uuid("fee0")
SERVICE_MIBAND_2 = sig_uuid("fee1")
SERVICE_HEART_RATE = sig_uuid("180d")
SERVICE_GENERIC_ACCESS = sig_uuid("1800")
SERVICE_IMMEDIATE_ALERT = sig_uuid("1802")
SERVICE_DEVICE_INFORMATION = sig_uuid("180a")


@dataclass(frozen=True, slots=True)
class EndpointId:
    """(service, characteristic) pair identifying one GATT characteristic."""

    service: str
    characteristic: str

    def __str__(self) -> str:
        return f"{self.service}/{self.characteristic}"


class Endpoint(Enum):
    """Semantic role of each characteristic the driver talks to."""

    AUTH = EndpointId(SERVICE_MIBAND_2, vendor_uuid("0009"))
    EVENT = EndpointId(SERVICE_MIBAND_1, vendor_uuid("0010"))
    HEART_RATE_CONTROL = EndpointId(SERVICE_HEART_RATE, sig_uuid("2a39"))
    HEART_RATE_DATA = EndpointId(SERVICE_HEART_RATE, sig_uuid("2a37"))
    BATTERY = EndpointId(SERVICE_MIBAND_1, vendor_uuid("0006"))
    STEPS = EndpointId(SERVICE_MIBAND_1, vendor_uuid("0007"))
    USER = EndpointId(SERVICE_MIBAND_1, vendor_uuid("0008"))
    RAW_DATA = EndpointId(SERVICE_MIBAND_1, vendor_uuid("0002"))
    ALERT = EndpointId(SERVICE_IMMEDIATE_ALERT, sig_uuid("2a06"))
    TIME = EndpointId(SERVICE_GENERIC_ACCESS, sig_uuid("2a2b"))
    HW_REVISION = EndpointId(SERVICE_DEVICE_INFORMATION, sig_uuid("2a27"))
    SW_REVISION = EndpointId(SERVICE_DEVICE_INFORMATION, sig_uuid("2a28"))
    SERIAL = EndpointId(SERVICE_DEVICE_INFORMATION, sig_uuid("2a25"))

    @property
    def id(self) -> EndpointId:
        """Endpoint identity for this role."""
        return self.value
