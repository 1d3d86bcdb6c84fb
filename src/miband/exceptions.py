"""Exceptions raised by the Mi Band driver."""


class MiBandError(Exception):
    """Base exception for all Mi Band errors."""


class TransportError(MiBandError):
    """Read, write or subscribe on a characteristic failed."""


class BLEConnectionError(TransportError):
    """BLE link is down or the GATT operation was refused."""


class EndpointNotFoundError(TransportError):
    """Requested service/characteristic is not exposed by the device."""


class BLETimeoutError(MiBandError, TimeoutError):
    """A bounded wait expired before the device answered."""


class ProtocolError(MiBandError):
    """Device replied with something the protocol does not allow."""


class InvalidResponseError(ProtocolError):
    """Response could not be decoded."""


class MalformedPayloadError(InvalidResponseError):
    """Payload is shorter than its layout requires or holds invalid values."""


class AuthError(ProtocolError):
    """Authentication handshake failed."""


class AuthRejectedError(AuthError):
    """Device returned a hard failure code during the handshake."""


class AuthKeyMismatchError(AuthError):
    """Device could not verify the encrypted challenge with our key."""


class AuthInProgressError(AuthError):
    """A handshake is already pending on this connection."""
