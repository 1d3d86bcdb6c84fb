"""AES-128-ECB helpers for the auth handshake."""

from __future__ import annotations

import logging
import secrets
from typing import Final

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_LOGGER = logging.getLogger(__name__)

KEY_SIZE: Final = 16
BLOCK_SIZE: Final = 16

# Key used by the stock examples. Real deployments should generate one per band.
DEFAULT_DEVICE_KEY: Final = bytes.fromhex("30313233343536373839404142434445")


def generate_device_key() -> bytes:
    """Generate a random 16-byte device key."""
    return secrets.token_bytes(KEY_SIZE)


def validate_device_key(key: bytes) -> bytes:
    """Return key as immutable bytes, raising ValueError if not 16 bytes."""
    if len(key) != KEY_SIZE:
        raise ValueError(f"Device key must be {KEY_SIZE} bytes, got {len(key)}")
    return bytes(key)


def _cipher(key: bytes) -> Cipher:
    return Cipher(algorithms.AES(validate_device_key(key)), modes.ECB())


def encrypt_challenge(key: bytes, challenge: bytes) -> bytes:
    """Encrypt the band's challenge with AES-128-ECB, no padding.

    Args:
        key: 16-byte device key
        challenge: Exactly one 16-byte block

    Returns:
        16-byte ciphertext

    Raises:
        ValueError: If key or challenge has the wrong size
    """
    if len(challenge) != BLOCK_SIZE:
        raise ValueError(
            f"Challenge must be exactly {BLOCK_SIZE} bytes, got {len(challenge)}"
        )
    _LOGGER.debug("Encrypting challenge: %s", bytes(challenge).hex())
    encryptor = _cipher(key).encryptor()
    return encryptor.update(bytes(challenge)) + encryptor.finalize()


def decrypt_challenge(key: bytes, ciphertext: bytes) -> bytes:
    """Inverse of encrypt_challenge."""
    if len(ciphertext) != BLOCK_SIZE:
        raise ValueError(
            f"Ciphertext must be exactly {BLOCK_SIZE} bytes, got {len(ciphertext)}"
        )
    decryptor = _cipher(key).decryptor()
    return decryptor.update(bytes(ciphertext)) + decryptor.finalize()
