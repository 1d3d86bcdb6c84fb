"""Authentication state machine for the Mi Band 2 handshake."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .exceptions import (
    AuthError,
    AuthInProgressError,
    AuthKeyMismatchError,
    AuthRejectedError,
    BLETimeoutError,
    MalformedPayloadError,
    MiBandError,
)
from .models.enums import AuthReplyKind, AuthState
from .protocol.commands import (
    AUTH_TIMEOUT,
    build_auth_request_random_key,
    build_auth_send_encrypted_challenge,
    build_auth_send_key,
)
from .protocol.crypto import encrypt_challenge, validate_device_key
from .protocol.responses import parse_auth_reply

_LOGGER = logging.getLogger(__name__)


class AuthStateMachine:
    """
    State machine for the AES challenge-response handshake.

    Flow:
        IDLE -> KEY_EXCHANGE_REQUESTED    authenticate() sends 0x02 0x08
        -> CHALLENGE_RECEIVED             band sends 10 02 01 + challenge
        -> CHALLENGE_ANSWERED             we send 0x03 0x08 + AES(key, challenge)
        -> AUTHENTICATED                  band sends 10 03 01

    A key mismatch (10 03 04) triggers one recovery: our key is sent with
    0x01 0x08 and a new challenge is requested. Hard failures (10 01 04,
    10 02 04) end in FAILED without retry.

    Only one handshake may be pending at a time.
    """

    def __init__(
        self,
        send_func: Callable[[bytes], Awaitable[None]],
        device_key: bytes,
    ):
        """
        Initialize auth state machine.

        Args:
            send_func: Async function writing to the auth characteristic
            device_key: 16-byte AES key shared with the band
        """
        self.send = send_func
        self._key = validate_device_key(device_key)

        self.state = AuthState.IDLE
        self._pending: asyncio.Future[None] | None = None
        self._recovered = False
        self._tasks: set[asyncio.Task[None]] = set()

        # Callbacks
        self.on_authenticated: Callable[[], None] | None = None
        self.on_error: Callable[[MiBandError], None] | None = None

    @property
    def is_pending(self) -> bool:
        """True while a handshake is waiting for the band."""
        return self._pending is not None and not self._pending.done()

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    async def authenticate(self, timeout: float = AUTH_TIMEOUT) -> None:
        """
        Run the handshake to completion.

        Args:
            timeout: Seconds to wait for the band to accept us

        Raises:
            AuthInProgressError: If a handshake is already pending
            AuthRejectedError: If the band refused the handshake
            AuthKeyMismatchError: If the band still rejects our key after recovery
            BLETimeoutError: If the handshake did not finish in time
            TransportError: If the initial request could not be written
        """
        if self.is_pending:
            raise AuthInProgressError("Authentication already in progress")

        self._pending = asyncio.get_running_loop().create_future()
        self._recovered = False
        self.state = AuthState.KEY_EXCHANGE_REQUESTED
        _LOGGER.debug("Requesting random key")

        try:
            await self.send(build_auth_request_random_key())
            await asyncio.wait_for(self._pending, timeout=timeout)
        except asyncio.TimeoutError as e:
            self.state = AuthState.FAILED
            _LOGGER.warning("Authentication timed out after %ss", timeout)
            raise BLETimeoutError(f"Authentication timed out after {timeout}s") from e
        except BaseException:
            if self.state != AuthState.AUTHENTICATED:
                self.state = AuthState.FAILED
            raise
        finally:
            self._teardown()

        _LOGGER.info("Authenticated")

    def handle_notification(self, data: bytes) -> None:
        """
        Handle a notification from the auth characteristic.

        Writes triggered by a reply are scheduled as tasks; a write failure
        fails the pending handshake.
        """
        reply = parse_auth_reply(data)
        _LOGGER.debug("Auth reply %s in state %s", reply.kind.name, self.state.name)

        if not self.is_pending:
            _LOGGER.debug("Ignoring auth reply %s: no handshake pending", data.hex())
            return

        if reply.kind == AuthReplyKind.CHALLENGE_OK:
            self._handle_challenge(reply.payload)

        elif reply.kind == AuthReplyKind.AUTH_OK:
            self.state = AuthState.AUTHENTICATED
            self._pending.set_result(None)
            if self.on_authenticated:
                self.on_authenticated()

        elif reply.kind == AuthReplyKind.AUTH_FAIL:
            self._handle_key_mismatch()

        elif reply.kind == AuthReplyKind.SET_KEY_OK:
            if self.state == AuthState.KEY_EXCHANGE_REQUESTED:
                _LOGGER.debug("Key stored; random key already requested")
            else:
                self.state = AuthState.KEY_EXCHANGE_REQUESTED
                self._schedule(build_auth_request_random_key())

        elif reply.kind == AuthReplyKind.SET_KEY_FAIL:
            self._fail(AuthRejectedError("Band rejected new key"))

        elif reply.kind == AuthReplyKind.CHALLENGE_FAIL:
            self._fail(AuthRejectedError("Band refused to send a random key"))

        else:
            _LOGGER.debug("Unhandled auth reply: %s", data.hex())

    def _handle_challenge(self, challenge: bytes) -> None:
        if self.state != AuthState.KEY_EXCHANGE_REQUESTED:
            _LOGGER.warning("Unexpected challenge in state %s", self.state.name)
            return

        self.state = AuthState.CHALLENGE_RECEIVED
        try:
            encrypted = encrypt_challenge(self._key, challenge)
        except ValueError as e:
            self._fail(MalformedPayloadError(f"Invalid challenge: {e}"))
            return

        self.state = AuthState.CHALLENGE_ANSWERED
        self._schedule(build_auth_send_encrypted_challenge(encrypted))

    def _handle_key_mismatch(self) -> None:
        if self._recovered:
            self._fail(AuthKeyMismatchError("Band rejected our key after resending it"))
            return

        _LOGGER.debug("Encryption key auth fail, sending key")
        self._recovered = True
        self.state = AuthState.KEY_EXCHANGE_REQUESTED
        self._schedule(
            build_auth_send_key(self._key),
            build_auth_request_random_key(),
        )

    def _schedule(self, *commands: bytes) -> None:
        """Write commands in order on a background task."""
        task = asyncio.create_task(self._send_all(commands))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _send_all(self, commands: tuple[bytes, ...]) -> None:
        for command in commands:
            try:
                await self.send(command)
            except MiBandError as e:
                _LOGGER.error("Auth write failed: %s", e)
                self._fail(e)
                return

    def _fail(self, error: MiBandError) -> None:
        self.state = AuthState.FAILED
        _LOGGER.error("Authentication failed: %s", error)
        if self.is_pending:
            self._pending.set_exception(error)
        if self.on_error:
            self.on_error(error)

    def _teardown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._pending = None

    def close(self) -> None:
        """Abort a pending handshake."""
        if self.is_pending:
            self.state = AuthState.FAILED
            self._pending.set_exception(AuthError("Authentication aborted"))
        self._teardown()
