"""Heart rate monitoring session (single reads and continuous mode)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from .events import EventChannel
from .exceptions import MiBandError
from .models.enums import HrmCommand
from .protocol.commands import HEART_RATE_TIMEOUT, HRM_PING_INTERVAL, build_hrm_command

_LOGGER = logging.getLogger(__name__)


class HeartRateSession:
    """Controls the heart rate monitor through the 0x2a39 control point.

    Continuous measurement stops on the band unless it is pinged every few
    seconds, so start_continuous() arms a keepalive task. At most one
    keepalive task exists per session.
    """

    def __init__(
            self,
            send_func: Callable[[bytes], Awaitable[None]],
            heart_rate: EventChannel[int],
            ping_interval: float = HRM_PING_INTERVAL,
    ):
        """Initialize heart rate session.

        Args:
            send_func: Async function writing to the heart rate control point
            heart_rate: Channel the dispatcher publishes samples on
            ping_interval: Seconds between keepalive pings (default: 12)
        """
        self.send = send_func
        self.heart_rate = heart_rate
        self.ping_interval = ping_interval
        self._keepalive: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """True while the keepalive task is armed."""
        return self._keepalive is not None and not self._keepalive.done()

    async def _command(self, kind: HrmCommand) -> None:
        await self.send(build_hrm_command(kind))

    async def read_once(self, timeout: float = HEART_RATE_TIMEOUT) -> int:
        """Take a single manual measurement.

        Returns:
            Heart rate in beats per minute

        Raises:
            TransportError: If a setup write fails (before any waiting)
            BLETimeoutError: If no sample arrives within timeout
        """
        await self._command(HrmCommand.STOP_MANUAL)
        await self._command(HrmCommand.STOP_CONTINUOUS)

        waiter = self.heart_rate.create_waiter()
        try:
            await self._command(HrmCommand.START_MANUAL)
        except BaseException:
            self.heart_rate.discard_waiter(waiter)
            raise

        rate = await self.heart_rate.wait(timeout, waiter)
        _LOGGER.debug("Single heart rate reading: %d bpm", rate)
        return rate

    async def start_continuous(self) -> None:
        """Start continuous measurement and arm the keepalive ping."""
        await self._command(HrmCommand.STOP_CONTINUOUS)
        await self._command(HrmCommand.STOP_MANUAL)
        await self._command(HrmCommand.START_CONTINUOUS)

        if self.is_running:
            _LOGGER.debug("Heart rate keepalive already armed")
            return

        self._keepalive = asyncio.create_task(self._ping_loop())
        _LOGGER.info("Continuous heart rate monitoring started")

    async def stop_continuous(self) -> None:
        """Disarm the keepalive ping and stop continuous measurement."""
        self.close()
        await self._command(HrmCommand.STOP_CONTINUOUS)
        _LOGGER.info("Continuous heart rate monitoring stopped")

    def close(self) -> None:
        """Cancel the keepalive task without writing to the device."""
        if self._keepalive is not None:
            self._keepalive.cancel()
            self._keepalive = None

    async def _ping_loop(self) -> None:
        while True:
            await asyncio.sleep(self.ping_interval)
            _LOGGER.debug("Pinging HRM")
            try:
                await self._command(HrmCommand.PING)
            except MiBandError as e:
                _LOGGER.warning("HRM keepalive ping failed: %s", e)
