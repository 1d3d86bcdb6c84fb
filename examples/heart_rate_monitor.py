"""Connect to a Mi Band 2, authenticate and stream heart rate samples.

Usage:
    python examples/heart_rate_monitor.py --duration 60
    python examples/heart_rate_monitor.py --address AA:BB:CC:DD:EE:FF --key 30313233343536373839404142434445
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime

from bleak import BleakScanner

from miband import DEFAULT_DEVICE_KEY, BLEConnection, MiBandDevice, MiBandError

DEFAULT_NAME = "MI Band 2"


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


async def _find_device(address: str | None, name: str, timeout: float):
    if address:
        return await BleakScanner.find_device_by_address(address, timeout=timeout)
    return await BleakScanner.find_device_by_name(name, timeout=timeout)


async def monitor(address: str | None, name: str, key: bytes, duration: float) -> None:
    """Print band info, then heart rate samples until duration elapses."""
    print(f"Scanning for {address or name}...")
    ble_device = await _find_device(address, name, timeout=10.0)
    if ble_device is None:
        print("Band not found")
        return

    async with BLEConnection(ble_device) as connection:
        async with MiBandDevice(connection, device_key=key) as band:
            print(f"Authenticated with {ble_device.address}")
            print(f"  hardware={await band.get_hw_revision()} software={await band.get_sw_revision()}")
            print(f"  serial={await band.get_serial()}")
            print(f"  battery={await band.get_battery_info()}")
            print(f"  steps={await band.get_pedometer_stats()}")
            print(f"  clock={await band.get_time()}")

            band.heart_rate.subscribe(
                lambda bpm: print(f"[{_timestamp()}] heart_rate={bpm}")
            )
            band.button.subscribe(lambda _: print(f"[{_timestamp()}] button"))

            await band.show_notification("vibrate")
            await band.hrm_start()
            try:
                if duration > 0:
                    await asyncio.sleep(duration)
                else:
                    while True:
                        await asyncio.sleep(1)
            finally:
                await band.hrm_stop()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Authenticate to a Mi Band 2 and print heart rate samples."
    )
    parser.add_argument("--address", help="Band BLE address (default: scan by name)")
    parser.add_argument("--name", default=DEFAULT_NAME, help=f"Advertised name. Default: {DEFAULT_NAME}")
    parser.add_argument(
        "--key",
        default=DEFAULT_DEVICE_KEY.hex(),
        help="16-byte device key as hex. Default: the stock example key",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=60.0,
        help="Monitoring duration in seconds (0 = run until Ctrl+C). Default: 60",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    try:
        asyncio.run(
            monitor(
                address=args.address,
                name=args.name,
                key=bytes.fromhex(args.key),
                duration=args.duration,
            )
        )
    except KeyboardInterrupt:
        pass
    except MiBandError as err:
        print(f"Error: {err}")


if __name__ == "__main__":
    main()
