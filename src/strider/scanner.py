"""Scan for BLE accelerometer devices."""

from __future__ import annotations

import asyncio

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from strider.config import ACCEL_SERVICE_UUID, DEVICE_NAME_PREFIX


def matches_device(name: str, service_uuids: list[str], prefix: str = DEVICE_NAME_PREFIX) -> bool:
    """Name starts with *prefix* or the accelerometer service is advertised."""
    if name.upper().startswith(prefix.upper()):
        return True
    return ACCEL_SERVICE_UUID in (u.lower() for u in service_uuids)


async def scan(
    timeout: float = 10.0,
    prefix: str = DEVICE_NAME_PREFIX,
) -> list[tuple[BLEDevice, AdvertisementData]]:
    """Scan for nearby accelerometer devices.

    Returns a list of (device, advertisement_data) tuples.
    """
    results: list[tuple[BLEDevice, AdvertisementData]] = []

    def _callback(device: BLEDevice, adv: AdvertisementData) -> None:
        name = adv.local_name or device.name or ""
        if not matches_device(name, adv.service_uuids or [], prefix):
            return
        if any(d.address == device.address for d, _ in results):
            return
        results.append((device, adv))
        print(f"  Found: {name or '?'} [{device.address}] RSSI={adv.rssi} dBm")

    scanner = BleakScanner(detection_callback=_callback)
    print(f"Scanning for {prefix} devices ({timeout}s)...")
    await scanner.start()
    await asyncio.sleep(timeout)
    await scanner.stop()

    if not results:
        print("No devices found.")
    else:
        print(f"\n{len(results)} device(s) found.")

    return results


async def find_device(timeout: float = 10.0) -> BLEDevice | None:
    """Return the first matching device, or None."""
    results = await scan(timeout)
    if results:
        return results[0][0]
    return None
