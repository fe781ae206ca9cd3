"""Live step tracking from a BLE accelerometer.

The device streams gravity-inclusive acceleration on a notify
characteristic; every decoded sample is pushed into a
:class:`~strider.engine.StepTracker` running on the same event loop as
the BLE callbacks, so handlers never overlap.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from bleak import BleakClient
from bleak.backends.characteristic import BleakGATTCharacteristic

from strider.config import ACCEL_CHAR_UUID
from strider.decoders.accel import AccelDecoder
from strider.engine import StepTracker, TrackerSnapshot
from strider.scanner import find_device

logger = logging.getLogger(__name__)


def find_accel_char(client: BleakClient, char_uuid: str = ACCEL_CHAR_UUID) -> str | None:
    """Return *char_uuid* if the device exposes it with notify, else None."""
    wanted = char_uuid.lower()
    for service in client.services:
        for char in service.characteristics:
            if char.uuid.lower() == wanted and "notify" in char.properties:
                return char.uuid
    return None


def format_status(snap: TrackerSnapshot) -> str:
    return (
        f"steps={snap.steps}  {snap.distance_meters} m  "
        f"{snap.duration_label}  {snap.frequency} steps/min"
    )


async def track_live(
    engine: StepTracker,
    address: str | None = None,
    duration: float | None = None,
    record: str | None = None,
    char_uuid: str = ACCEL_CHAR_UUID,
) -> TrackerSnapshot | None:
    """Connect, run one tracking session, and return its final snapshot.

    Args:
        engine: The tracker to feed.  Must use an asyncio timer.
        address: BLE address.  If None, scans for a device.
        duration: Session length in seconds.  None = run until cancelled.
        record: Optional JSONL path; every sample is appended in the
            capture format understood by :mod:`strider.replay`.
        char_uuid: Accelerometer notify characteristic.
    """
    if address is None:
        device = await find_device()
        if device is None:
            print("No device found.")
            return None
        address = device.address

    print(f"Connecting to {address}...")

    async with BleakClient(address) as client:
        print(f"Connected. MTU={client.mtu_size}")

        last_steps = -1

        def _on_change(snap: TrackerSnapshot) -> None:
            nonlocal last_steps
            if snap.steps != last_steps:
                last_steps = snap.steps
                print(f"  {format_status(snap)}", flush=True)

        with contextlib.ExitStack() as stack:
            out = None
            if record:
                path = Path(record)
                path.parent.mkdir(parents=True, exist_ok=True)
                out = stack.enter_context(open(path, "a"))

            def _on_notification(_char: BleakGATTCharacteristic, data: bytearray) -> None:
                accel = AccelDecoder.decode(data)
                if accel is None:
                    return
                now = datetime.now(timezone.utc).isoformat()
                for s in accel.samples:
                    if out is not None:
                        out.write(json.dumps({"timestamp": now, "x": s.x, "y": s.y, "z": s.z}) + "\n")
                    engine.on_sample(s)
                if out is not None:
                    out.flush()

            accel_uuid = find_accel_char(client, char_uuid)
            if accel_uuid is None:
                print(f"Warning: no accelerometer characteristic {char_uuid}; "
                      "steps will not be counted.")
                engine.disable_motion()
            else:
                await client.start_notify(accel_uuid, _on_notification)

            stack.callback(engine.subscribe(_on_change))
            engine.start()
            print("Tracking (Ctrl+C to stop).\n")

            try:
                if duration:
                    await asyncio.sleep(duration)
                else:
                    while True:
                        await asyncio.sleep(1)
            except asyncio.CancelledError:
                pass
            finally:
                engine.stop()
                if accel_uuid is not None:
                    try:
                        await client.stop_notify(accel_uuid)
                    except Exception as e:
                        logger.debug("stop_notify failed: %s", e)

        snap = engine.snapshot()
        print(f"\nSession complete. {format_status(snap)}")
        return snap
