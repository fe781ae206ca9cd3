"""Accelerometer payload decoders.

Two wire shapes reach the engine:

- BLE notifications: packed little-endian int16 ``x, y, z`` triplets,
  scaled to m/s^2.
- Capture records: one JSON object per line with ``x``, ``y``, ``z``
  (and usually ``timestamp``), as written by ``strider track --record``.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Any

from strider.config import ACCEL_SCALE
from strider.motion import AccelSample


@dataclass
class AccelData:
    """Samples decoded from one BLE notification."""

    samples: list[AccelSample]
    raw_payload: bytes = b""

    def __repr__(self) -> str:
        return f"AccelData({len(self.samples)} samples)"


class AccelDecoder:
    """Decode packed int16 triplets from a notification payload.

    Trailing bytes that do not make up a whole sample are ignored.
    """

    SAMPLE_SIZE = 6  # 3 axes x 2 bytes
    SCALE_FACTOR = ACCEL_SCALE

    @staticmethod
    def can_decode(payload: bytes | bytearray) -> bool:
        return len(payload) >= AccelDecoder.SAMPLE_SIZE

    @staticmethod
    def decode(payload: bytes | bytearray, scale: float | None = None) -> AccelData | None:
        """Decode all whole samples in *payload*; None if there are none.

        Args:
            payload: Raw notification bytes.
            scale: Override scale factor (int16 raw value * scale = m/s^2).
        """
        if not AccelDecoder.can_decode(payload):
            return None
        if scale is None:
            scale = AccelDecoder.SCALE_FACTOR

        samples: list[AccelSample] = []
        for x_raw, y_raw, z_raw in struct.iter_unpack(
            "<hhh", bytes(payload[: len(payload) - len(payload) % AccelDecoder.SAMPLE_SIZE])
        ):
            samples.append(AccelSample(
                x=round(x_raw * scale, 4),
                y=round(y_raw * scale, 4),
                z=round(z_raw * scale, 4),
            ))

        return AccelData(samples=samples, raw_payload=bytes(payload))


def decode_sample_record(record: dict[str, Any]) -> AccelSample | None:
    """Pull an :class:`AccelSample` out of a capture record.

    Returns None when any axis is missing or is not a finite number,
    which the engine treats as "no gravity-inclusive data".
    """
    try:
        x, y, z = (float(record[axis]) for axis in ("x", "y", "z"))
    except (KeyError, TypeError, ValueError):
        return None
    if not all(math.isfinite(v) for v in (x, y, z)):
        return None
    return AccelSample(x, y, z)
