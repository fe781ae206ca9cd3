"""Motion delta monitor: turn consecutive acceleration samples into a scalar.

The motion-intensity signal is the L1 distance between two consecutive
gravity-inclusive samples.  L1 rather than Euclidean keeps the per-sample
cost to three subtractions and three ``abs`` calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np


@dataclass(frozen=True)
class AccelSample:
    """One instant's gravity-inclusive acceleration (m/s^2)."""

    x: float
    y: float
    z: float

    @property
    def magnitude(self) -> float:
        return (self.x ** 2 + self.y ** 2 + self.z ** 2) ** 0.5

    def __repr__(self) -> str:
        return f"Accel(x={self.x:+.3f}, y={self.y:+.3f}, z={self.z:+.3f})"


# Seed for the rolling last-sample memory before any real sample arrives.
ZERO_SAMPLE = AccelSample(0.0, 0.0, 0.0)


def compute_delta(previous: AccelSample, current: AccelSample) -> float:
    """|dx| + |dy| + |dz| between two samples."""
    return (
        abs(current.x - previous.x)
        + abs(current.y - previous.y)
        + abs(current.z - previous.z)
    )


def is_step_delta(delta: float, sensitivity: float) -> bool:
    """A delta counts as a step only when it strictly exceeds the threshold."""
    return delta > sensitivity


# ---------------------------------------------------------------------------
# Offline statistics
# ---------------------------------------------------------------------------


@dataclass
class DeltaStats:
    """Summary of the delta signal over a recorded sequence."""

    count: int
    mean: float
    peak: float
    above_threshold: int

    def __repr__(self) -> str:
        return (
            f"DeltaStats(n={self.count}, mean={self.mean:.2f}, "
            f"peak={self.peak:.2f}, above={self.above_threshold})"
        )


def sample_deltas(
    samples: Sequence[AccelSample],
    seed: AccelSample = ZERO_SAMPLE,
) -> np.ndarray:
    """Vectorised ``compute_delta`` over a whole sequence.

    The first delta is taken against *seed*, matching what the live
    detector sees on its first sample.
    """
    if len(samples) == 0:
        return np.zeros(0, dtype=np.float64)
    arr = np.asarray(
        [(seed.x, seed.y, seed.z)] + [(s.x, s.y, s.z) for s in samples],
        dtype=np.float64,
    )
    return np.abs(np.diff(arr, axis=0)).sum(axis=1)


def delta_stats(
    samples: Sequence[AccelSample],
    sensitivity: float,
    seed: AccelSample = ZERO_SAMPLE,
) -> DeltaStats:
    """Mean / peak delta and how many samples crossed *sensitivity*."""
    deltas = sample_deltas(samples, seed)
    if deltas.size == 0:
        return DeltaStats(count=0, mean=0.0, peak=0.0, above_threshold=0)
    return DeltaStats(
        count=int(deltas.size),
        mean=round(float(np.mean(deltas)), 3),
        peak=round(float(np.max(deltas)), 3),
        above_threshold=int(np.sum(deltas > sensitivity)),
    )
