"""Derived metrics: distance and step frequency from (steps, duration).

These are recomputed from scratch on every step and every timer tick
rather than updated incrementally, so they never drift.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from strider.config import STRIDE_LENGTH_M


@dataclass(frozen=True)
class TrackerStats:
    """Derived walking metrics."""

    distance_meters: float
    frequency: int  # steps per minute

    def __repr__(self) -> str:
        return f"TrackerStats({self.distance_meters} m, {self.frequency} steps/min)"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_stats(
    steps: int,
    duration_seconds: int,
    stride_length_m: float = STRIDE_LENGTH_M,
) -> TrackerStats:
    """Distance (2 dp) and frequency (nearest integer, half up).

    Frequency is 0 until at least one second has elapsed.
    """
    distance = round(steps * stride_length_m, 2)
    if duration_seconds > 0:
        frequency = _round_half_up(steps / (duration_seconds / 60.0))
    else:
        frequency = 0
    return TrackerStats(distance_meters=distance, frequency=frequency)


def format_duration(seconds: int) -> str:
    """``125`` -> ``"2m 5s"``."""
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}m {secs}s"


def format_distance(meters: float) -> str:
    """Render a distance the way it is displayed: no trailing zeros."""
    text = f"{meters:.2f}".rstrip("0").rstrip(".")
    return text or "0"
