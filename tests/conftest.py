"""Shared fixtures and helpers for the strider test suite."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from strider.engine import StepTracker
from strider.motion import AccelSample
from strider.store import MemoryStore, TrackerStore
from strider.timer import ManualTimer


T0 = datetime(2024, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Sample helpers
# ---------------------------------------------------------------------------


def samples_with_deltas(
    deltas: list[float],
    start: AccelSample = AccelSample(0.0, 0.0, 0.0),
) -> list[AccelSample]:
    """Samples whose consecutive L1 deltas (starting from *start*) are *deltas*.

    Motion alternates direction along x so values stay small.
    """
    samples = []
    x = start.x
    for i, d in enumerate(deltas):
        x = x + d if i % 2 == 0 else x - d
        samples.append(AccelSample(x, start.y, start.z))
    return samples


class FakeClock:
    """Deterministic clock that advances only when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FailingStore:
    """Backend whose writes always fail."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


# ---------------------------------------------------------------------------
# JSONL capture helpers
# ---------------------------------------------------------------------------


def write_jsonl(path: Path, entries: list[dict]) -> Path:
    """Write a list of dicts as JSONL to the given path."""
    with open(path, "w") as f:
        for entry in entries:
            f.write(json.dumps(entry) + "\n")
    return path


def make_capture_entry(sample: AccelSample, offset_sec: float) -> dict:
    ts = T0 + timedelta(seconds=offset_sec)
    return {
        "timestamp": ts.isoformat().replace("+00:00", "Z"),
        "x": sample.x,
        "y": sample.y,
        "z": sample.z,
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def backend() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def timer() -> ManualTimer:
    return ManualTimer()


@pytest.fixture
def engine(backend: MemoryStore, timer: ManualTimer, clock: FakeClock) -> StepTracker:
    return StepTracker(store=TrackerStore(backend), timer=timer, clock=clock)
