"""Replay a recorded JSONL sample capture through the engine.

Each line is ``{"timestamp": ISO-8601, "x": ..., "y": ..., "z": ...}``.
The recording's own timestamps drive both the duration timer and the
session clock, so a replay reproduces what live tracking would have
shown.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from strider.decoders.accel import decode_sample_record
from strider.engine import StepTracker, TrackerSnapshot
from strider.motion import AccelSample, DeltaStats, delta_stats
from strider.share import format_share_message
from strider.store import MemoryStore, TrackerStore
from strider.timer import ManualTimer

logger = logging.getLogger(__name__)


@dataclass
class CaptureRecord:
    timestamp: datetime | None
    sample: AccelSample | None


@dataclass
class ReplayResult:
    """Outcome of replaying one capture."""

    snapshot: TrackerSnapshot
    total_records: int
    missing_samples: int
    deltas: DeltaStats

    def share_message(self) -> str | None:
        return format_share_message(
            self.snapshot.sessions,
            self.snapshot.distance_meters,
            self.snapshot.duration_seconds,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_records": self.total_records,
            "missing_samples": self.missing_samples,
            "delta_mean": self.deltas.mean,
            "delta_peak": self.deltas.peak,
            "snapshot": self.snapshot.to_dict(),
        }

    def __repr__(self) -> str:
        return f"ReplayResult({self.total_records} records, {self.snapshot!r})"


def parse_timestamp(value: Any) -> datetime | None:
    """ISO-8601 string (``Z`` suffix allowed) -> aware datetime, else None."""
    if not isinstance(value, str):
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def read_capture(capture_path: str | Path) -> Iterator[CaptureRecord]:
    """Yield records from a capture file, skipping blank and invalid lines."""
    path = Path(capture_path)
    with open(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("%s:%d: invalid JSON, skipping", path.name, line_num)
                continue
            if not isinstance(entry, dict):
                continue
            yield CaptureRecord(
                timestamp=parse_timestamp(entry.get("timestamp")),
                sample=decode_sample_record(entry),
            )


def replay_records(
    records: list[CaptureRecord],
    sensitivity: float | None = None,
    store: TrackerStore | None = None,
) -> ReplayResult:
    """Run *records* through a fresh engine as one tracking session.

    Records without a timestamp reuse the previous one (no time passes).
    """
    if store is None:
        store = TrackerStore(MemoryStore())

    first_ts = next((r.timestamp for r in records if r.timestamp is not None), None)
    now = first_ts or datetime.now(timezone.utc)

    timer = ManualTimer()
    engine = StepTracker(store=store, timer=timer, clock=lambda: now)
    if sensitivity is not None:
        engine.set_sensitivity(sensitivity)

    engine.start()
    missing = 0
    for record in records:
        if record.timestamp is not None and record.timestamp > now:
            timer.advance((record.timestamp - now).total_seconds())
            now = record.timestamp
        if record.sample is None:
            missing += 1
        engine.on_sample(record.sample)
    engine.stop()

    samples = [r.sample for r in records if r.sample is not None]
    return ReplayResult(
        snapshot=engine.snapshot(),
        total_records=len(records),
        missing_samples=missing,
        deltas=delta_stats(samples, engine.sensitivity),
    )


def replay_file(
    capture_path: str | Path,
    sensitivity: float | None = None,
    output_path: str | Path | None = None,
) -> ReplayResult:
    """Replay a capture file and optionally write the result as JSON.

    Raises:
        FileNotFoundError: if *capture_path* does not exist.
    """
    records = list(read_capture(capture_path))
    result = replay_records(records, sensitivity=sensitivity)
    logger.info("replayed %s: %r", capture_path, result)

    if output_path:
        with open(output_path, "w") as out:
            json.dump(result.to_dict(), out, indent=2)

    return result


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python -m strider.replay <capture.jsonl> [output.json]")
        sys.exit(1)

    capture_path = sys.argv[1]
    output_path = sys.argv[2] if len(sys.argv) > 2 else None
    result = replay_file(capture_path, output_path=output_path)
    print(result.snapshot)


if __name__ == "__main__":
    main()
