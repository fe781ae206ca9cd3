"""Tests for strider.replay -- offline capture replay."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from strider.motion import AccelSample
from strider.replay import (
    CaptureRecord,
    parse_timestamp,
    read_capture,
    replay_file,
    replay_records,
)

from tests.conftest import T0, make_capture_entry, samples_with_deltas, write_jsonl


def walk_capture(deltas, spacing_sec=0.5) -> list[dict]:
    return [
        make_capture_entry(s, i * spacing_sec)
        for i, s in enumerate(samples_with_deltas(deltas))
    ]


class TestParseTimestamp:
    def test_z_suffix(self):
        assert parse_timestamp("2024-02-13T12:00:00Z") == T0

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-02-13T12:00:00") == T0

    @pytest.mark.parametrize("value", [None, 12, "yesterday"])
    def test_invalid(self, value):
        assert parse_timestamp(value) is None


class TestReadCapture:
    def test_skips_blank_and_invalid_lines(self, tmp_path):
        path = tmp_path / "cap.jsonl"
        entry = make_capture_entry(AccelSample(1, 2, 3), 0)
        path.write_text("\n" + json.dumps(entry) + "\n{broken\n[1, 2]\n")
        records = list(read_capture(path))
        assert len(records) == 1
        assert records[0].sample == AccelSample(1, 2, 3)
        assert records[0].timestamp == T0

    def test_missing_axes_become_none(self, tmp_path):
        path = write_jsonl(tmp_path / "cap.jsonl", [{"timestamp": "2024-02-13T12:00:00Z"}])
        records = list(read_capture(path))
        assert records[0].sample is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            list(read_capture(tmp_path / "nope.jsonl"))


class TestReplayRecords:
    def test_counts_steps_and_duration(self):
        # 21 samples at 0.5 s spacing = 10 s of recording
        deltas = [5] + [20, 3] * 10
        records = [
            CaptureRecord(T0 + timedelta(seconds=i * 0.5), s)
            for i, s in enumerate(samples_with_deltas(deltas))
        ]
        result = replay_records(records, sensitivity=12)
        snap = result.snapshot
        assert snap.steps == 10
        assert snap.duration_seconds == 10
        assert snap.frequency == 60
        assert snap.distance_meters == 7.62
        assert snap.is_tracking is False
        assert snap.sessions[0].start == T0
        assert snap.sessions[0].end == T0 + timedelta(seconds=10)

    def test_sensitivity_changes_outcome(self):
        records = [CaptureRecord(None, s) for s in samples_with_deltas([10, 14, 18])]
        assert replay_records(records, sensitivity=12).snapshot.steps == 2
        assert replay_records(records, sensitivity=16).snapshot.steps == 1

    def test_missing_samples_counted(self):
        records = [
            CaptureRecord(T0, None),
            CaptureRecord(T0 + timedelta(seconds=1), AccelSample(0, 0, 20)),
        ]
        result = replay_records(records)
        assert result.missing_samples == 1
        assert result.total_records == 2
        assert result.snapshot.steps == 1

    def test_delta_stats(self):
        records = [CaptureRecord(None, s) for s in samples_with_deltas([4, 20])]
        result = replay_records(records, sensitivity=12)
        assert result.deltas.peak == 20.0
        assert result.deltas.above_threshold == 1

    def test_empty_capture(self):
        result = replay_records([])
        assert result.snapshot.steps == 0
        assert len(result.snapshot.sessions) == 1

    def test_share_message(self):
        records = [CaptureRecord(T0, AccelSample(0, 0, 20))]
        msg = replay_records(records).share_message()
        assert msg is not None
        assert "Distance covered: 0.76 meters" in msg


class TestReplayFile:
    def test_writes_output(self, tmp_path):
        cap = write_jsonl(tmp_path / "cap.jsonl", walk_capture([20, 20, 20, 1]))
        out = tmp_path / "out.json"
        result = replay_file(cap, sensitivity=12, output_path=out)
        assert result.snapshot.steps == 3
        data = json.loads(out.read_text())
        assert data["snapshot"]["steps"] == 3
        assert data["total_records"] == 4
