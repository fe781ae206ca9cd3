"""Tests for strider.cli -- commands against a temporary state directory."""

import json

import pytest
from click.testing import CliRunner

from strider.cli import main

from tests.conftest import make_capture_entry, samples_with_deltas, write_jsonl


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("STRIDER_HOME", str(tmp_path / "home"))
    return tmp_path / "home"


@pytest.fixture
def runner():
    return CliRunner()


class TestStateCommands:
    def test_status_defaults(self, runner, home):
        result = runner.invoke(main, ["status"])
        assert result.exit_code == 0
        assert "Steps:       0" in result.output
        assert "Sensitivity: 12" in result.output

    def test_sensitivity_persists(self, runner, home):
        result = runner.invoke(main, ["sensitivity", "8.5"])
        assert result.exit_code == 0
        assert "Sensitivity set to 8.5" in result.output
        stored = json.loads((home / "state.json").read_text())
        assert stored["sensitivity"] == "8.5"
        assert "Sensitivity: 8.5" in runner.invoke(main, ["status"]).output

    def test_sensitivity_clamped(self, runner, home):
        result = runner.invoke(main, ["sensitivity", "30"])
        assert "clamped to 20" in result.output

    def test_sensitivity_non_finite_ignored(self, runner, home):
        result = runner.invoke(main, ["sensitivity", "nan"])
        assert result.exit_code == 0
        assert "Ignored non-finite sensitivity; still 12" in result.output
        assert not (home / "state.json").exists()

    def test_reset(self, runner, home):
        home.mkdir(parents=True)
        (home / "state.json").write_text(json.dumps({"steps": "42"}))
        result = runner.invoke(main, ["reset"])
        assert result.exit_code == 0
        assert "42 -> 0" in result.output
        assert json.loads((home / "state.json").read_text())["steps"] == "0"


class TestReplayCommand:
    def test_replay_summary(self, runner, home, tmp_path):
        entries = [
            make_capture_entry(s, i * 0.5)
            for i, s in enumerate(samples_with_deltas([20, 20, 5]))
        ]
        cap = write_jsonl(tmp_path / "cap.jsonl", entries)
        out = tmp_path / "out.json"
        result = runner.invoke(main, ["replay", str(cap), "-s", "12", "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert "Steps:       2" in result.output
        assert "Step Tracker Stats" in result.output
        assert json.loads(out.read_text())["snapshot"]["steps"] == 2

    def test_replay_missing_file(self, runner, home, tmp_path):
        result = runner.invoke(main, ["replay", str(tmp_path / "missing.jsonl")])
        assert result.exit_code != 0
