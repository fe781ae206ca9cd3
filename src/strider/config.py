"""Tunable constants for the step tracker.

Everything here is a plain module-level constant; the only environment
override is ``STRIDER_HOME``, which moves the durable state file.
"""

from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Step detection
# ---------------------------------------------------------------------------

STRIDE_LENGTH_M = 0.762  # average adult walking stride

DEFAULT_SENSITIVITY = 12.0  # L1 delta (m/s^2) a sample must exceed to count
SENSITIVITY_MIN = 5.0
SENSITIVITY_MAX = 20.0
SENSITIVITY_STEP = 0.5

# ---------------------------------------------------------------------------
# Duration timer
# ---------------------------------------------------------------------------

TICK_INTERVAL_SEC = 1.0

# ---------------------------------------------------------------------------
# Durable state
# ---------------------------------------------------------------------------

STEPS_KEY = "steps"
SENSITIVITY_KEY = "sensitivity"

STATE_FILENAME = "state.json"


def state_dir() -> Path:
    """Directory holding the durable state file (``$STRIDER_HOME`` or ~/.strider)."""
    override = os.environ.get("STRIDER_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".strider"


def state_path() -> Path:
    return state_dir() / STATE_FILENAME


# ---------------------------------------------------------------------------
# BLE accelerometer source
# ---------------------------------------------------------------------------

DEVICE_NAME_PREFIX = "STRIDER"
# Nordic-style custom service; the notify characteristic carries packed
# int16 LE x/y/z triplets.
ACCEL_SERVICE_UUID = "7d2e0001-5d1c-4b8f-9a36-0c6b1f6e4a10"
ACCEL_CHAR_UUID = "7d2e0002-5d1c-4b8f-9a36-0c6b1f6e4a10"
# int16 -> m/s^2 for a +/-4g range (4 * 9.80665 / 32768)
ACCEL_SCALE = 4.0 * 9.80665 / 32768.0
