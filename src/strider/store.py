"""Durable key-value storage for the step counter and sensitivity.

Only two keys survive a restart: ``steps`` (integer string) and
``sensitivity`` (float string).  Storage is best-effort: a failed write is
logged and dropped, and a missing or malformed value falls back to its
default.  Any object with ``get(key)`` / ``set(key, value)`` can serve as
the backend.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from strider.config import (
    DEFAULT_SENSITIVITY,
    SENSITIVITY_KEY,
    SENSITIVITY_MAX,
    SENSITIVITY_MIN,
    SENSITIVITY_STEP,
    STEPS_KEY,
)

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """Dict-backed store, mainly for replays and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """A single JSON object on disk.

    Every ``set`` rewrites the file through a temporary file and
    ``os.replace`` so a crash mid-write never leaves half a document.
    An unreadable or corrupt file reads as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("ignoring unreadable state file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("ignoring state file %s: not a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


# ---------------------------------------------------------------------------
# Value codecs
# ---------------------------------------------------------------------------


def parse_steps(raw: str | None) -> int | None:
    """Integer string -> steps.  None for missing, malformed or negative."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return int(value)


def parse_sensitivity(raw: str | None) -> float | None:
    """Float string -> sensitivity.  None for missing, malformed or non-positive."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except (ValueError, TypeError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def clamp_sensitivity(value: float) -> float:
    """Clamp into [min, max] and snap to the 0.5 grid."""
    value = min(max(value, SENSITIVITY_MIN), SENSITIVITY_MAX)
    snapped = round((value - SENSITIVITY_MIN) / SENSITIVITY_STEP) * SENSITIVITY_STEP
    return min(SENSITIVITY_MIN + snapped, SENSITIVITY_MAX)


def format_sensitivity(value: float) -> str:
    """``12.0`` -> ``"12"``, ``12.5`` -> ``"12.5"``."""
    return f"{value:g}"


@dataclass(frozen=True)
class PersistedState:
    steps: int = 0
    sensitivity: float = DEFAULT_SENSITIVITY


class TrackerStore:
    """``load`` / ``save`` contract over any :class:`KeyValueStore`."""

    def __init__(self, backend: KeyValueStore) -> None:
        self.backend = backend

    def load(self) -> PersistedState:
        """Read steps and sensitivity, substituting defaults where needed."""
        steps_raw = self._get(STEPS_KEY)
        steps = parse_steps(steps_raw)
        if steps is None:
            if steps_raw is not None:
                logger.warning("stored steps %r is not a count; using 0", steps_raw)
            steps = 0

        sens_raw = self._get(SENSITIVITY_KEY)
        sensitivity = parse_sensitivity(sens_raw)
        if sensitivity is None:
            if sens_raw is not None:
                logger.warning("stored sensitivity %r is invalid; using %s",
                               sens_raw, DEFAULT_SENSITIVITY)
            sensitivity = DEFAULT_SENSITIVITY
        else:
            sensitivity = clamp_sensitivity(sensitivity)

        return PersistedState(steps=steps, sensitivity=sensitivity)

    def save(self, key: str, value: str) -> bool:
        """Write one key.  Failures are logged and reported as False, never raised."""
        try:
            self.backend.set(key, value)
        except Exception as e:
            logger.warning("could not persist %s=%s: %s", key, value, e)
            return False
        return True

    def save_steps(self, steps: int) -> bool:
        return self.save(STEPS_KEY, str(int(steps)))

    def save_sensitivity(self, sensitivity: float) -> bool:
        return self.save(SENSITIVITY_KEY, format_sensitivity(sensitivity))

    def _get(self, key: str) -> str | None:
        try:
            return self.backend.get(key)
        except Exception as e:
            logger.warning("could not read %s: %s", key, e)
            return None
