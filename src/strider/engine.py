"""The step tracking engine.

:class:`StepTracker` owns the single mutable aggregate and is the only
thing the presentation layer talks to.  Three event sources drive it --
acceleration samples, the duration timer, and user commands -- and each
handler runs to completion before subscribers see an immutable
:class:`TrackerSnapshot` of the result.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from strider.detector import StepDetector
from strider.motion import AccelSample
from strider.session import Session, SessionTracker
from strider.stats import TrackerStats, compute_stats, format_duration
from strider.store import MemoryStore, TrackerStore, clamp_sensitivity
from strider.timer import DurationTimer, ManualTimer

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Listener = Callable[["TrackerSnapshot"], None]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TrackerSnapshot:
    """Read-only view of the engine state for rendering."""

    steps: int
    distance_meters: float
    duration_seconds: int
    frequency: int
    sensitivity: float
    is_tracking: bool
    motion_supported: bool
    sessions: tuple[Session, ...] = field(default_factory=tuple)

    @property
    def duration_label(self) -> str:
        return format_duration(self.duration_seconds)

    def to_dict(self) -> dict[str, Any]:
        return {
            "steps": self.steps,
            "distance_meters": self.distance_meters,
            "duration_seconds": self.duration_seconds,
            "duration": self.duration_label,
            "frequency": self.frequency,
            "sensitivity": self.sensitivity,
            "is_tracking": self.is_tracking,
            "motion_supported": self.motion_supported,
            "sessions": [s.to_dict() for s in self.sessions],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __repr__(self) -> str:
        state = "tracking" if self.is_tracking else "idle"
        return (
            f"TrackerSnapshot({state}, steps={self.steps}, "
            f"{self.distance_meters} m, {self.duration_label}, "
            f"{self.frequency} steps/min)"
        )


class StepTracker:
    """Motion-triggered step counter with session history.

    Args:
        store: Durable storage for steps and sensitivity.  Defaults to an
            in-memory store, i.e. nothing survives the process.
        timer: Duration ticker.  Defaults to an asyncio
            :class:`DurationTimer`, which needs a running loop at ``start``.
        clock: Source of session timestamps.
        motion_supported: False when the sample source has no
            gravity-inclusive accelerometer; samples are then ignored.
    """

    def __init__(
        self,
        store: TrackerStore | None = None,
        timer: DurationTimer | ManualTimer | None = None,
        clock: Clock = _utc_now,
        motion_supported: bool = True,
    ) -> None:
        self.store = store if store is not None else TrackerStore(MemoryStore())
        self.timer = timer if timer is not None else DurationTimer()
        self.clock = clock
        self.motion_supported = motion_supported

        persisted = self.store.load()
        self.detector = StepDetector(steps=persisted.steps)
        self.sensitivity = persisted.sensitivity
        self.sessions = SessionTracker()
        self.duration_seconds = 0
        self.stats: TrackerStats = compute_stats(self.detector.steps, 0)

        self._listeners: list[Listener] = []

    # -- observable state ---------------------------------------------------

    @property
    def steps(self) -> int:
        return self.detector.steps

    @property
    def is_tracking(self) -> bool:
        return self.sessions.is_tracking

    def snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(
            steps=self.detector.steps,
            distance_meters=self.stats.distance_meters,
            duration_seconds=self.duration_seconds,
            frequency=self.stats.frequency,
            sensitivity=self.sensitivity,
            is_tracking=self.is_tracking,
            motion_supported=self.motion_supported,
            sessions=self.sessions.sessions,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with a snapshot after every state change.

        Returns a function that removes the subscription.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    def _recompute(self) -> None:
        self.stats = compute_stats(self.detector.steps, self.duration_seconds)

    # -- sample feed --------------------------------------------------------

    def on_sample(self, sample: AccelSample | None) -> bool:
        """Handle one acceleration sample.  Returns True if a step was counted."""
        if not self.motion_supported:
            return False
        counted = self.detector.on_sample(
            sample,
            tracking=self.is_tracking,
            sensitivity=self.sensitivity,
        )
        if counted:
            self._recompute()
            self.store.save_steps(self.detector.steps)
            self._publish()
        return counted

    def disable_motion(self) -> None:
        """Record that the sample source cannot provide acceleration."""
        if self.motion_supported:
            logger.warning("motion source unavailable; steps will not increment")
            self.motion_supported = False
            self._publish()

    # -- timer --------------------------------------------------------------

    def _on_tick(self) -> None:
        if not self.is_tracking:
            return
        self.duration_seconds += 1
        self._recompute()
        self._publish()

    # -- commands -----------------------------------------------------------

    def start(self) -> bool:
        """Begin a tracking session.  No-op while already tracking.

        The ticker is armed before any state changes, so if it cannot start
        (e.g. no running event loop) the engine stays idle and the error
        propagates.
        """
        if self.is_tracking:
            logger.debug("start ignored: already tracking")
            return False
        self.timer.start(self._on_tick)
        self.sessions.start(self.clock())
        self.duration_seconds = 0
        self._recompute()
        logger.info("tracking started (steps=%d, sensitivity=%s)",
                    self.detector.steps, self.sensitivity)
        self._publish()
        return True

    def stop(self) -> bool:
        """End the current session.  No-op while idle."""
        if not self.is_tracking:
            logger.debug("stop ignored: not tracking")
            return False
        self.timer.cancel()
        self.sessions.stop(self.clock())
        logger.info("tracking stopped (steps=%d, %s)",
                    self.detector.steps, format_duration(self.duration_seconds))
        self._publish()
        return True

    def reset(self) -> None:
        """Zero steps, distance, duration and frequency.  History is kept."""
        self.detector.reset()
        self.duration_seconds = 0
        self._recompute()
        self.store.save_steps(0)
        self._publish()

    def delete_session(self, index: int) -> bool:
        """Remove one session from the history.  Bad indices are ignored."""
        if not self.sessions.delete(index):
            return False
        self._publish()
        return True

    def clear_history(self) -> int:
        """Remove every closed session.  Returns how many were removed."""
        removed = self.sessions.clear()
        if removed:
            self._publish()
        return removed

    def set_sensitivity(self, value: float) -> float:
        """Set the step threshold, clamped to 5.0-20.0 on a 0.5 grid.

        Non-finite values are ignored.  Returns the sensitivity in effect.
        """
        if not math.isfinite(value):
            logger.warning("ignoring non-finite sensitivity %r", value)
            return self.sensitivity
        self.sensitivity = clamp_sensitivity(value)
        self.store.save_sensitivity(self.sensitivity)
        self._publish()
        return self.sensitivity

    def close(self) -> None:
        """Stop tracking and release the timer (process shutdown / unmount)."""
        self.stop()
        self.timer.cancel()
