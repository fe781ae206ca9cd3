"""Tracking session state machine and ordered session history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class TrackingState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class Session:
    """One contiguous start-to-stop tracking interval.

    ``end is None`` means the session is still running.
    """

    start: datetime
    end: datetime | None = None

    @property
    def ongoing(self) -> bool:
        return self.end is None

    def elapsed_seconds(self, now: datetime | None = None) -> float:
        """Seconds from start to end (or to *now* for an open session)."""
        end = self.end if self.end is not None else now
        if end is None:
            return 0.0
        return max((end - self.start).total_seconds(), 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end is not None else None,
        }

    def __repr__(self) -> str:
        end = self.end.isoformat() if self.end is not None else "ongoing"
        return f"Session({self.start.isoformat()} -> {end})"


class SessionTracker:
    """``{IDLE, TRACKING}`` state machine that owns the session history.

    Sessions are kept in insertion order, which is chronological start
    order.  At most one session is open, and only while TRACKING.  Every
    invalid transition is a silent no-op: commands come from best-effort
    UI triggers and may be duplicated or stale.
    """

    def __init__(self) -> None:
        self.state = TrackingState.IDLE
        self._sessions: list[Session] = []

    @property
    def is_tracking(self) -> bool:
        return self.state is TrackingState.TRACKING

    @property
    def sessions(self) -> tuple[Session, ...]:
        return tuple(self._sessions)

    def start(self, now: datetime) -> bool:
        """IDLE -> TRACKING, opening a new session.  Returns False if already tracking."""
        if self.is_tracking:
            logger.debug("start ignored: already tracking")
            return False
        self.state = TrackingState.TRACKING
        self._sessions.append(Session(start=now))
        return True

    def stop(self, now: datetime) -> bool:
        """TRACKING -> IDLE, closing the last session if it is still open.

        Returns False when idle.
        """
        if not self.is_tracking:
            logger.debug("stop ignored: not tracking")
            return False
        self.state = TrackingState.IDLE
        if self._sessions and self._sessions[-1].ongoing:
            self._sessions[-1] = Session(start=self._sessions[-1].start, end=now)
        return True

    def delete(self, index: int) -> bool:
        """Remove the session at *index*; out-of-range indices are ignored."""
        if not 0 <= index < len(self._sessions):
            logger.debug("delete ignored: index %d out of range (%d sessions)",
                         index, len(self._sessions))
            return False
        del self._sessions[index]
        return True

    def clear(self) -> int:
        """Drop every closed session, keeping an open one.  Returns how many went."""
        kept = [s for s in self._sessions if s.ongoing]
        removed = len(self._sessions) - len(kept)
        self._sessions = kept
        return removed

    def last(self) -> Session | None:
        return self._sessions[-1] if self._sessions else None
