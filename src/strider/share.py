"""Human-readable summary of the most recent session for sharing."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Sequence

from strider.session import Session
from strider.stats import format_distance, format_duration


def _clock_time(ts: datetime, tz: tzinfo | None) -> str:
    """``09:05 PM`` style wall-clock time in *tz* (local time if None)."""
    if ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return ts.strftime("%I:%M %p")


def format_share_message(
    sessions: Sequence[Session],
    distance_meters: float,
    duration_seconds: int,
    tz: tzinfo | None = None,
) -> str | None:
    """Build the share text for the last session, or None if there is none.

    Pure formatting; the engine state is not touched.
    """
    if not sessions:
        return None
    last = sessions[-1]
    end = _clock_time(last.end, tz) if last.end is not None else "Ongoing"
    return (
        "🏃 Step Tracker Stats:\n"
        f"Distance covered: {format_distance(distance_meters)} meters\n"
        f"Duration: {format_duration(duration_seconds)}\n"
        f"Start time: {_clock_time(last.start, tz)}\n"
        f"End time: {end}"
    )
