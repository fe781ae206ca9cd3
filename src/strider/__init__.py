"""strider -- motion-triggered step detection and session tracking.

Modules:
    motion    -- L1 delta between consecutive acceleration samples
    detector  -- delta-threshold step counter
    session   -- Idle/Tracking state machine and session history
    timer     -- cancellable one-second duration tickers
    stats     -- distance and step frequency
    store     -- durable steps / sensitivity storage
    engine    -- StepTracker facade and snapshots
    share     -- share-text formatting
    replay    -- offline replay of recorded captures
    ble       -- live tracking from a BLE accelerometer
"""

from strider.motion import AccelSample, compute_delta, is_step_delta
from strider.detector import StepDetector
from strider.session import Session, SessionTracker, TrackingState
from strider.timer import DurationTimer, ManualTimer
from strider.stats import TrackerStats, compute_stats, format_duration
from strider.store import JsonFileStore, MemoryStore, TrackerStore
from strider.engine import StepTracker, TrackerSnapshot
from strider.share import format_share_message

__all__ = [
    # motion
    "AccelSample",
    "compute_delta",
    "is_step_delta",
    # detector
    "StepDetector",
    # session
    "Session",
    "SessionTracker",
    "TrackingState",
    # timer
    "DurationTimer",
    "ManualTimer",
    # stats
    "TrackerStats",
    "compute_stats",
    "format_duration",
    # store
    "JsonFileStore",
    "MemoryStore",
    "TrackerStore",
    # engine
    "StepTracker",
    "TrackerSnapshot",
    # share
    "format_share_message",
]
