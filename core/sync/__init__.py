"""
Drift detection and sync state.

Key Components:
- SyncEngine: Thread-safe clean / drifted / repairing state machine
- fingerprint: Metadata fingerprint of a file or directory tree
- WatchEvent: Change notification for one watched path
- PollingWatcher: Interval-based fingerprint polling with repair callbacks
- WatchStream: Bounded async stream of watch events

Polling is used instead of kernel notifications so the same code runs on
every platform; a different Watcher implementation can be substituted
without touching the engine.
"""

from .engine import SyncEngine, SyncEvent, SyncState, Transition, DEFAULT_TRANSITIONS
from .events import WatchEvent
from .fingerprint import fingerprint
from .watcher import PollingWatcher, Watcher, WatchStream, DEFAULT_INTERVAL_S

__all__ = [
    "SyncEngine",
    "SyncEvent",
    "SyncState",
    "Transition",
    "DEFAULT_TRANSITIONS",
    "WatchEvent",
    "fingerprint",
    "PollingWatcher",
    "Watcher",
    "WatchStream",
    "DEFAULT_INTERVAL_S",
]
