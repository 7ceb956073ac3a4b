"""
Sync State Machine.

Tracks whether watched configuration is clean, drifted, or being repaired.
The machine is a transition table keyed by (state, event); events with no
entry for the current state are ignored.
"""

import logging
import os
import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, List, Mapping, Optional, Tuple

from ..errors import PathRequiredError

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    """States exposed by the sync engine"""
    CLEAN = "clean"
    DRIFTED = "drifted"
    REPAIRING = "repairing"
    UNKNOWN = "unknown"  # Machine failed to build


class SyncEvent(str, Enum):
    """Events that drive the sync engine"""
    DRIFT = "DRIFT"
    STABLE = "STABLE"
    REPAIR = "REPAIR"


TransitionTable = Mapping[Tuple[SyncState, SyncEvent], SyncState]

DEFAULT_TRANSITIONS: Dict[Tuple[SyncState, SyncEvent], SyncState] = {
    (SyncState.CLEAN, SyncEvent.DRIFT): SyncState.DRIFTED,
    (SyncState.CLEAN, SyncEvent.STABLE): SyncState.CLEAN,
    (SyncState.DRIFTED, SyncEvent.DRIFT): SyncState.DRIFTED,
    (SyncState.DRIFTED, SyncEvent.STABLE): SyncState.CLEAN,
    (SyncState.DRIFTED, SyncEvent.REPAIR): SyncState.REPAIRING,
    (SyncState.REPAIRING, SyncEvent.DRIFT): SyncState.DRIFTED,
    (SyncState.REPAIRING, SyncEvent.STABLE): SyncState.CLEAN,
    (SyncState.REPAIRING, SyncEvent.REPAIR): SyncState.REPAIRING,
}

DIR_MODE = 0o750


@dataclass(frozen=True)
class Transition:
    """One applied transition"""
    source: SyncState
    event: SyncEvent
    target: SyncState
    at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.source.value,
            "event": self.event.value,
            "to": self.target.value,
            "at": self.at.isoformat(),
        }


def _build_machine(
    transitions: TransitionTable,
    initial: SyncState
) -> Dict[Tuple[SyncState, SyncEvent], SyncState]:
    """Check a transition table and return a private copy of it"""
    table: Dict[Tuple[SyncState, SyncEvent], SyncState] = {}
    for (source, event), target in transitions.items():
        source, event, target = SyncState(source), SyncEvent(event), SyncState(target)
        if SyncState.UNKNOWN in (source, target):
            raise ValueError(f"State {SyncState.UNKNOWN.value!r} cannot appear in transitions")
        table[(source, event)] = target

    states = {source for source, _ in table} | set(table.values())
    if initial not in states:
        raise ValueError(f"Initial state {initial.value!r} has no transitions")
    return table


class SyncEngine:
    """
    Thread-safe three-state sync machine.

    `send` and `state` can be called from the watcher task and from
    foreground readers at the same time; each holds a lock only for a single
    lookup and assignment.

    If the transition table cannot be built the engine runs in a degenerate
    mode: `state()` returns `unknown` and every event is a no-op.
    """

    def __init__(
        self,
        transitions: Optional[TransitionTable] = None,
        initial: SyncState = SyncState.CLEAN,
        history_size: int = 100
    ):
        self._lock = threading.Lock()
        self._history: Deque[Transition] = deque(maxlen=history_size)
        self._transition_count = 0
        self._table: Optional[Dict[Tuple[SyncState, SyncEvent], SyncState]]
        self._state: SyncState

        try:
            self._table = _build_machine(
                DEFAULT_TRANSITIONS if transitions is None else transitions,
                SyncState(initial),
            )
            self._state = SyncState(initial)
        except ValueError as e:
            logger.warning(f"Sync state machine failed to build, state is unknown: {e}")
            self._table = None
            self._state = SyncState.UNKNOWN

    @property
    def is_operational(self) -> bool:
        return self._table is not None

    def state(self) -> SyncState:
        """Current state"""
        with self._lock:
            return self._state

    def send(self, event: SyncEvent) -> SyncState:
        """
        Apply one event.

        Returns:
            The state after the event (unchanged if the event was ignored)
        """
        event = SyncEvent(event)
        with self._lock:
            if self._table is None:
                return self._state

            source = self._state
            target = self._table.get((source, event))
            if target is None:
                logger.debug(f"Ignored {event.value} in state {source.value}")
                return source

            self._state = target
            self._transition_count += 1
            self._history.append(Transition(source, event, target, datetime.now()))

        if target != source:
            logger.debug(f"Sync state {source.value} -> {target.value} on {event.value}")
        return target

    def mark_drifted(self) -> SyncState:
        return self.send(SyncEvent.DRIFT)

    def mark_repairing(self) -> SyncState:
        return self.send(SyncEvent.REPAIR)

    def mark_stable(self) -> SyncState:
        return self.send(SyncEvent.STABLE)

    def detect_drift(
        self,
        expected: Mapping[str, str],
        current: Mapping[str, str]
    ) -> List[str]:
        """
        Compare expected and current fingerprints.

        Returns:
            Sorted keys of `expected` missing from or different in `current`.
            DRIFT is sent when the list is non-empty, STABLE otherwise.
        """
        drift = sorted(
            key for key, value in expected.items()
            if key not in current or current[key] != value
        )
        if drift:
            self.mark_drifted()
        else:
            self.mark_stable()
        return drift

    def ensure_path(self, path: str) -> None:
        """Create a directory tree for synced content"""
        if not path or not str(path).strip():
            raise PathRequiredError()
        os.makedirs(path, mode=DIR_MODE, exist_ok=True)

    def transitions(self) -> List[Transition]:
        """Most recent applied transitions, oldest first"""
        with self._lock:
            return list(self._history)

    def get_status(self) -> Dict[str, Any]:
        """
        Get status information.

        Returns:
            Dictionary with the state, transition count and last transition
        """
        with self._lock:
            last = self._history[-1] if self._history else None
            return {
                "state": self._state.value,
                "operational": self._table is not None,
                "transition_count": self._transition_count,
                "last_transition": last.to_dict() if last else None,
            }
