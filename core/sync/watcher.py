"""
Drift Watcher.

Polls a set of paths for metadata changes on a fixed interval, emits a
WatchEvent per changed path, drives the sync engine through drift and
repair, and invokes an optional repair callback.
"""

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Union

from ..errors import PathsRequiredError
from .engine import SyncEngine
from .events import WatchEvent
from .fingerprint import fingerprint

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 2.0

RepairCallback = Callable[[str], Union[None, Awaitable[None], Any]]

_CLOSED = object()


class WatchStream:
    """
    Bounded stream of watch events.

    Holds at most `capacity` undelivered events; further events are dropped
    until the consumer catches up. Iteration ends once the stream is closed
    and drained.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        # One slot beyond capacity is reserved for the close marker
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity + 1)
        self._closed = False
        self.dropped = 0
        self.task: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event: WatchEvent) -> bool:
        """
        Add an event without waiting.

        Returns:
            True if queued, False if the stream is full or closed
        """
        if self._closed or self._queue.qsize() >= self.capacity:
            self.dropped += 1
            return False
        self._queue.put_nowait(event)
        return True

    def close(self) -> None:
        """Mark the stream closed; queued events remain readable"""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def get(self, timeout: Optional[float] = None) -> Optional[WatchEvent]:
        """
        Wait for the next event.

        Returns:
            The event, or None when the stream is closed and drained or the
            timeout expires
        """
        try:
            item = await asyncio.wait_for(self._queue.get(), timeout=timeout)
        except asyncio.TimeoutError:
            return None

        if item is _CLOSED:
            # Leave the marker for any other waiting consumer
            self._queue.put_nowait(_CLOSED)
            return None
        return item

    async def aclose(self) -> None:
        """Stop the producing task and close the stream"""
        if self.task is not None and not self.task.done():
            self.task.cancel()
            try:
                await self.task
            except asyncio.CancelledError:
                pass
        self.close()

    def __aiter__(self) -> 'WatchStream':
        return self

    async def __anext__(self) -> WatchEvent:
        event = await self.get()
        if event is None:
            raise StopAsyncIteration
        return event

    async def __aenter__(self) -> 'WatchStream':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class Watcher(ABC):
    """Source of change events for a set of paths"""

    @abstractmethod
    async def watch(
        self,
        paths: Iterable[str],
        engine: Optional[SyncEngine] = None,
        repair: Optional[RepairCallback] = None
    ) -> WatchStream:
        """Start watching `paths` and return the event stream"""


class PollingWatcher(Watcher):
    """
    Fingerprint-polling watcher.

    One background task scans every path sequentially per tick. For each
    changed path the stored fingerprint is updated first, then the event is
    offered to the stream, then the engine receives DRIFT and REPAIR, then
    the repair callback runs. A successful repair re-stamps the path, so its
    own writes are not reported as drift, and sends STABLE. A failed one
    sends DRIFT again.
    """

    def __init__(self, interval_s: Optional[float] = None):
        """
        Args:
            interval_s: Seconds between polls; missing or non-positive values
                use the 2 second default
        """
        if interval_s is None or interval_s <= 0:
            interval_s = DEFAULT_INTERVAL_S
        self.interval_s = float(interval_s)

        # Monitoring state
        self._paths: List[str] = []
        self._is_watching = False
        self._started_at: Optional[datetime] = None
        self._stream: Optional[WatchStream] = None

        # Counters
        self._ticks = 0
        self._events_emitted = 0
        self._repair_failures = 0
        self._fingerprint_errors = 0
        self._last_error: Optional[str] = None

    async def watch(
        self,
        paths: Iterable[str],
        engine: Optional[SyncEngine] = None,
        repair: Optional[RepairCallback] = None
    ) -> WatchStream:
        """
        Start polling.

        Args:
            paths: Files or directories to watch (at least one)
            engine: Sync engine to drive, optional
            repair: Callback invoked with a changed path, sync or async, optional

        Returns:
            WatchStream with capacity equal to the number of paths

        Raises:
            PathsRequiredError: no paths were given
            OSError: a baseline fingerprint could not be computed
        """
        watched = list(dict.fromkeys(str(p) for p in paths))
        if not watched:
            raise PathsRequiredError()

        stamps = {path: fingerprint(path) for path in watched}

        stream = WatchStream(capacity=len(watched))
        stream.task = asyncio.create_task(self._poll(watched, stamps, stream, engine, repair))

        self._paths = watched
        self._stream = stream
        self._is_watching = True
        self._started_at = datetime.now()

        logger.info(f"Started polling {len(watched)} paths every {self.interval_s}s")
        return stream

    async def _poll(
        self,
        paths: List[str],
        stamps: Dict[str, str],
        stream: WatchStream,
        engine: Optional[SyncEngine],
        repair: Optional[RepairCallback]
    ) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval_s)
                self._ticks += 1
                await self._scan(paths, stamps, stream, engine, repair)
        finally:
            stream.close()
            self._is_watching = False
            logger.info(f"Stopped polling after {self._ticks} ticks")

    async def _scan(
        self,
        paths: List[str],
        stamps: Dict[str, str],
        stream: WatchStream,
        engine: Optional[SyncEngine],
        repair: Optional[RepairCallback]
    ) -> None:
        """Check every path once, in order"""
        for path in paths:
            try:
                stamp = fingerprint(path)
            except OSError as e:
                # Retried on the next tick
                self._fingerprint_errors += 1
                logger.debug(f"Error fingerprinting {path}: {e}")
                continue

            if stamp == stamps.get(path):
                continue
            stamps[path] = stamp

            event = WatchEvent(path=path)
            if stream.offer(event):
                self._events_emitted += 1
            else:
                logger.debug(f"Event stream full, dropped: {event}")

            if engine is not None:
                engine.mark_drifted()
                engine.mark_repairing()

            if repair is None:
                continue

            try:
                result = repair(path)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._repair_failures += 1
                self._last_error = f"{path}: {e}"
                logger.warning(f"Repair failed for {path}: {e}")
                if engine is not None:
                    engine.mark_drifted()
                continue

            # Writes made by the repair itself are part of the new baseline
            try:
                stamps[path] = fingerprint(path)
            except OSError as e:
                self._fingerprint_errors += 1
                logger.debug(f"Error fingerprinting {path} after repair: {e}")

            if engine is not None:
                engine.mark_stable()

    async def stop(self) -> None:
        """Stop the most recently started watch"""
        if self._stream is not None:
            await self._stream.aclose()

    @property
    def is_watching(self) -> bool:
        return self._is_watching

    def get_status(self) -> Dict[str, Any]:
        """
        Get status information.

        Returns:
            Dictionary with status information
        """
        return {
            "is_watching": self._is_watching,
            "paths": list(self._paths),
            "interval_s": self.interval_s,
            "started_at": self._started_at.isoformat() if self._started_at else None,
            "ticks": self._ticks,
            "events_emitted": self._events_emitted,
            "events_dropped": self._stream.dropped if self._stream else 0,
            "fingerprint_errors": self._fingerprint_errors,
            "repair_failures": self._repair_failures,
            "last_error": self._last_error,
        }
