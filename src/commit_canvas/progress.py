"""Keyed progress store with per-run listener channels.

A ``ProgressTracker`` is created by whoever drives generation runs and handed
to the code that reports on them. Each run id moves through
``pending -> running -> (complete | error)``; every transition stores a new
``ProgressState`` snapshot and fans it out synchronously to that id's
listeners. Terminal snapshots are evicted after ``eviction_delay`` seconds.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable, Iterator

from loguru import logger

from commit_canvas.dates import utc_now_iso
from commit_canvas.models import ProgressState

DEFAULT_EVICTION_DELAY = 10 * 60

ProgressListener = Callable[[ProgressState], None]


def clamp_progress(value: float) -> int:
    return min(100, max(0, round(value)))


class ProgressTracker:
    def __init__(self, eviction_delay: float = DEFAULT_EVICTION_DELAY):
        self.eviction_delay = eviction_delay
        self._states: dict[str, ProgressState] = {}
        self._channels: dict[str, dict[int, ProgressListener]] = {}
        self._timers: dict[str, threading.Timer] = {}
        self._next_token = 0
        self._lock = threading.Lock()

    def get(self, progress_id: str) -> ProgressState | None:
        """Return the latest snapshot for ``progress_id`` without creating one."""
        with self._lock:
            return self._states.get(progress_id)

    def ensure(self, progress_id: str) -> ProgressState:
        """Return the snapshot for ``progress_id``, creating a pending one if absent."""
        with self._lock:
            existing = self._states.get(progress_id)
            if existing is not None:
                return existing
            state = ProgressState(
                id=progress_id,
                status="pending",
                progress=0,
                message="Waiting for generation",
                updated_at=utc_now_iso(),
            )
            self._states[progress_id] = state
            return state

    def start(self, progress_id: str, message: str | None = None) -> ProgressState:
        self._cancel_eviction(progress_id)
        state = ProgressState(
            id=progress_id,
            status="running",
            progress=0,
            message=message or "Starting generation",
            updated_at=utc_now_iso(),
        )
        self._publish(state)
        return state

    def update(self, progress_id: str, percent: float, message: str | None = None) -> ProgressState:
        base = self.ensure(progress_id)
        state = base.model_copy(
            update={
                "status": "running",
                "progress": clamp_progress(percent),
                "message": message if message is not None else base.message,
                "updated_at": utc_now_iso(),
            }
        )
        self._publish(state)
        return state

    def complete(self, progress_id: str, message: str | None = None) -> ProgressState:
        base = self.ensure(progress_id)
        state = base.model_copy(
            update={
                "status": "complete",
                "progress": 100,
                "message": message or "Complete",
                "updated_at": utc_now_iso(),
            }
        )
        self._publish(state)
        self._schedule_eviction(progress_id)
        return state

    def fail(self, progress_id: str, error: str) -> ProgressState:
        base = self.ensure(progress_id)
        state = base.model_copy(
            update={
                "status": "error",
                "error": error,
                "message": "Generation failed",
                "updated_at": utc_now_iso(),
            }
        )
        self._publish(state)
        self._schedule_eviction(progress_id)
        return state

    def subscribe(self, progress_id: str, listener: ProgressListener) -> Callable[[], None]:
        """Register ``listener`` for ``progress_id`` and return an idempotent unsubscribe."""
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._channels.setdefault(progress_id, {})[token] = listener

        def unsubscribe() -> None:
            with self._lock:
                channel = self._channels.get(progress_id)
                if channel is None or channel.pop(token, None) is None:
                    return
                if not channel:
                    del self._channels[progress_id]

        return unsubscribe

    def listener_count(self, progress_id: str) -> int:
        with self._lock:
            return len(self._channels.get(progress_id, {}))

    def stream(self, progress_id: str, timeout: float | None = None) -> Iterator[ProgressState]:
        """Yield the current snapshot, then each published one, until a terminal status.

        Raises:
            queue.Empty: If ``timeout`` seconds pass without a new snapshot.
        """
        inbox: queue.Queue[ProgressState] = queue.Queue()
        unsubscribe = self.subscribe(progress_id, inbox.put)
        try:
            state = self.ensure(progress_id)
            yield state
            while not state.is_terminal:
                state = inbox.get(timeout=timeout)
                yield state
        finally:
            unsubscribe()

    def close(self) -> None:
        """Cancel pending evictions."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def _publish(self, state: ProgressState) -> None:
        with self._lock:
            self._states[state.id] = state
            listeners = list(self._channels.get(state.id, {}).values())

        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception(f"Progress listener failed for id={state.id}")

    def _schedule_eviction(self, progress_id: str) -> None:
        timer = threading.Timer(self.eviction_delay, self._evict, args=(progress_id,))
        timer.daemon = True
        with self._lock:
            previous = self._timers.pop(progress_id, None)
            self._timers[progress_id] = timer
        if previous is not None:
            previous.cancel()
        timer.start()

    def _cancel_eviction(self, progress_id: str) -> None:
        with self._lock:
            timer = self._timers.pop(progress_id, None)
        if timer is not None:
            timer.cancel()

    def _evict(self, progress_id: str) -> None:
        with self._lock:
            self._timers.pop(progress_id, None)
            state = self._states.get(progress_id)
            if state is None or not state.is_terminal:
                return
            del self._states[progress_id]
        logger.debug(f"Evicted progress state id={progress_id}")
