"""
Thread Timer Adapter.

Cancellable periodic tasks on background threads. One implementation serves
both the heartbeat and the external-embed flush.

Key behaviors:
- First tick fires one interval after start
- cancel() returns only once no tick is running, and no tick starts after it
- A failing callback is logged and the task keeps running
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ThreadPeriodicTask:
    """Runs a callback every interval on a daemon thread."""

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], None],
        name: str = "periodic-task",
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._interval = interval_seconds
        self._callback = callback
        self._name = name
        self._stop_event = threading.Event()
        self._lock = threading.RLock()
        self._cancelled = False
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and not self._cancelled

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._stop_event.set()
        with self._lock:
            self._cancelled = True

    def _loop(self) -> None:
        while not self._stop_event.wait(timeout=self._interval):
            with self._lock:
                if self._cancelled:
                    return
                try:
                    self._callback()
                except Exception:
                    logger.exception("Error in periodic task %s", self._name)


class ThreadTimer:
    """TimerPort backed by ThreadPeriodicTask."""

    def every(self, interval_seconds: float, callback: Callable[[], None]) -> ThreadPeriodicTask:
        name = getattr(callback, "__qualname__", "periodic-task")
        task = ThreadPeriodicTask(interval_seconds, callback, name=name)
        task.start()
        return task
