"""
HeartbeatScheduler - periodic "still open" pings for video sessions.

Runs independently of playback state. A missed heartbeat is the backend's
idle signal, so failures are never retried.
"""

from __future__ import annotations

import logging

from ._dispatch import AnalyticsDispatcher
from .ports import CancellablePort, TimerPort

logger = logging.getLogger(__name__)


class HeartbeatScheduler:
    def __init__(
        self,
        dispatcher: AnalyticsDispatcher,
        timer: TimerPort,
        resource_id: str,
        session_index: int,
        interval_seconds: float = 10.0,
    ) -> None:
        self._dispatcher = dispatcher
        self._timer = timer
        self._resource_id = resource_id
        self._session_index = session_index
        self._interval = interval_seconds
        self._task: CancellablePort | None = None
        self._ticks = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None

    @property
    def ticks(self) -> int:
        return self._ticks

    def start(self) -> None:
        if self._task is not None:
            return
        self._task = self._timer.every(self._interval, self._tick)
        logger.debug(
            "Heartbeat started for %s#%d every %.1fs",
            self._resource_id,
            self._session_index,
            self._interval,
        )

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None

    def _tick(self) -> None:
        self._ticks += 1
        self._dispatcher.heartbeat(self._resource_id, self._session_index, self._interval)
