"""
ExternalWatchTracker - inferred watch time for cross-origin embeds.

Third-party players in an iframe expose no playback events, so "the page was
visible and the window had focus" stands in for "the user was watching".
This is a heuristic: time spent focused on a paused embed still counts, and
time spent watching with focus elsewhere does not.

Key behaviors:
- A focus interval is open only while visible AND focused
- Hidden or blurred time never accrues, even across a flush
- A periodic flush folds the open interval up to now, reports the
  accumulated seconds and resets the accumulator
- Teardown folds the open interval and flushes once more
"""

from __future__ import annotations

import logging
import threading

from ._reporter import ProgressReporter
from .models import DEFAULT_CONFIG, ReportOutcome, TrackingConfig, WatchAccumulator
from .ports import CancellablePort, ClockPort, PageStatePort, TimerPort

logger = logging.getLogger(__name__)


class ExternalWatchTracker:
    """Accumulates visible-and-focused time for one embedded video."""

    def __init__(
        self,
        reporter: ProgressReporter,
        clock: ClockPort,
        timer: TimerPort,
        page: PageStatePort | None = None,
        config: TrackingConfig = DEFAULT_CONFIG,
    ) -> None:
        self._reporter = reporter
        self._clock = clock
        self._timer = timer
        self._config = config
        self._lock = threading.Lock()

        self._visible = page.is_visible() if page is not None else True
        self._focused = page.has_focus() if page is not None else True
        self._acc = WatchAccumulator()
        self._task: CancellablePort | None = None
        self._stopped = False

    @property
    def accumulated_seconds(self) -> float:
        return self._acc.accumulated_seconds

    @property
    def is_watching(self) -> bool:
        return self._acc.focus_started_at is not None

    def start(self) -> None:
        with self._lock:
            if self._task is not None or self._stopped:
                return
            self._maybe_open()
        self._task = self._timer.every(self._config.external_flush_interval_seconds, self.flush)

    # --- Page events ---

    def on_visibility_change(self, visible: bool) -> None:
        with self._lock:
            if self._stopped:
                return
            self._visible = visible
            if visible:
                self._maybe_open()
            else:
                self._close()

    def on_focus(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._focused = True
            self._maybe_open()

    def on_blur(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._focused = False
            self._close()

    # --- Flushing ---

    def flush(self) -> ReportOutcome | None:
        """Report accumulated time (timer tick)."""
        with self._lock:
            if self._stopped:
                return None
            if self._acc.focus_started_at is not None:
                self._close()
                self._maybe_open()
            return self._drain()

    def stop(self) -> None:
        """Cancel the flush timer, fold the open interval and flush."""
        # Cancel outside the lock: a tick in progress may be waiting on it.
        if self._task is not None:
            self._task.cancel()
            self._task = None
        with self._lock:
            if self._stopped:
                return
            self._close()
            self._drain()
            self._stopped = True

    # --- Internals (lock held) ---

    def _maybe_open(self) -> None:
        if self._visible and self._focused and self._acc.focus_started_at is None:
            self._acc.focus_started_at = self._clock.monotonic()

    def _close(self) -> None:
        started = self._acc.focus_started_at
        if started is None:
            return
        elapsed = self._clock.monotonic() - started
        if elapsed > 0:
            self._acc.accumulated_seconds += elapsed
        self._acc.focus_started_at = None

    def _drain(self) -> ReportOutcome | None:
        seconds = self._acc.accumulated_seconds
        if seconds <= 0:
            return None
        self._acc.accumulated_seconds = 0.0
        return self._reporter.report(
            seconds,
            position_seconds=0.0,
            duration_seconds=0.0,
            completed=False,
            max_delta_seconds=self._config.external_max_delta_seconds,
        )
