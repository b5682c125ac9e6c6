"""
NativePlaybackTracker - watch time for directly controlled video.

State machine: IDLE -> PLAYING <-> PAUSED -> ENDED, driven by the player's
play, pause, timeupdate, seeked and ended events.

Key behaviors:
- While playing, a delta is reported every report interval of wall time or
  every position threshold of playback, whichever comes first
- Each delta is min(wall elapsed, position advanced) for its window
- Position jumps beyond the ceiling (or backwards) are seeks: no delta
- Baselines are reset before the delta is handed off, so windows never overlap
- Any window that closes within tolerance of the end is marked completed,
  whichever event closes it (a real player fires pause before ended)
"""

from __future__ import annotations

import logging
import threading

from ._reporter import ProgressReporter
from .component import (
    compute_played_delta,
    effective_duration,
    is_completed,
    is_seek,
)
from .models import (
    DEFAULT_CONFIG,
    PlaybackObservation,
    PlaybackState,
    ReportOutcome,
    TrackingConfig,
)
from .ports import ClockPort

logger = logging.getLogger(__name__)


class NativePlaybackTracker:
    """Instruments one natively hosted video surface."""

    def __init__(
        self,
        reporter: ProgressReporter,
        clock: ClockPort,
        config: TrackingConfig = DEFAULT_CONFIG,
        duration_hint: float | None = None,
    ) -> None:
        self._reporter = reporter
        self._clock = clock
        self._config = config
        self._duration_hint = duration_hint
        self._lock = threading.Lock()

        self._state = PlaybackState.IDLE
        self._wall_baseline = 0.0
        self._position_baseline = 0.0
        self._last_position = 0.0
        self._last_duration: float | None = None
        self._completion_reported = False
        self._stopped = False

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def last_position(self) -> float:
        return self._last_position

    @property
    def completion_reported(self) -> bool:
        return self._completion_reported

    # --- Player events ---

    def on_play(self, obs: PlaybackObservation) -> None:
        with self._lock:
            if self._stopped or self._state == PlaybackState.PLAYING:
                return
            self._observe(obs)
            if self._state == PlaybackState.ENDED:
                self._completion_reported = False
            self._rebaseline(obs.current_position_seconds)
            self._transition(PlaybackState.PLAYING)

    def on_timeupdate(self, obs: PlaybackObservation) -> ReportOutcome | None:
        with self._lock:
            if self._stopped:
                return None
            self._observe(obs)
            if self._state != PlaybackState.PLAYING:
                return None

            position = obs.current_position_seconds
            position_delta = position - self._position_baseline
            if is_seek(position_delta, self._config.sanity_ceiling_seconds):
                logger.debug(
                    "Seek from %.1fs to %.1fs; window discarded",
                    self._position_baseline,
                    position,
                )
                self._rebaseline(position)
                return None

            wall_elapsed = self._clock.monotonic() - self._wall_baseline
            if (
                wall_elapsed >= self._config.report_interval_seconds
                or position_delta >= self._config.position_threshold_seconds
            ):
                return self._emit(position)
            return None

    def on_seeked(self, obs: PlaybackObservation) -> None:
        with self._lock:
            if self._stopped:
                return
            self._observe(obs)
            if self._state == PlaybackState.PLAYING:
                self._rebaseline(obs.current_position_seconds)

    def on_pause(self, obs: PlaybackObservation) -> ReportOutcome | None:
        with self._lock:
            if self._stopped or self._state != PlaybackState.PLAYING:
                return None
            self._observe(obs)
            outcome = self._close_window(obs.current_position_seconds)
            self._transition(PlaybackState.PAUSED)
            return outcome

    def on_ended(self, obs: PlaybackObservation) -> ReportOutcome | None:
        with self._lock:
            if self._stopped:
                return None
            self._observe(obs)
            outcome = None
            position = obs.current_position_seconds
            if self._state == PlaybackState.PLAYING:
                outcome = self._close_window(position)
            if not self._completion_reported and self._at_end(position):
                # Nothing left to carry the flag: zero deltas are never sent
                logger.debug("Ended at %.1fs without a window to mark completed", position)
            self._transition(PlaybackState.ENDED)
            return outcome

    def resume(self, position: float) -> None:
        """
        Enter PLAYING at position with a fresh baseline.

        Used when a session is reopened while the player keeps playing.
        """
        with self._lock:
            if self._stopped:
                return
            self._last_position = position
            self._rebaseline(position)
            self._transition(PlaybackState.PLAYING)

    # --- Teardown ---

    def flush(self) -> ReportOutcome | None:
        """Report the pending playing window, if any, and keep playing."""
        with self._lock:
            if self._stopped or self._state != PlaybackState.PLAYING:
                return None
            return self._close_window(self._last_position)

    def stop(self) -> None:
        """Flush and detach; later events are ignored."""
        self.flush()
        with self._lock:
            self._stopped = True

    # --- Internals (lock held) ---

    def _observe(self, obs: PlaybackObservation) -> None:
        self._last_position = obs.current_position_seconds
        if obs.duration_seconds is not None:
            self._last_duration = obs.duration_seconds

    def _duration(self) -> float:
        return effective_duration(self._last_duration, self._duration_hint)

    def _rebaseline(self, position: float) -> None:
        self._position_baseline = position
        self._wall_baseline = self._clock.monotonic()

    def _at_end(self, position: float) -> bool:
        return is_completed(position, self._duration(), self._config.completion_tolerance_seconds)

    def _close_window(self, position: float) -> ReportOutcome | None:
        if is_seek(position - self._position_baseline, self._config.sanity_ceiling_seconds):
            self._rebaseline(position)
            return None
        return self._emit(position)

    def _emit(self, position: float) -> ReportOutcome:
        wall_elapsed = self._clock.monotonic() - self._wall_baseline
        delta = compute_played_delta(wall_elapsed, position - self._position_baseline)
        self._rebaseline(position)
        completed = self._at_end(position)
        outcome = self._reporter.report(delta, position, self._duration(), completed)
        if completed and outcome.sent:
            self._completion_reported = True
        return outcome

    def _transition(self, state: PlaybackState) -> None:
        if state != self._state:
            logger.debug("Playback %s -> %s", self._state.value, state.value)
            self._state = state
