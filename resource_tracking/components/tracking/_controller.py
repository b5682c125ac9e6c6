"""
SessionController - owner of one mounted resource view.

Opens the access session, picks the tracker for the resource, runs the
heartbeat for videos and guarantees the session is closed exactly once.

Key behaviors:
- start() while a session is open is a no-op
- stop() is idempotent: one end_access per opened session
- reopen() closes the current session before opening a fresh one
- Nothing here raises into the caller; failures are logged
"""

from __future__ import annotations

import logging
import threading

from ._dispatch import AnalyticsDispatcher
from ._external import ExternalWatchTracker
from ._heartbeat import HeartbeatScheduler
from ._native import NativePlaybackTracker
from ._reporter import ProgressReporter
from .component import needs_heartbeat, select_tracker_kind
from .models import (
    DEFAULT_CONFIG,
    AccessContext,
    PlaybackObservation,
    PlaybackState,
    ResourceDescriptor,
    ResourceSession,
    TrackerKind,
    TrackingConfig,
)
from .ports import ClockPort, PageStatePort, TimerPort

logger = logging.getLogger(__name__)


class SessionController:
    """Tracks engagement for one resource view from mount to unmount."""

    def __init__(
        self,
        dispatcher: AnalyticsDispatcher,
        clock: ClockPort,
        timer: TimerPort,
        page: PageStatePort | None = None,
        config: TrackingConfig = DEFAULT_CONFIG,
    ) -> None:
        """
        Initialize controller.

        Args:
            dispatcher: Non-blocking front for the analytics client
            clock: Time source for session timestamps and deltas
            timer: Factory for the heartbeat and flush timers
            page: Visibility/focus of the hosting page (external embeds)
            config: Tracking thresholds
        """
        self._dispatcher = dispatcher
        self._clock = clock
        self._timer = timer
        self._page = page
        self._config = config
        self._lock = threading.RLock()

        self._resource: ResourceDescriptor | None = None
        self._context = AccessContext()
        self._session: ResourceSession | None = None
        self._native: NativePlaybackTracker | None = None
        self._external: ExternalWatchTracker | None = None
        self._heartbeat: HeartbeatScheduler | None = None

    @property
    def session(self) -> ResourceSession | None:
        return self._session

    @property
    def is_open(self) -> bool:
        return self._session is not None and self._session.is_open

    @property
    def tracker_kind(self) -> TrackerKind:
        if self._native is not None:
            return TrackerKind.NATIVE
        if self._external is not None:
            return TrackerKind.EXTERNAL
        return TrackerKind.NONE

    # --- Lifecycle ---

    def start(
        self,
        resource: ResourceDescriptor,
        context: AccessContext | None = None,
    ) -> int | None:
        """
        Open a session and begin tracking.

        Returns:
            The backend session index, or None if the session could not open
        """
        with self._lock:
            if self.is_open:
                assert self._session is not None
                logger.debug("start() ignored: %s already open", self._session.resource_id)
                return self._session.session_index
            self._resource = resource
            self._context = context or AccessContext()
            return self._open()

    def stop(self) -> None:
        """Stop trackers, flush pending watch time and close the session."""
        with self._lock:
            self._close()

    def reopen(self) -> int | None:
        """
        Close the current session and open a fresh one for the same resource.

        Used when a resource is opened externally: the new open is a new
        access, never an extension of the previous session. A native video
        that was playing keeps playing in the new session from its last
        position, with a fresh baseline.
        """
        with self._lock:
            if self._resource is None:
                logger.debug("reopen() ignored: nothing was started")
                return None
            previous = self._native
            resume_at = None
            if previous is not None and previous.state == PlaybackState.PLAYING:
                resume_at = previous.last_position
            self._close()
            index = self._open()
            if resume_at is not None and self._native is not None:
                self._native.resume(resume_at)
            return index

    # --- Native player events ---

    def on_play(self, obs: PlaybackObservation) -> None:
        tracker = self._native
        if tracker is not None:
            tracker.on_play(obs)

    def on_pause(self, obs: PlaybackObservation) -> None:
        tracker = self._native
        if tracker is not None:
            tracker.on_pause(obs)

    def on_timeupdate(self, obs: PlaybackObservation) -> None:
        tracker = self._native
        if tracker is not None:
            tracker.on_timeupdate(obs)

    def on_seeked(self, obs: PlaybackObservation) -> None:
        tracker = self._native
        if tracker is not None:
            tracker.on_seeked(obs)

    def on_ended(self, obs: PlaybackObservation) -> None:
        tracker = self._native
        if tracker is not None:
            tracker.on_ended(obs)

    # --- Page events ---

    def on_visibility_change(self, visible: bool) -> None:
        tracker = self._external
        if tracker is not None:
            tracker.on_visibility_change(visible)

    def on_focus(self) -> None:
        tracker = self._external
        if tracker is not None:
            tracker.on_focus()

    def on_blur(self) -> None:
        tracker = self._external
        if tracker is not None:
            tracker.on_blur()

    # --- Internals (lock held) ---

    def _open(self) -> int | None:
        resource = self._resource
        assert resource is not None

        try:
            result = self._dispatcher.client.start_access(
                resource.id,
                self._context.grade,
                self._context.class_name,
            )
        except Exception:
            logger.warning("Could not open session for %s", resource.id, exc_info=True)
            return None

        self._session = ResourceSession(
            resource_id=resource.id,
            session_index=result.session_index,
            opened_at=self._clock.now_utc(),
            opened_monotonic=self._clock.monotonic(),
        )
        reporter = ProgressReporter(
            self._dispatcher,
            resource.id,
            result.session_index,
            self._config.sanity_ceiling_seconds,
        )

        kind = select_tracker_kind(resource)
        if kind == TrackerKind.NATIVE:
            self._native = NativePlaybackTracker(
                reporter,
                self._clock,
                self._config,
                duration_hint=resource.duration_hint,
            )
        elif kind == TrackerKind.EXTERNAL:
            self._external = ExternalWatchTracker(
                reporter,
                self._clock,
                self._timer,
                self._page,
                self._config,
            )
            self._external.start()

        if needs_heartbeat(resource):
            self._heartbeat = HeartbeatScheduler(
                self._dispatcher,
                self._timer,
                resource.id,
                result.session_index,
                self._config.heartbeat_interval_seconds,
            )
            self._heartbeat.start()

        logger.info(
            "Opened session %s#%d (%s tracker)",
            resource.id,
            result.session_index,
            kind.value,
        )
        return result.session_index

    def _close(self) -> None:
        session = self._session
        if session is None or not session.is_open:
            return

        if self._heartbeat is not None:
            self._heartbeat.stop()
            self._heartbeat = None

        try:
            if self._native is not None:
                self._native.stop()
            if self._external is not None:
                self._external.stop()
        except Exception:
            logger.exception("Final flush failed for %s#%d", session.resource_id, session.session_index)
        finally:
            self._native = None
            self._external = None

        elapsed = max(0.0, self._clock.monotonic() - session.opened_monotonic)
        session.closed_at = self._clock.now_utc()
        self._dispatcher.end_access(session.resource_id, session.session_index, round(elapsed, 3))
        logger.info(
            "Closed session %s#%d after %.1fs",
            session.resource_id,
            session.session_index,
            elapsed,
        )
