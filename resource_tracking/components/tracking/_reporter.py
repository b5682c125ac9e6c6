"""
ProgressReporter - validation and forwarding of watched-time deltas.

Accepts raw (delta, position, duration, completed) observations from either
tracker, drops implausible ones and dispatches the rest exactly once.
"""

from __future__ import annotations

import logging

from ._dispatch import AnalyticsDispatcher
from .component import validate_progress_delta
from .models import ProgressDelta, ReportOutcome

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Turns raw observations for one session into ProgressDelta sends."""

    def __init__(
        self,
        dispatcher: AnalyticsDispatcher,
        resource_id: str,
        session_index: int,
        ceiling_seconds: float,
    ) -> None:
        self._dispatcher = dispatcher
        self._resource_id = resource_id
        self._session_index = session_index
        self._ceiling = ceiling_seconds

    @property
    def session_index(self) -> int:
        return self._session_index

    def report(
        self,
        delta_seconds: float,
        position_seconds: float,
        duration_seconds: float,
        completed: bool = False,
        max_delta_seconds: float | None = None,
    ) -> ReportOutcome:
        """
        Validate and send one observation.

        Args:
            delta_seconds: Watched seconds since the previous report
            position_seconds: Last playback position (0 when unknown)
            duration_seconds: Total duration (0 when unknown)
            completed: Whether playback reached the end
            max_delta_seconds: Ceiling override for this report

        Returns:
            ReportOutcome with the sent delta, or the reasons it was dropped
        """
        ceiling = self._ceiling if max_delta_seconds is None else max_delta_seconds
        errors = validate_progress_delta(delta_seconds, ceiling)
        if errors:
            logger.debug(
                "Dropped delta %.3fs for %s#%d: %s",
                delta_seconds,
                self._resource_id,
                self._session_index,
                errors[0].code,
            )
            return ReportOutcome(delta=None, errors=errors)

        delta = ProgressDelta(
            resource_id=self._resource_id,
            session_index=self._session_index,
            played_delta_seconds=delta_seconds,
            last_position_seconds=max(0.0, position_seconds),
            total_duration_seconds=max(0.0, duration_seconds),
            completed=completed,
        )
        self._dispatcher.video_progress(delta)
        return ReportOutcome(delta=delta)
