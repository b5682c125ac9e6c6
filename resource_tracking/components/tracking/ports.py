"""
Tracking component port definitions.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Protocol

from .models import ProgressDelta, StartAccessResult


class AnalyticsClientError(Exception):
    """Raised by analytics client adapters when a call fails."""


class AnalyticsClientPort(Protocol):
    """Backend analytics store interface."""

    def start_access(
        self,
        resource_id: str,
        grade: str | None = None,
        class_name: str | None = None,
    ) -> StartAccessResult:
        """
        Open a session for the current user.

        Increments the backend access count for documents.
        """
        ...

    def heartbeat(self, resource_id: str, session_index: int, interval_seconds: float) -> None:
        """Keep a session alive server-side."""
        ...

    def video_progress(self, delta: ProgressDelta) -> None:
        """Record a watched-time delta against a session."""
        ...

    def end_access(
        self,
        resource_id: str,
        session_index: int,
        total_duration_seconds: float | None = None,
    ) -> None:
        """Close a session server-side."""
        ...


class ClockPort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...

    def monotonic(self) -> float:
        """Seconds from an arbitrary origin that never goes backwards."""
        ...


class PageStatePort(Protocol):
    """Visibility and focus of the page hosting the viewer."""

    def is_visible(self) -> bool:
        ...

    def has_focus(self) -> bool:
        ...


class CancellablePort(Protocol):
    """Handle to a running periodic task."""

    def cancel(self) -> None:
        """Stop the task. No tick may begin after this returns."""
        ...


class TimerPort(Protocol):
    """Factory for cancellable periodic tasks."""

    def every(self, interval_seconds: float, callback: Callable[[], None]) -> CancellablePort:
        """Run callback every interval_seconds until cancelled."""
        ...
