"""
Tracking component models.

Frozen value objects describe what is being tracked and what goes over the
wire. The two mutable records (ResourceSession, WatchAccumulator) each have a
single writer: the controller and the external tracker respectively.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ResourceType(str, Enum):
    """Kinds of resource a view can display."""

    VIDEO = "video"
    DOCUMENT = "document"


class PlaybackState(str, Enum):
    """Native playback state machine states."""

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"


class TrackerKind(str, Enum):
    """Which continuous tracker a resource gets."""

    NATIVE = "native"
    EXTERNAL = "external"
    NONE = "none"


# --- Configuration ---


@dataclass(frozen=True)
class TrackingConfig:
    """Tunable thresholds for the tracking engine."""

    heartbeat_interval_seconds: float = 10.0

    # Native playback
    report_interval_seconds: float = 10.0
    position_threshold_seconds: float = 5.0
    completion_tolerance_seconds: float = 1.0
    sanity_ceiling_seconds: float = 15.0

    # External embeds
    external_flush_interval_seconds: float = 30.0
    external_max_delta_seconds: float = 35.0


DEFAULT_CONFIG = TrackingConfig()


# --- Inputs ---


@dataclass(frozen=True)
class ResourceDescriptor:
    """Read-only description of the resource being viewed."""

    id: str
    type: ResourceType
    is_external: bool = False
    duration_hint: float | None = None
    url: str | None = None

    @property
    def is_video(self) -> bool:
        return self.type == ResourceType.VIDEO


@dataclass(frozen=True)
class AccessContext:
    """Optional learner context sent when a session opens."""

    grade: str | None = None
    class_name: str | None = None


@dataclass(frozen=True)
class PlaybackObservation:
    """One sample of a native player's state."""

    current_position_seconds: float
    duration_seconds: float | None = None
    is_playing: bool = False


# --- Session state ---


@dataclass(frozen=True)
class StartAccessResult:
    """Backend response to opening a session."""

    session_index: int
    log_id: str | None = None


@dataclass
class ResourceSession:
    """One open viewing instance of one resource."""

    resource_id: str
    session_index: int
    opened_at: datetime
    opened_monotonic: float
    closed_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.closed_at is None


@dataclass
class WatchAccumulator:
    """Visible-and-focused time collected by the external tracker."""

    accumulated_seconds: float = 0.0
    focus_started_at: float | None = None


# --- Wire model ---


@dataclass(frozen=True)
class ProgressDelta:
    """Watched-time increment sent to the analytics backend."""

    resource_id: str
    session_index: int
    played_delta_seconds: float
    last_position_seconds: float
    total_duration_seconds: float
    completed: bool = False


# --- Validation ---


@dataclass(frozen=True)
class TrackingValidationError:
    """Reason a raw observation was not reported."""

    code: str
    message: str
    field_name: str | None = None


@dataclass(frozen=True)
class ReportOutcome:
    """Result of handing one raw observation to the reporter."""

    delta: ProgressDelta | None
    errors: list[TrackingValidationError] = field(default_factory=list)

    @property
    def sent(self) -> bool:
        return self.delta is not None
