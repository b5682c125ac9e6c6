"""
Tracking component - resource engagement tracking.

Session lifecycle, native playback and external-embed watch time, heartbeats.
"""

from ._controller import SessionController
from ._dispatch import AnalyticsDispatcher
from ._external import ExternalWatchTracker
from ._heartbeat import HeartbeatScheduler
from ._native import NativePlaybackTracker
from ._reporter import ProgressReporter
from .component import (
    compute_played_delta,
    effective_duration,
    is_completed,
    is_seek,
    needs_heartbeat,
    select_tracker_kind,
    validate_progress_delta,
)
from .models import (
    DEFAULT_CONFIG,
    AccessContext,
    PlaybackObservation,
    PlaybackState,
    ProgressDelta,
    ReportOutcome,
    ResourceDescriptor,
    ResourceSession,
    ResourceType,
    StartAccessResult,
    TrackerKind,
    TrackingConfig,
    TrackingValidationError,
    WatchAccumulator,
)
from .ports import (
    AnalyticsClientError,
    AnalyticsClientPort,
    CancellablePort,
    ClockPort,
    PageStatePort,
    TimerPort,
)
from .resources import parse_resource, resolve_embed_url, resolve_file_url

__all__ = [
    # Services
    "SessionController",
    "AnalyticsDispatcher",
    "ProgressReporter",
    "NativePlaybackTracker",
    "ExternalWatchTracker",
    "HeartbeatScheduler",
    # Pure functions
    "compute_played_delta",
    "effective_duration",
    "is_completed",
    "is_seek",
    "needs_heartbeat",
    "select_tracker_kind",
    "validate_progress_delta",
    "parse_resource",
    "resolve_embed_url",
    "resolve_file_url",
    # Models
    "DEFAULT_CONFIG",
    "AccessContext",
    "PlaybackObservation",
    "PlaybackState",
    "ProgressDelta",
    "ReportOutcome",
    "ResourceDescriptor",
    "ResourceSession",
    "ResourceType",
    "StartAccessResult",
    "TrackerKind",
    "TrackingConfig",
    "TrackingValidationError",
    "WatchAccumulator",
    # Ports
    "AnalyticsClientError",
    "AnalyticsClientPort",
    "CancellablePort",
    "ClockPort",
    "PageStatePort",
    "TimerPort",
]
