"""
Tracking component - watch-time and access-session accounting.

Measures how long a user actually watches a video or consults a document and
reports it as session and watch-time analytics.

Invariants:
- Reported deltas are strictly positive and never exceed the report ceiling
- Values above the ceiling are dropped, not clamped
- Consecutive deltas from one tracker never describe overlapping time
- A session is closed exactly once
"""

from __future__ import annotations

import math

from .models import (
    DEFAULT_CONFIG,
    ResourceDescriptor,
    ResourceType,
    TrackerKind,
    TrackingValidationError,
)

# --- Pure Functions (Functional Core) ---


def validate_progress_delta(
    delta_seconds: float,
    max_delta_seconds: float = DEFAULT_CONFIG.sanity_ceiling_seconds,
) -> list[TrackingValidationError]:
    """
    Validate a raw watched-time delta.

    Args:
        delta_seconds: Seconds of watching since the previous report
        max_delta_seconds: Largest plausible value for one report

    Returns:
        List of validation errors (empty if the delta may be sent)
    """
    errors: list[TrackingValidationError] = []

    if math.isnan(delta_seconds):
        errors.append(
            TrackingValidationError(
                code="INVALID_DELTA",
                message="Delta is not a number",
                field_name="played_delta_seconds",
            )
        )
    elif delta_seconds <= 0:
        errors.append(
            TrackingValidationError(
                code="NON_POSITIVE_DELTA",
                message="Delta must be greater than zero",
                field_name="played_delta_seconds",
            )
        )
    elif delta_seconds > max_delta_seconds:
        errors.append(
            TrackingValidationError(
                code="DELTA_ABOVE_CEILING",
                message=f"Delta exceeds ceiling ({max_delta_seconds:g}s)",
                field_name="played_delta_seconds",
            )
        )

    return errors


def compute_played_delta(wall_elapsed_seconds: float, position_delta_seconds: float) -> float:
    """
    Watched time for one native playback window.

    The smaller of the two readings wins: a position that moved without
    matching wall time is a seek, and wall time without position movement is
    a stall.
    """
    return min(wall_elapsed_seconds, position_delta_seconds)


def is_seek(position_delta_seconds: float, ceiling_seconds: float) -> bool:
    """A backwards move, or a forward jump beyond the ceiling, is a seek."""
    return position_delta_seconds < 0 or position_delta_seconds > ceiling_seconds


def is_completed(
    position_seconds: float,
    duration_seconds: float,
    tolerance_seconds: float = DEFAULT_CONFIG.completion_tolerance_seconds,
) -> bool:
    """Playback counts as complete within tolerance of the end."""
    if duration_seconds <= 0:
        return False
    return position_seconds >= duration_seconds - tolerance_seconds


def effective_duration(observed: float | None, hint: float | None) -> float:
    """Player duration when usable, else the descriptor's hint, else 0."""
    if observed is not None and math.isfinite(observed) and observed > 0:
        return observed
    if hint is not None and hint > 0:
        return hint
    return 0.0


def select_tracker_kind(resource: ResourceDescriptor) -> TrackerKind:
    """
    Choose the continuous tracker for a resource.

    Documents are counted per access and get no continuous tracker.
    """
    if resource.type != ResourceType.VIDEO:
        return TrackerKind.NONE
    if resource.is_external:
        return TrackerKind.EXTERNAL
    return TrackerKind.NATIVE


def needs_heartbeat(resource: ResourceDescriptor) -> bool:
    return resource.type == ResourceType.VIDEO
