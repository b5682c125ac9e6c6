"""
HTTP Analytics Client Adapter.

Implements AnalyticsClientPort against the backend's analytics endpoints.

Key behaviors:
- JSON bodies use the backend's camelCase field names; None fields are omitted
- Bearer token auth when a token is configured
- Any transport error, non-2xx status or malformed response raises
  AnalyticsClientError; callers decide whether to swallow it
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from resource_tracking.components.tracking.models import ProgressDelta, StartAccessResult
from resource_tracking.components.tracking.ports import AnalyticsClientError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000/api"

START_PATH = "/analytics/access/start"
HEARTBEAT_PATH = "/analytics/access/heartbeat"
END_PATH = "/analytics/access/end"
PROGRESS_PATH = "/analytics/video/progress"


class HttpAnalyticsClient:
    """Synchronous httpx client for the analytics API."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        token: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: API root, e.g. http://localhost:8000/api
            token: Bearer token for the current user
            timeout_seconds: Per-request timeout
            transport: Optional transport override (tests)
        """
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._http = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    def start_access(
        self,
        resource_id: str,
        grade: str | None = None,
        class_name: str | None = None,
    ) -> StartAccessResult:
        body = self._post(
            START_PATH,
            {"resourceId": resource_id, "grade": grade, "className": class_name},
        )
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict) or "sessionIndex" not in data:
            raise AnalyticsClientError("start_access response has no sessionIndex")
        try:
            session_index = int(data["sessionIndex"])
        except (TypeError, ValueError) as e:
            raise AnalyticsClientError(f"Invalid sessionIndex: {data['sessionIndex']!r}") from e

        log_id = data.get("logId")
        return StartAccessResult(
            session_index=session_index,
            log_id=str(log_id) if log_id is not None else None,
        )

    def heartbeat(self, resource_id: str, session_index: int, interval_seconds: float) -> None:
        self._post(
            HEARTBEAT_PATH,
            {
                "resourceId": resource_id,
                "sessionIndex": session_index,
                "deltaSeconds": interval_seconds,
            },
        )

    def video_progress(self, delta: ProgressDelta) -> None:
        self._post(
            PROGRESS_PATH,
            {
                "resourceId": delta.resource_id,
                "sessionIndex": delta.session_index,
                "playedDeltaSeconds": delta.played_delta_seconds,
                "lastPositionSeconds": delta.last_position_seconds,
                "totalDurationSeconds": delta.total_duration_seconds,
                "completed": delta.completed,
            },
        )

    def end_access(
        self,
        resource_id: str,
        session_index: int,
        total_duration_seconds: float | None = None,
    ) -> None:
        self._post(
            END_PATH,
            {
                "resourceId": resource_id,
                "sessionIndex": session_index,
                "totalDurationSeconds": total_duration_seconds,
            },
        )

    def close(self) -> None:
        self._http.close()

    def _post(self, path: str, payload: dict[str, Any]) -> Any:
        body = {k: v for k, v in payload.items() if v is not None}
        try:
            response = self._http.post(path, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise AnalyticsClientError(f"POST {path} failed: {e}") from e

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise AnalyticsClientError(f"POST {path} returned invalid JSON") from e
