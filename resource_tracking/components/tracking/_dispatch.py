"""
AnalyticsDispatcher - non-blocking delivery of analytics calls.

Wraps an AnalyticsClientPort so heartbeat, progress and end-of-session calls
return immediately. Calls run on a single background worker in submission
order; any failure is logged and discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any

from .models import ProgressDelta
from .ports import AnalyticsClientPort

logger = logging.getLogger(__name__)


class AnalyticsDispatcher:
    """Fire-and-forget front for the analytics client."""

    def __init__(
        self,
        client: AnalyticsClientPort,
        executor: Executor | None = None,
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            client: Client that performs the actual calls.
            executor: Where calls run. Defaults to a single worker thread so
                      deltas reach the backend in the order they were made.
        """
        self._client = client
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="analytics"
        )

    @property
    def client(self) -> AnalyticsClientPort:
        return self._client

    def heartbeat(self, resource_id: str, session_index: int, interval_seconds: float) -> None:
        self._submit("heartbeat", self._client.heartbeat, resource_id, session_index, interval_seconds)

    def video_progress(self, delta: ProgressDelta) -> None:
        self._submit("video_progress", self._client.video_progress, delta)

    def end_access(
        self,
        resource_id: str,
        session_index: int,
        total_duration_seconds: float | None = None,
    ) -> None:
        self._submit(
            "end_access",
            self._client.end_access,
            resource_id,
            session_index,
            total_duration_seconds,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop the worker once queued calls are done (owned executor only)."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def _submit(self, name: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            self._executor.submit(self._call, name, fn, *args)
        except RuntimeError:
            # Executor already shut down
            logger.warning("Analytics %s dropped: dispatcher is shut down", name)

    @staticmethod
    def _call(name: str, fn: Callable[..., Any], *args: Any) -> None:
        try:
            fn(*args)
        except Exception:
            logger.warning("Analytics %s failed; discarding", name, exc_info=True)
