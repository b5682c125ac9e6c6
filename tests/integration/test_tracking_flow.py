"""
End-to-end tracking flow: real timers, real dispatcher, httpx client against
a mock transport.
"""

from __future__ import annotations

import json
import threading
import time
from typing import Any

import httpx
import pytest

from resource_tracking.adapters.analytics_http import HttpAnalyticsClient
from resource_tracking.app_shell.context import TrackingContext
from resource_tracking.components.tracking import (
    PlaybackObservation,
    ResourceDescriptor,
    ResourceType,
)
from resource_tracking.rules.models import (
    ExternalWatchRules,
    HeartbeatRules,
    Rules,
)


class AnalyticsBackend:
    """Minimal stand-in for the analytics API."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._next_index = 1
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        name = request.url.path.removeprefix("/api/analytics/")
        with self._lock:
            self.calls.append((name, body))
            if name == "access/start":
                index = self._next_index
                self._next_index += 1
                return httpx.Response(200, json={"data": {"sessionIndex": index, "logId": "l"}})
        return httpx.Response(200, json={"success": True})

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture
def backend() -> AnalyticsBackend:
    return AnalyticsBackend()


@pytest.fixture
def fast_rules(rules: Rules) -> Rules:
    return rules.model_copy(
        update={
            "heartbeat": HeartbeatRules(interval_seconds=0.02),
            "external": ExternalWatchRules(flush_interval_seconds=0.05, max_delta_seconds=1.0),
        }
    )


def make_context(rules: Rules, backend: AnalyticsBackend) -> TrackingContext:
    client = HttpAnalyticsClient(
        base_url="http://testserver/api",
        transport=httpx.MockTransport(backend),
    )
    return TrackingContext.create(rules, environ={}, client=client)


class TestTrackingFlow:
    def test_external_video_session(self, fast_rules: Rules, backend: AnalyticsBackend) -> None:
        ctx = make_context(fast_rules, backend)
        controller = ctx.new_controller()
        video = ResourceDescriptor(id="yt-1", type=ResourceType.VIDEO, is_external=True)

        started = time.monotonic()
        assert controller.start(video) == 1
        time.sleep(0.25)
        controller.stop()
        elapsed = time.monotonic() - started
        ctx.close()

        names = backend.names()
        assert names[0] == "access/start"
        assert names[-1] == "access/end"
        assert names.count("access/end") == 1
        assert names.count("access/heartbeat") >= 2
        assert "video/progress" in names

        played = [b["playedDeltaSeconds"] for n, b in backend.calls if n == "video/progress"]
        assert all(p > 0 for p in played)
        assert sum(played) <= elapsed

    def test_native_video_session(self, fast_rules: Rules, backend: AnalyticsBackend) -> None:
        ctx = make_context(fast_rules, backend)
        controller = ctx.new_controller()
        video = ResourceDescriptor(id="mp4-1", type=ResourceType.VIDEO, duration_hint=90.0)

        controller.start(video)
        controller.on_play(PlaybackObservation(0.0, None, True))
        time.sleep(0.1)
        controller.on_pause(PlaybackObservation(0.1, None, False))
        controller.stop()
        ctx.close()

        progress = [b for n, b in backend.calls if n == "video/progress"]
        assert len(progress) == 1
        assert 0 < progress[0]["playedDeltaSeconds"] <= 0.1
        assert progress[0]["totalDurationSeconds"] == 90.0
        assert backend.names()[-1] == "access/end"

    def test_document_reopen(self, rules: Rules, backend: AnalyticsBackend) -> None:
        ctx = make_context(rules, backend)
        controller = ctx.new_controller()
        doc = ResourceDescriptor(id="pdf-1", type=ResourceType.DOCUMENT)

        controller.start(doc)
        controller.reopen()
        controller.stop()
        ctx.close()

        assert backend.names() == [
            "access/start",
            "access/end",
            "access/start",
            "access/end",
        ]
        assert [b["sessionIndex"] for n, b in backend.calls if n == "access/end"] == [1, 2]
