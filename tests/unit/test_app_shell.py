"""
Tests for app shell configuration and service wiring.
"""

from __future__ import annotations

import pytest

from resource_tracking.adapters.analytics_http import HttpAnalyticsClient
from resource_tracking.adapters.clock import SystemClock
from resource_tracking.adapters.timers import ThreadTimer
from resource_tracking.app_shell.config import resolve_api_settings, validate_ops_rules
from resource_tracking.app_shell.context import TrackingContext
from resource_tracking.components.tracking import SessionController
from resource_tracking.components.tracking.tests.fakes import FakeAnalyticsClient, FakePage
from resource_tracking.rules.models import OpsRules, Rules


class TestApiSettings:
    def test_rules_values_by_default(self, rules: Rules) -> None:
        settings = resolve_api_settings(rules, environ={})

        assert settings.base_url == "http://localhost:8000/api"
        assert settings.token is None
        assert settings.timeout_seconds == 10.0

    def test_environment_overrides(self, rules: Rules) -> None:
        settings = resolve_api_settings(
            rules,
            environ={"ANALYTICS_API_URL": "https://lms.example.org/api", "ANALYTICS_API_TOKEN": "t0k"},
        )

        assert settings.base_url == "https://lms.example.org/api"
        assert settings.token == "t0k"


class TestOpsValidation:
    def test_passes_when_env_present(self, rules: Rules) -> None:
        strict = rules.model_copy(update={"ops": OpsRules(required_env=["ANALYTICS_API_TOKEN"])})
        validate_ops_rules(strict, environ={"ANALYTICS_API_TOKEN": "x"})

    def test_exits_when_env_missing(self, rules: Rules) -> None:
        strict = rules.model_copy(update={"ops": OpsRules(required_env=["ANALYTICS_API_TOKEN"])})

        with pytest.raises(SystemExit):
            validate_ops_rules(strict, environ={})


class TestTrackingContext:
    def test_create_with_injected_client(self, rules: Rules) -> None:
        client = FakeAnalyticsClient()
        ctx = TrackingContext.create(rules, environ={}, client=client)
        try:
            assert ctx.client is client
            assert ctx.dispatcher.client is client
            assert isinstance(ctx.clock, SystemClock)
            assert isinstance(ctx.timer, ThreadTimer)
            assert ctx.config == rules.to_tracking_config()

            controller = ctx.new_controller(page=FakePage())
            assert isinstance(controller, SessionController)
        finally:
            ctx.close()

    def test_create_builds_http_client(self, rules: Rules) -> None:
        ctx = TrackingContext.create(rules, environ={"ANALYTICS_API_URL": "http://analytics.local/api"})
        try:
            assert isinstance(ctx.client, HttpAnalyticsClient)
        finally:
            ctx.close()

    def test_parse_resource_uses_configured_api_host(self, rules: Rules) -> None:
        ctx = TrackingContext.create(
            rules,
            environ={"ANALYTICS_API_URL": "https://lms.example.org/api"},
            client=FakeAnalyticsClient(),
        )
        try:
            descriptor = ctx.parse_resource(
                {"_id": "v1", "type": "video", "content": {"url": "/uploads/v1.mp4"}}
            )
            assert descriptor.url == "https://lms.example.org/uploads/v1.mp4"
        finally:
            ctx.close()
