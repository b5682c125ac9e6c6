from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from resource_tracking.adapters.analytics_http import HttpAnalyticsClient
from resource_tracking.adapters.clock import SystemClock
from resource_tracking.adapters.timers import ThreadTimer
from resource_tracking.app_shell.config import resolve_api_settings, validate_ops_rules
from resource_tracking.components.tracking import (
    AnalyticsClientPort,
    AnalyticsDispatcher,
    ClockPort,
    PageStatePort,
    ResourceDescriptor,
    SessionController,
    TimerPort,
    TrackingConfig,
    parse_resource,
)
from resource_tracking.rules.models import Rules


@dataclass
class TrackingContext:
    """Shared services for every resource view in the process."""

    rules: Rules
    config: TrackingConfig
    client: AnalyticsClientPort
    dispatcher: AnalyticsDispatcher
    clock: ClockPort
    timer: TimerPort
    api_base_url: str

    @classmethod
    def create(
        cls,
        rules: Rules,
        environ: Mapping[str, str] | None = None,
        client: AnalyticsClientPort | None = None,
    ) -> TrackingContext:
        validate_ops_rules(rules, environ)

        settings = resolve_api_settings(rules, environ)
        if client is None:
            client = HttpAnalyticsClient(
                base_url=settings.base_url,
                token=settings.token,
                timeout_seconds=settings.timeout_seconds,
            )

        return cls(
            rules=rules,
            config=rules.to_tracking_config(),
            client=client,
            dispatcher=AnalyticsDispatcher(client),
            clock=SystemClock(),
            timer=ThreadTimer(),
            api_base_url=settings.base_url,
        )

    def new_controller(self, page: PageStatePort | None = None) -> SessionController:
        """One controller per mounted resource view."""
        return SessionController(
            self.dispatcher,
            self.clock,
            self.timer,
            page=page,
            config=self.config,
        )

    def parse_resource(self, payload: Mapping[str, Any]) -> ResourceDescriptor:
        """Descriptor for a backend resource document, file URLs made absolute."""
        return parse_resource(payload, self.api_base_url)

    def close(self) -> None:
        """Drain queued analytics calls and release the HTTP client."""
        self.dispatcher.shutdown(wait=True)
        close = getattr(self.client, "close", None)
        if callable(close):
            close()
