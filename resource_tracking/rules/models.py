from pydantic import BaseModel, Field, model_validator

from resource_tracking.components.tracking.models import TrackingConfig


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class HeartbeatRules(BaseModel):
    interval_seconds: float = Field(default=10.0, gt=0)

class NativePlaybackRules(BaseModel):
    report_interval_seconds: float = Field(default=10.0, gt=0)
    position_threshold_seconds: float = Field(default=5.0, gt=0)
    completion_tolerance_seconds: float = Field(default=1.0, ge=0)

class ExternalWatchRules(BaseModel):
    flush_interval_seconds: float = Field(default=30.0, gt=0)
    max_delta_seconds: float = Field(default=35.0, gt=0)

    @model_validator(mode="after")
    def ceiling_covers_window(self) -> "ExternalWatchRules":
        # A full flush window of watching must be reportable
        if self.max_delta_seconds < self.flush_interval_seconds:
            raise ValueError("max_delta_seconds must be >= flush_interval_seconds")
        return self

class AnalyticsApiRules(BaseModel):
    base_url: str = "http://localhost:8000/api"
    timeout_seconds: float = Field(default=10.0, gt=0)

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    sanity_ceiling_seconds: float = Field(default=15.0, gt=0)
    heartbeat: HeartbeatRules = Field(default_factory=HeartbeatRules)
    native: NativePlaybackRules = Field(default_factory=NativePlaybackRules)
    external: ExternalWatchRules = Field(default_factory=ExternalWatchRules)
    analytics_api: AnalyticsApiRules = Field(default_factory=AnalyticsApiRules)
    ops: OpsRules = Field(default_factory=OpsRules)

    def to_tracking_config(self) -> TrackingConfig:
        return TrackingConfig(
            heartbeat_interval_seconds=self.heartbeat.interval_seconds,
            report_interval_seconds=self.native.report_interval_seconds,
            position_threshold_seconds=self.native.position_threshold_seconds,
            completion_tolerance_seconds=self.native.completion_tolerance_seconds,
            sanity_ceiling_seconds=self.sanity_ceiling_seconds,
            external_flush_interval_seconds=self.external.flush_interval_seconds,
            external_max_delta_seconds=self.external.max_delta_seconds,
        )
