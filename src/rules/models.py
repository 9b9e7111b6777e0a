from pydantic import BaseModel, Field, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class IngestRules(BaseModel):
    allowed_event_types: list[str] = Field(default_factory=lambda: ["pageview", "custom"])
    required_fields: list[str] = Field(
        default_factory=lambda: ["website_id", "event_type", "event_name"]
    )
    max_path_length: int = 2048


class DeviceBreakpoints(BaseModel):
    mobile_max_width: int = 768
    tablet_max_width: int = 1024

    @model_validator(mode="after")
    def check_order(self) -> "DeviceBreakpoints":
        if self.mobile_max_width >= self.tablet_max_width:
            raise ValueError("mobile_max_width must be below tablet_max_width")
        return self


class AggregationRules(BaseModel):
    # None means the server's local zone
    timezone: str | None = None
    top_n: int = Field(10, ge=1)
    realtime_window_seconds: int = Field(300, ge=1)
    realtime_new_window_seconds: int = Field(60, ge=1)
    realtime_sample_size: int = Field(50, ge=1)
    realtime_recent_events: int = Field(10, ge=1)
    devices: DeviceBreakpoints = Field(default_factory=DeviceBreakpoints)


class ExportRules(BaseModel):
    max_events: int = Field(10000, ge=1)
    formats: list[str] = Field(default_factory=lambda: ["csv", "json"])


class CorsRules(BaseModel):
    dashboard_origins: list[str]


class Rules(BaseModel):
    project: ProjectRules
    ingest: IngestRules = Field(default_factory=IngestRules)
    aggregation: AggregationRules = Field(default_factory=AggregationRules)
    export: ExportRules = Field(default_factory=ExportRules)
    cors: CorsRules
