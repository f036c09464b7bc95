from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVEL_NAMES = ("error", "warn", "info", "debug")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PERMIT_SYNC_", env_file=".env", extra="ignore")

    app_name: str = "PermitSync"
    environment: str = "development"
    log_level: str = "info"

    # durable fallback when any pipeline rejects a record
    database_url: str = "sqlite:///./permit_sync.db"

    # managed pipeline HTTP endpoints, one per logical channel
    ingestion_pipeline_url: str = "http://localhost:8787/pipelines/sf-permits-ingestion"
    events_pipeline_url: str = "http://localhost:8787/pipelines/sf-permit-events"
    analytics_pipeline_url: str = "http://localhost:8787/pipelines/sf-inspector-analytics"

    pipeline_auth_token: str | None = None
    pipeline_timeout_seconds: float = 30.0

    # metadata envelope
    source_tag: str = "permit-sync-service"
    interface_version: str = "1.0.0"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, v: str) -> str:
        level = (v or "").strip().lower()
        if level not in LOG_LEVEL_NAMES:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVEL_NAMES)}")
        return level

    def pipeline_urls(self) -> dict[str, str]:
        return {
            "ingestion": self.ingestion_pipeline_url,
            "events": self.events_pipeline_url,
            "analytics": self.analytics_pipeline_url,
        }
