"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    config_path: str | None = Field(default=None, validation_alias="BURROW_CONFIG")
    run_timeout_seconds: float = Field(
        default=120.0, gt=0, validation_alias="BURROW_RUN_TIMEOUT_SECONDS"
    )
    log_json: bool = Field(default=False, validation_alias="BURROW_LOG_JSON")


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
