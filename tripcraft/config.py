"""Typed settings configuration - single source of truth."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (unset -> in-memory store)
    database_url: str | None = None

    # Logging
    log_level: str = "INFO"

    # Layover policy (minutes)
    tight_connection_min: int = 60
    long_connection_min: int = 240

    # Red-eye window, local departure hour: start <= h or h < end
    red_eye_start_hour: int = 20
    red_eye_end_hour: int = 5

    # Budget warning threshold (percent of budget)
    budget_warning_pct: float = 80.0

    # Share links
    share_token_bytes: int = 24

    # Flight status collaborator
    flight_status_base_url: str = "https://app.goflightlabs.com"
    flight_status_api_key: str = ""
    flight_status_timeout_sec: float = 4.0
    # Departure delay (minutes) reported as "delayed"
    flight_delay_threshold_min: int = 20


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
