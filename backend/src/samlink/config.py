"""Configuration management for samlink.

Uses pydantic-settings to load configuration from environment variables.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_env_file() -> Path | None:
    """Search for .env file in common locations."""
    # Check current working directory first
    cwd = Path.cwd()
    if (cwd / ".env").exists():
        return cwd / ".env"

    # Check parent directories (up to 5 levels) for project root .env
    check_dir = cwd
    for _ in range(5):
        if (check_dir / ".env").exists():
            return check_dir / ".env"
        parent = check_dir.parent
        if parent == check_dir:
            break
        check_dir = parent

    return None


_env_file = _find_env_file()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_env_file) if _env_file else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================
    # Environment
    # =========================
    environment: Literal["development", "staging", "production"] = "development"

    # =========================
    # API Settings
    # =========================
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False

    # =========================
    # SAM.gov Entity API
    # =========================
    sam_api_key: str = Field(default="", repr=False)
    sam_api_base: str = "https://api.sam.gov/entity-information/v3/entities"
    http_timeout_seconds: float = 30.0

    # =========================
    # HubSpot (read-only company lookup)
    # =========================
    hubspot_access_token: str = Field(default="", repr=False)
    hubspot_api_base: str = "https://api.hubapi.com"

    # =========================
    # Resolution
    # =========================
    # 0.55 was lowered from 0.85: short brand names score poorly against long
    # incorporated legal names. Expect more false positives at this level.
    auto_link_threshold: float = 0.55
    relevance_floor: float = 0.5
    location_bonus: float = 0.1
    max_review_candidates: int = 5

    # =========================
    # Retrieval / caching
    # =========================
    cache_ttl_seconds: float = 300.0
    dedup_window_seconds: float = 30.0
    strategy_delay_seconds: float = 0.2
    rate_limit_retry_delay_seconds: float = 2.0

    # =========================
    # Logging
    # =========================
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("auto_link_threshold", "relevance_floor", "location_bonus")
    @classmethod
    def _check_unit_interval(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("must be between 0 and 1")
        return value

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
