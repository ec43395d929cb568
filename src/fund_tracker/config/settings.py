"""Application settings and configuration."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".fund_tracker"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FUND_TRACKER_",
    )

    app_name: str = "Fund Tracker"

    # Data directory (all app data lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    log_level: str = "INFO"

    # NAV dates are published on the fund market's calendar
    market_timezone: str = "Asia/Shanghai"

    # Refresh pipeline
    refresh_concurrency_limit: int = Field(default=3, ge=1)
    refresh_max_attempts: int = Field(default=3, ge=1)
    refresh_backoff_step_seconds: float = Field(default=0.5, ge=0)

    # Fund data provider
    fetcher_backend: Literal["eastmoney", "stub"] = "eastmoney"
    fetch_timeout_seconds: float = 10.0

    # Memoized performance views
    view_cache_capacity: int = Field(default=20, ge=1)
    view_cache_evict_count: int = Field(default=10, ge=1)

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "holdings.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
