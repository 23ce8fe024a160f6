"""Configuration management for the price tracker.

Handles environment variables, an optional YAML settings file and default
values. Provides structured configuration sections for HTTP fetching, batch
scheduling and alert thresholds.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ScraperConfig(BaseSettings):
    """HTTP fetch parameters for product pages.

    Attributes:
        timeout: Per-request timeout in seconds (10-20).
        user_agent: Browser user agent sent with every request.
        accept: Accept header value.
        accept_language: Accept-Language header value.
    """

    model_config = SettingsConfigDict(populate_by_name=True)

    timeout: float = Field(default=15.0, validation_alias="SCRAPER_TIMEOUT")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, validation_alias="SCRAPER_USER_AGENT")
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    accept_language: str = Field(default="en-US,en;q=0.9", validation_alias="SCRAPER_ACCEPT_LANGUAGE")

    @field_validator("timeout")
    @classmethod
    def _timeout_in_range(cls, value: float) -> float:
        if not 10.0 <= value <= 20.0:
            raise ValueError("timeout must be between 10 and 20 seconds")
        return value

    @property
    def request_headers(self) -> dict[str, str]:
        """Browser-like headers; stores reject unidentified clients."""
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
        }


class SchedulerConfig(BaseSettings):
    """Batch fan-out limits.

    Attributes:
        max_concurrency: Maximum number of in-flight scrapes across all batches.
        batch_timeout: Seconds before unfinished scrapes of a batch are
            cancelled, None to wait indefinitely.
    """

    model_config = SettingsConfigDict(populate_by_name=True)

    max_concurrency: int = Field(default=5, ge=1, validation_alias="SCHEDULER_MAX_CONCURRENCY")
    batch_timeout: float | None = Field(default=600.0, validation_alias="SCHEDULER_BATCH_TIMEOUT")


class AlertConfig(BaseSettings):
    """Alert rule parameters.

    Attributes:
        drop_threshold_percent: Minimum drop, in percent, for a price-drop alert.
    """

    model_config = SettingsConfigDict(populate_by_name=True)

    drop_threshold_percent: float = Field(default=5.0, gt=0, validation_alias="ALERT_DROP_THRESHOLD")


class AppConfig(BaseSettings):
    """Process-level settings."""

    model_config = SettingsConfigDict(populate_by_name=True)

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


class Config:
    """Application configuration manager.

    Loads every section from the environment, then applies overrides from
    ``settings.yml`` in the configuration directory when the file exists.
    """

    def __init__(self, config_dir: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_dir: Path to configuration directory, defaults to pricewatch/config.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent / "config"

        self.config_dir = Path(config_dir)
        overrides = self._load_overrides()

        self.app = AppConfig(**overrides.get("app", {}))
        self.scraper = ScraperConfig(**overrides.get("scraper", {}))
        self.scheduler = SchedulerConfig(**overrides.get("scheduler", {}))
        self.alerts = AlertConfig(**overrides.get("alerts", {}))

    def _load_overrides(self) -> dict[str, Any]:
        """Read section overrides from settings.yml.

        Returns:
            Mapping of section name to field values, empty if no file.
        """
        settings_path = self.config_dir / "settings.yml"
        if not settings_path.exists():
            return {}

        with open(settings_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{settings_path} must contain a mapping")
        return data

    def as_dict(self) -> dict[str, Any]:
        """Plain-dict view used to feed the DI container configuration."""
        return {
            "app": self.app.model_dump(),
            "scraper": self.scraper.model_dump(),
            "scheduler": self.scheduler.model_dump(),
            "alerts": self.alerts.model_dump(),
        }


# Global configuration instance
config = Config()
