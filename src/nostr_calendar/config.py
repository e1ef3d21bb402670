"""Configuration management for the Nostr calendar client."""

from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.exceptions import ConfigurationError
from .utils.timezones import is_valid_timezone

load_dotenv()


class AppConfig(BaseSettings):
    """Application configuration."""

    # Logging
    log_level: str = Field(default="INFO", validation_alias="NOSTR_CALENDAR_LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="NOSTR_CALENDAR_LOG_FILE")

    # Upper bound for a single relay query, in seconds
    query_timeout: float = Field(default=5.0, validation_alias="NOSTR_CALENDAR_QUERY_TIMEOUT")

    # Observer timezone: decides "today" and where date-based events start
    timezone: str = Field(default="UTC", validation_alias="NOSTR_CALENDAR_TIMEZONE")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )

    @field_validator("query_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("query_timeout must be positive")
        return value

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if not is_valid_timezone(value):
            raise ValueError(f"Unknown timezone: {value}")
        return value


class QueryConfig:
    """Default result sizes for calendar queries, loaded from YAML."""

    DEFAULTS: dict[str, int] = {
        "recent_limit": 20,
        "upcoming_limit": 20,
        "range_limit": 100,
        "search_limit": 50,
        "search_min_scan": 100,
    }

    def __init__(self, config_path: Path = Path("calendar_config.yaml")):
        self.recent_limit: int = self.DEFAULTS["recent_limit"]
        self.upcoming_limit: int = self.DEFAULTS["upcoming_limit"]
        self.range_limit: int = self.DEFAULTS["range_limit"]
        self.search_limit: int = self.DEFAULTS["search_limit"]
        self.search_min_scan: int = self.DEFAULTS["search_min_scan"]

        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            self.update(data.get("queries", {}))

    def update(self, values: dict[str, Any]) -> None:
        """
        Override limits.

        Args:
            values: Mapping of limit name to positive integer

        Raises:
            ConfigurationError: If a name is unknown or a value is not a positive integer
        """
        for name, value in values.items():
            if name not in self.DEFAULTS:
                raise ConfigurationError(f"Unknown query setting: {name}")
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
            setattr(self, name, value)


# Global config instances
config = AppConfig()
query_config = QueryConfig()
