"""Typed settings loader for the weather CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "weather-cli" / "config.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    config_file: Path = Field(default=DEFAULT_CONFIG_FILE, alias="WEATHER_CONFIG_FILE")
    http_timeout_seconds: float = Field(default=10.0, alias="WEATHER_HTTP_TIMEOUT_SECONDS")
    user_agent: str = Field(default="weather-cli/0.1", alias="WEATHER_USER_AGENT")

    openweather_base_url: str = Field(
        default="https://api.openweathermap.org",
        alias="OPENWEATHER_BASE_URL",
    )
    weatherapi_base_url: str = Field(
        default="https://api.weatherapi.com",
        alias="WEATHERAPI_BASE_URL",
    )

    log_dir: Path | None = Field(default=None, alias="WEATHER_LOG_DIR")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        alias="WEATHER_LOG_LEVEL",
    )

    @field_validator("log_dir", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Treat empty env-string values as an unset log directory."""
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("config_file", mode="before")
    @classmethod
    def default_config_file(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return DEFAULT_CONFIG_FILE
        return Path(value).expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("http_timeout_seconds")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("WEATHER_HTTP_TIMEOUT_SECONDS must be > 0.")
        return value

    @field_validator("openweather_base_url", "weatherapi_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Provider base URL must be http(s): {value!r}")
        return value.rstrip("/")

    def safe_summary(self) -> dict[str, Any]:
        """Return non-sensitive settings useful for debug logging."""
        return {
            "config_file": str(self.config_file),
            "http_timeout_seconds": self.http_timeout_seconds,
            "openweather_base_url": self.openweather_base_url,
            "weatherapi_base_url": self.weatherapi_base_url,
            "log_dir": str(self.log_dir) if self.log_dir else None,
            "log_level": self.log_level,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    if settings.log_dir is not None:
        try:
            settings.log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Cannot create log directory {settings.log_dir}: {exc}") from exc
    return settings
