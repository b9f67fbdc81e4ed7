from collections.abc import Callable
from datetime import datetime, timezone, tzinfo
import logging

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from xmltv_reader.utils.timezone import DateFormatError, resolve_timezone

DEFAULT_LANGUAGE = "en"


class ReaderSettings(BaseModel):
    """Per-session decode settings.

    Immutable once constructed and shared read-only by the reader, the
    record builders and the filter service.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    channel_filter: Callable[[str], bool] | None = None
    programme_channel_filter: Callable[[str], bool] | None = None
    programme_time_filter: Callable[[datetime, datetime], bool] | None = None
    default_language: str = DEFAULT_LANGUAGE
    timezone: tzinfo = timezone.utc
    ignore_channels: bool = False
    ignore_programmes: bool = False
    include_outer_xml: bool = False

    @field_validator("default_language")
    @classmethod
    def validate_default_language(cls, value: str) -> str:
        """Reject blank language tags."""
        if not value or not value.strip():
            raise ValueError("default_language must be a non-empty language tag")
        return value.strip()

    @field_validator("timezone", mode="before")
    @classmethod
    def validate_timezone(cls, value):
        """Accept tzinfo instances, 'UTC', fixed offsets or IANA names."""
        if value is None:
            return timezone.utc
        if isinstance(value, (str, tzinfo)):
            try:
                return resolve_timezone(value)
            except DateFormatError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @classmethod
    def from_custom_settings(cls, custom: "CustomSettings", **overrides) -> "ReaderSettings":
        """Build session settings from process-level defaults, letting overrides win."""
        values = {
            "default_language": custom.default_language,
            "timezone": custom.timezone,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)


class CustomSettings(BaseSettings):
    """Process-level settings for the command line tool, loaded from XMLTV_* environment variables.

    The decoder itself never reads the environment; only the CLI builds this.
    """

    log_level: str = "INFO"
    default_language: str = DEFAULT_LANGUAGE
    timezone: str = "UTC"
    parse_timeout_sec: int = 0  # 0 disables the timeout
    download_timeout_sec: float = 120.0
    download_max_retries: int = 3
    download_backoff_factor: float = 2.0
    chunk_size: int = 64 * 1024

    model_config = SettingsConfigDict(
        env_prefix="XMLTV_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate logging level name."""
        normalized = value.upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError(f"log_level must be one of {sorted(allowed)}")
        return normalized

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Validate timezone string"""
        try:
            resolve_timezone(value)
        except DateFormatError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("parse_timeout_sec")
    @classmethod
    def validate_parse_timeout(cls, value: int) -> int:
        """Validate XML parsing timeout (seconds)."""
        if value < 0:
            raise ValueError("parse_timeout_sec must be >= 0")
        return value

    @field_validator("download_max_retries", "chunk_size")
    @classmethod
    def validate_positive_ints(cls, value: int, info) -> int:
        """Ensure integer settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value

    @field_validator("download_timeout_sec", "download_backoff_factor")
    @classmethod
    def validate_positive_floats(cls, value: float, info) -> float:
        """Ensure floating-point settings are positive."""
        if value <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return value


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
