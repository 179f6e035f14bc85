# ABOUTME: Base configuration classes for the gatehouse service core
# ABOUTME: Provides process-wide identity, environment and logging settings with normalising validators

from typing import Literal
import zoneinfo

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_ENV_ALIASES = {
    "dev": "development",
    "develop": "development",
    "local": "development",
    "test": "testing",
    "testing": "testing",
    "stage": "staging",
    "prod": "production",
}

_LOG_FORMAT_ALIASES = {
    "structured": "json",
    "jsonl": "json",
    "text": "txt",
    "plain": "txt",
}


class BaseCoreSettings(BaseSettings):
    """Foundational, non-domain configuration shared by every gatehouse deployment.

    Values are read from environment variables or a `.env` file through
    `pydantic-settings`. The object is frozen: it is built once at startup and
    handed to the components that need it, never mutated afterwards.

    Attributes:
        APP_NAME: Name used to identify the process in logs.
        ENV: Runtime environment; aliases such as ``prod`` or ``dev`` are normalised.
        DEBUG: Enables diagnostic behaviour. Must be False in production.
        LOG_LEVEL: Minimum level for log records.
        LOG_FORMAT: ``json`` for structured output, ``txt`` for humans.
        TIMEZONE: IANA timezone used when rendering timestamps.
    """

    APP_NAME: str = Field(default="Gatehouse", description="Process name used in logs.")

    ENV: Literal["development", "testing", "staging", "production"] = Field(
        default="development",
        description="Runtime environment.",
    )
    DEBUG: bool = Field(default=False, description="Enable debug behaviour. Never in production.")

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum level for log records.",
    )
    LOG_FORMAT: Literal["json", "txt"] = Field(default="txt", description="Log output format.")

    TIMEZONE: str = Field(default="UTC", description="IANA timezone for rendered timestamps.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("ENV", mode="before")
    @classmethod
    def normalise_env(cls, v: str) -> str:
        """Map common environment aliases (dev, prod, stage, test) to canonical names."""
        if isinstance(v, str):
            v_lower = v.lower().strip()
            return _ENV_ALIASES.get(v_lower, v_lower)
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        if isinstance(v, str):
            return v.upper().strip()
        return v

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def normalise_log_format(cls, v: str) -> str:
        if isinstance(v, str):
            v_lower = v.lower().strip()
            return _LOG_FORMAT_ALIASES.get(v_lower, v_lower)
        return v

    @field_validator("TIMEZONE", mode="before")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject anything zoneinfo cannot resolve.

        Raises:
            ValueError: If the value is empty or not a known IANA identifier.
        """
        if not isinstance(v, str):
            return v

        name = v.strip()
        if not name:
            raise ValueError("Invalid timezone ''. Must be a valid IANA timezone identifier (e.g. 'UTC').")

        try:
            zoneinfo.ZoneInfo(name)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(
                f"Invalid timezone '{name}'. Must be a valid IANA timezone identifier (e.g. 'Europe/London')."
            ) from e
        return name
