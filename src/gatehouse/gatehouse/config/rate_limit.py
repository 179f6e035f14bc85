# ABOUTME: Rate limiting configuration for request admission control
# ABOUTME: Exposes the two recognised fixed-window options, limit and window duration

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitSettings(BaseSettings):
    """Fixed-window rate limit applied per caller key.

    Attributes:
        RATE_LIMIT_LIMIT: Maximum admitted requests per window.
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds.
    """

    RATE_LIMIT_LIMIT: int = Field(default=100, ge=1)
    RATE_LIMIT_WINDOW_SECONDS: float = Field(default=60.0, gt=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )
