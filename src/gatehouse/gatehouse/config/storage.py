# ABOUTME: Storage configuration for repository backends
# ABOUTME: Selects the backend through a connection URL and caps list page sizes

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MEMORY_URL = "memory://"


class StorageSettings(BaseSettings):
    """Repository backend settings.

    ``DATABASE_URL`` of ``memory://`` selects the in-process store; any other
    value is handed to an async SQLAlchemy engine (e.g. ``sqlite:///./gatehouse.db``,
    which runs on aiosqlite).
    """

    DATABASE_URL: str = Field(default=MEMORY_URL)
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL statements through the engine logger.")
    LIST_MAX_LIMIT: int = Field(default=100, ge=1, description="Upper bound applied to every list() page size.")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def strip_url(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("DATABASE_URL must not be empty")
        return v

    @property
    def uses_memory_backend(self) -> bool:
        return self.DATABASE_URL == MEMORY_URL
