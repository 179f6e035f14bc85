# ABOUTME: Main configuration composition for the service core
# ABOUTME: Assembles all configuration classes into a single immutable settings object

from functools import lru_cache

from pydantic_settings import SettingsConfigDict

from ._base import BaseCoreSettings
from .rate_limit import RateLimitSettings
from .security import SecuritySettings
from .storage import StorageSettings


class CoreSettings(BaseCoreSettings, SecuritySettings, RateLimitSettings, StorageSettings):
    """The complete, composed configuration for a gatehouse process.

    Each concern keeps its own settings class; this aggregate inherits them all
    so an application builds one frozen object at startup and passes it (or
    the relevant slice) to component constructors, e.g.
    ``JwtTokenService.from_settings(settings)``. Components never reach for a
    global instance themselves.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )


@lru_cache
def get_settings() -> CoreSettings:
    """Build the settings once for applications that want a cached instance.

    Returns:
        A single, cached instance of CoreSettings.
    """
    return CoreSettings()
