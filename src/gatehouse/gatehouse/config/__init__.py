# ABOUTME: Configuration package initialization
# ABOUTME: Exports settings classes and logging utilities for the service core

from gatehouse.config._base import BaseCoreSettings
from gatehouse.config.security import SecuritySettings
from gatehouse.config.rate_limit import RateLimitSettings
from gatehouse.config.storage import StorageSettings, MEMORY_URL
from gatehouse.config.settings import CoreSettings, get_settings
from gatehouse.config.logging import (
    LoggerConfig,
    LoggingSettings,
    setup_logging,
    setup_otel_logging,
    get_logger,
    configure_for_testing,
    configure_for_production,
    configure_for_development,
)

__all__ = [
    "BaseCoreSettings",
    "SecuritySettings",
    "RateLimitSettings",
    "StorageSettings",
    "MEMORY_URL",
    "CoreSettings",
    "get_settings",
    "LoggerConfig",
    "LoggingSettings",
    "setup_logging",
    "setup_otel_logging",
    "get_logger",
    "configure_for_testing",
    "configure_for_production",
    "configure_for_development",
]
