# ABOUTME: Loguru configuration for the gatehouse service core
# ABOUTME: Provides explicit sink setup and a record patcher that keeps bearer tokens out of log output

import re
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Compact JWS: three base64url segments, the first one a JSON object ("eyJ").
TOKEN_PATTERN = re.compile(r"eyJ[A-Za-z0-9_-]*\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+")
BEARER_PATTERN = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
REDACTED = "[redacted]"

Patcher = Callable[[Dict[str, Any]], None]


class LoggerConfig(BaseModel):
    """Sink configuration for the loguru logger.

    Every sink is opt-in except the console. File sinks share the rotation,
    retention and compression policy.
    """

    console_enabled: bool = True
    console_level: str = "INFO"
    console_format: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[name]}</cyan> | "
        "<level>{message}</level>"
    )
    console_colorize: bool = True
    console_backtrace: bool = True
    console_diagnose: bool = False

    file_enabled: bool = False
    file_level: str = "DEBUG"
    file_path: Union[str, Path] = "logs/gatehouse.log"
    file_format: str = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} | {message}"
    file_rotation: str = "100 MB"
    file_retention: str = "30 days"
    file_compression: str = "gz"

    structured_enabled: bool = False
    structured_level: str = "INFO"
    structured_path: Union[str, Path] = "logs/gatehouse.jsonl"

    error_file_enabled: bool = False
    error_file_path: Union[str, Path] = "logs/gatehouse-errors.log"

    redact_tokens: bool = True
    otel_enabled: bool = False

    enqueue: bool = True
    catch: bool = True


class LoggingSettings(BaseSettings):
    """Logging settings read from ``GATEHOUSE_``-prefixed environment variables."""

    log_level: str = Field(default="INFO")
    log_file_enabled: bool = Field(default=False)
    log_file_path: str = Field(default="logs/gatehouse.log")
    log_structured_enabled: bool = Field(default=False)
    log_console_colorize: bool = Field(default=True)
    log_otel_enabled: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="GATEHOUSE_", extra="ignore")

    def to_config(self) -> LoggerConfig:
        return LoggerConfig(
            console_level=self.log_level,
            console_colorize=self.log_console_colorize,
            file_enabled=self.log_file_enabled,
            file_path=self.log_file_path,
            file_level=self.log_level,
            structured_enabled=self.log_structured_enabled,
            structured_level=self.log_level,
            otel_enabled=self.log_otel_enabled,
        )


def redact(message: str) -> str:
    """Mask bearer credentials and compact tokens in ``message``."""
    message = BEARER_PATTERN.sub(rf"\1{REDACTED}", message)
    return TOKEN_PATTERN.sub(REDACTED, message)


def _default_extra(record) -> None:
    record["extra"].setdefault("name", record["name"])


def _redacting(record) -> None:
    _default_extra(record)
    record["message"] = redact(record["message"])


def _install_patchers(*patchers: Patcher) -> None:
    def patch(record) -> None:
        for patcher in patchers:
            patcher(record)

    logger.configure(patcher=patch)


def _sinks(config: LoggerConfig) -> List[Tuple[Any, Dict[str, Any]]]:
    common = {"enqueue": config.enqueue, "catch": config.catch}
    on_disk = {"rotation": config.file_rotation, "retention": config.file_retention, **common}

    sinks: List[Tuple[Any, Dict[str, Any]]] = []
    if config.console_enabled:
        sinks.append(
            (
                sys.stdout,
                {
                    "level": config.console_level,
                    "format": config.console_format,
                    "colorize": config.console_colorize,
                    "backtrace": config.console_backtrace,
                    "diagnose": config.console_diagnose,
                    **common,
                },
            )
        )
    if config.file_enabled:
        sinks.append(
            (
                Path(config.file_path),
                {
                    "level": config.file_level,
                    "format": config.file_format,
                    "compression": config.file_compression,
                    **on_disk,
                },
            )
        )
    if config.structured_enabled:
        sinks.append(
            (
                Path(config.structured_path),
                {
                    "level": config.structured_level,
                    "format": "{message}",
                    "serialize": True,
                    "compression": config.file_compression,
                    **on_disk,
                },
            )
        )
    if config.error_file_enabled:
        sinks.append((Path(config.error_file_path), {"level": "ERROR", "format": config.file_format, **on_disk}))
    return sinks


def setup_logging(config: Optional[LoggerConfig] = None) -> None:
    """
    Replace every loguru handler with the sinks described by ``config``.

    Nothing is configured at import time; applications call this once at
    startup.

    Args:
        config: Logger configuration. If None, it is derived from LoggingSettings.
    """
    if config is None:
        config = LoggingSettings().to_config()

    logger.remove()
    _install_patchers(_redacting if config.redact_tokens else _default_extra)

    for target, options in _sinks(config):
        if isinstance(target, Path):
            target.parent.mkdir(parents=True, exist_ok=True)
        logger.add(target, **options)

    if config.otel_enabled:
        setup_otel_logging(redact_tokens=config.redact_tokens)


def setup_otel_logging(
    trace_id_key: str = "trace_id", span_id_key: str = "span_id", redact_tokens: bool = True
) -> None:
    """
    Attach the active OpenTelemetry trace and span ids to every log record.

    Does nothing but warn when the ``otel`` extra is not installed.
    """
    try:
        from opentelemetry import trace
    except ImportError:
        logger.warning("OpenTelemetry not available, skipping OTel logging setup")
        return

    def add_trace_info(record) -> None:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record["extra"][trace_id_key] = f"{span_context.trace_id:032x}"
            record["extra"][span_id_key] = f"{span_context.span_id:016x}"

    _install_patchers(_redacting if redact_tokens else _default_extra, add_trace_info)


def get_logger(name: str):
    return logger.bind(name=name)


def configure_for_testing() -> None:
    """Synchronous, uncoloured DEBUG output on stderr, suitable for captured test logs."""
    logger.remove()
    _install_patchers(_redacting)
    logger.add(
        sys.stderr,
        level="DEBUG",
        format="{time:HH:mm:ss} | {level: <5} | {extra[name]} | {message}",
        colorize=False,
        backtrace=False,
        diagnose=False,
        enqueue=False,
        catch=False,
    )


def configure_for_production() -> None:
    setup_logging(
        LoggerConfig(
            console_level="INFO",
            console_colorize=False,
            console_backtrace=False,
            file_enabled=True,
            structured_enabled=True,
            error_file_enabled=True,
            otel_enabled=True,
        )
    )


def configure_for_development() -> None:
    setup_logging(LoggerConfig(console_level="DEBUG", console_diagnose=True, file_enabled=True))
