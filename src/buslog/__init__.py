"""
Bus-forwarding logger.

Console logging with named severity levels, plus best-effort forwarding of
selected levels (and always `remote` and `audit`) onto a message bus for
central log collection and audit trails.

Usage:
    from buslog import get_logger

    log = get_logger()
    log.info("Started")
    log.audit(user_id, "Deleted account", {"account": account_id})
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from .bridge import asyncio_exception_handler, install_unhandled_hooks, intercept_stdlib_logging
from .config import LoggerSettings
from .exceptions import BusLogError, ConfigurationError, TransportError
from .facade import BusLogger
from .levels import AUDIT_LEVEL, LEVELS, REMOTE_LEVEL
from .publisher import LOG_SUBJECT, BusPublisher, ClientProvider, import_client
from .router import forwarding_levels


def create_logger(
    settings: Optional[LoggerSettings] = None,
    *,
    bus_client_provider: Optional[ClientProvider] = None,
) -> BusLogger:
    """Build a configured logger from settings (environment by default)."""
    settings = settings or LoggerSettings()

    provider = bus_client_provider
    if provider is None and settings.bus_client:
        provider = import_client(settings.bus_client)

    logger = BusLogger(
        settings.log_level,
        settings.timestamp_timezone,
        settings.remote_log_level,
        publisher=BusPublisher(provider),
    )

    if settings.syslog:
        logger.enable_syslog(settings.syslog, settings.syslog_name, settings.syslog_program)

    return logger


@lru_cache(maxsize=1)
def get_logger() -> BusLogger:
    """
    Process-wide logger wired from the environment.

    Uncaught exceptions are logged through it unless CAPTURE_UNHANDLED is off.
    """
    settings = LoggerSettings()
    logger = create_logger(settings)
    if settings.capture_unhandled:
        install_unhandled_hooks(logger)
    return logger


def reset_logger() -> None:
    """Forget the process-wide logger; the next get_logger() builds a new one."""
    if get_logger.cache_info().currsize:
        get_logger().close()
    get_logger.cache_clear()


__all__ = [
    "AUDIT_LEVEL",
    "LEVELS",
    "LOG_SUBJECT",
    "REMOTE_LEVEL",
    "BusLogError",
    "BusLogger",
    "BusPublisher",
    "ConfigurationError",
    "LoggerSettings",
    "TransportError",
    "asyncio_exception_handler",
    "create_logger",
    "forwarding_levels",
    "get_logger",
    "import_client",
    "install_unhandled_hooks",
    "intercept_stdlib_logging",
    "reset_logger",
]
