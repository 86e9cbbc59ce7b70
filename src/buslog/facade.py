"""
The public logger object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from .backend import LogBackend, LogFunction
from .levels import AUDIT_LEVEL, normalize_level
from .publisher import BusPublisher
from .router import forwarding_levels, install_forwarding
from .sinks import SyslogSink
from .transports import configure_console, configure_syslog


@dataclass(frozen=True)
class LoggerConfig:
    log_level: str = "info"
    timestamp_timezone: str = "Europe/Stockholm"
    remote_log_level: str | None = "error"


class BusLogger:
    """
    Console logger that also forwards selected levels onto the message bus.

    Levels ranked at or above `remote_log_level` are forwarded, and so are
    `remote` and `audit` regardless of configuration. Configuration is fixed
    for the lifetime of the instance.

    Args:
        log_level: Console (and syslog) verbosity floor
        timestamp_timezone: IANA timezone for console timestamps
        remote_log_level: Forwarding threshold level name
        publisher: Bus publisher; defaults to one with no client (no-op)
        backend: Logging backend; defaults to a fresh LogBackend
        stream: Console output stream; defaults to stdout
    """

    def __init__(
        self,
        log_level: str = "info",
        timestamp_timezone: str = "Europe/Stockholm",
        remote_log_level: str | None = "error",
        *,
        publisher: BusPublisher | None = None,
        backend: LogBackend | None = None,
        stream: Any = None,
    ):
        self.config = LoggerConfig(
            log_level=normalize_level(log_level),
            timestamp_timezone=timestamp_timezone,
            remote_log_level=remote_log_level,
        )
        self.publisher = publisher or BusPublisher()
        self.backend = backend or LogBackend(self.config.log_level)

        configure_console(self.backend, self.config.timestamp_timezone, stream=stream)

        self._forwarding_levels = tuple(forwarding_levels(self.config.remote_log_level))
        self._functions = install_forwarding(
            self.backend.functions(),
            self.config.remote_log_level,
            self.publisher,
        )

    @property
    def forwarding_levels(self) -> tuple[str, ...]:
        return self._forwarding_levels

    def function_for(self, level: str) -> LogFunction | None:
        return self._functions.get(level)

    def _dispatch(self, level: str, *args: Any) -> None:
        fn = self._functions.get(level)
        if fn is not None:
            fn(*args)

    def log(self, level: str, *args: Any) -> None:
        """Log at a level given by name. Unknown levels are ignored."""
        if level == AUDIT_LEVEL:
            self.audit(*args)
        else:
            self._dispatch(level, *args)

    def silly(self, *args: Any) -> None:
        self._dispatch("silly", *args)

    def debug(self, *args: Any) -> None:
        self._dispatch("debug", *args)

    def info(self, *args: Any) -> None:
        self._dispatch("info", *args)

    def warn(self, *args: Any) -> None:
        self._dispatch("warn", *args)

    def error(self, *args: Any) -> None:
        self._dispatch("error", *args)

    def remote(self, *args: Any) -> None:
        """Log locally and always forward to the bus."""
        self._dispatch("remote", *args)

    def audit(self, user_id: Any, msg: Any, payload: Any = None) -> None:
        """
        Audit log, always forwarded to the bus.

        Logged locally as `[user_id] msg`; the payload is only published.
        """
        self._dispatch(AUDIT_LEVEL, user_id, msg, payload)

    def enable_syslog(self, host_and_port: str, name: str | None = None, program: str | None = None) -> SyslogSink | None:
        """
        Also send entries to a remote syslog server (e.g. Papertrail).

        Uses `log_level` as the transport's floor. A connection failure is
        logged locally at error level and does not stop other logging.
        """
        return configure_syslog(
            self.backend,
            host_and_port,
            name,
            program,
            self.config.log_level,
            on_error=self._syslog_error_reporter(host_and_port),
        )

    enable_papertrail_logging = enable_syslog

    def _syslog_error_reporter(self, host_and_port: str) -> Callable[[BaseException], None]:
        reporting = False

        def report(exc: BaseException) -> None:
            nonlocal reporting
            # The error entry goes through the failing sink too; don't recurse
            if reporting:
                return
            reporting = True
            try:
                self.error(f"Failed connecting to papertrail {host_and_port}", exc)
            finally:
                reporting = False

        return report

    def close(self) -> None:
        self.backend.close()
