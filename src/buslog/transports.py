"""
Transport registration glue between the facade and the backend.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Optional

from .backend import LogBackend
from .exceptions import ConfigurationError, TransportError
from .formatters import format_timestamp, resolve_timezone
from .sinks import StdioSink, SyslogSink


def configure_console(backend: LogBackend, timezone: str | None, stream: Any = None) -> StdioSink:
    """Register the console transport with a per-write localized timestamp."""
    timestamp = functools.partial(format_timestamp, resolve_timezone(timezone))
    sink = StdioSink(timestamp=timestamp, stream=stream)
    backend.add_sink(sink)
    return sink


def parse_host_and_port(host_and_port: str) -> tuple[str, int]:
    host, sep, port = (host_and_port or "").strip().rpartition(":")
    if not sep or not host:
        raise ConfigurationError(
            f"Expected syslog address as host:port, got {host_and_port!r}",
            details={"value": host_and_port},
        )
    try:
        return host, int(port)
    except ValueError as exc:
        raise ConfigurationError(
            f"Invalid syslog port in {host_and_port!r}",
            details={"value": host_and_port},
        ) from exc


def configure_syslog(
    backend: LogBackend,
    host_and_port: str,
    name: str | None,
    program: str | None,
    level: str | None,
    on_error: Optional[Callable[[BaseException], None]] = None,
) -> SyslogSink | None:
    """
    Register a remote syslog transport.

    Returns None when the transport cannot connect; the failure is handed to
    `on_error` instead of being raised.
    """
    host, port = parse_host_and_port(host_and_port)
    try:
        sink = SyslogSink(host, port, hostname=name, program=program, level=level, on_error=on_error)
    except TransportError as exc:
        if on_error is not None:
            on_error(exc)
        return None
    backend.add_sink(sink)
    return sink
