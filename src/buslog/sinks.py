"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import logging
import socket
import sys
from abc import ABC, abstractmethod
from datetime import datetime
from logging.handlers import SysLogHandler
from typing import Any, Callable, Optional

from structlog.typing import EventDict

from .exceptions import TransportError
from .formatters import ConsoleFormatter
from .levels import rank_of

ErrorCallback = Callable[[BaseException], None]


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks.

    Args:
        level: Verbosity floor for this sink. None inherits the backend level.
        on_error: Called with any exception raised while emitting.
    """

    name = "sink"

    def __init__(self, level: str | None = None, on_error: Optional[ErrorCallback] = None):
        self.level = level
        self.on_error = on_error

    def accepts(self, level: str) -> bool:
        """Whether an event at `level` passes this sink's own floor."""
        floor = rank_of(self.level)
        if floor is None:
            return True
        rank = rank_of(level)
        return rank is not None and rank <= floor

    @abstractmethod
    def emit(self, event_dict: EventDict) -> None:
        """Emit a log event to the sink."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class StdioSink(BaseSink):
    """Console sink.

    Args:
        timestamp: Zero-arg callable producing the line timestamp, called per write
        stream: Output stream (default: stdout)
        use_color: Force color on or off; auto-detected from the stream when None
    """

    name = "console"

    def __init__(
        self,
        timestamp: Optional[Callable[[], str]] = None,
        stream: Any = None,
        use_color: bool | None = None,
        level: str | None = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        super().__init__(level=level, on_error=on_error)
        self._timestamp = timestamp
        self._stream = stream or sys.stdout
        self._use_color = use_color

    def emit(self, event_dict: EventDict) -> None:
        use_color = self._use_color
        if use_color is None:
            use_color = bool(getattr(self._stream, "isatty", lambda: False)())
        timestamp = self._timestamp() if self._timestamp else None
        output = ConsoleFormatter.format(event_dict, timestamp=timestamp, use_color=use_color)

        self._stream.write(output + "\n")
        self._stream.flush()

    def close(self) -> None:
        pass


# Syslog has no notion of remote/audit/silly; map onto the nearest priority
SYSLOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "remote": logging.INFO,
    "audit": logging.INFO,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "silly": logging.DEBUG,
}

DEFAULT_PROGRAM = "buslog"


class _ReportingSysLogHandler(SysLogHandler):
    """SysLogHandler that hands send failures to a callback instead of stderr."""

    on_error: Optional[ErrorCallback] = None

    def handleError(self, record: logging.LogRecord) -> None:
        exc = sys.exc_info()[1]
        if self.on_error is not None and exc is not None:
            self.on_error(exc)
        else:
            super().handleError(record)


class Rfc3164Formatter(logging.Formatter):
    """
    Formats `Mmm dd hh:mm:ss HOSTNAME TAG: MSG` (the handler adds `<PRI>`).

    Each entry ends with a newline, the framing TCP syslog receivers split on.
    """

    def __init__(self, hostname: str, program: str):
        hostname = _syslog_token(hostname).replace("%", "%%")
        program = _syslog_token(program).replace("%", "%%")
        super().__init__(f"%(asctime)s {hostname} {program}: %(message)s\n")

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created)
        # Day of month is space padded, not zero padded
        return f"{stamp:%b} {stamp.day:>2} {stamp:%H:%M:%S}"


def _syslog_token(value: str) -> str:
    return "-".join(value.split()) or "-"


class SyslogSink(BaseSink):
    """Remote syslog sink over TCP (Papertrail and friends).

    Entries carry an RFC 3164 header stamped in local time rather than the
    console timestamp. Multi-line messages are folded onto one line.
    """

    name = "syslog"

    def __init__(
        self,
        host: str,
        port: int,
        hostname: str | None = None,
        program: str | None = None,
        level: str | None = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        super().__init__(level=level, on_error=on_error)
        self.address = (host, port)
        try:
            self._handler = _ReportingSysLogHandler(address=self.address, socktype=socket.SOCK_STREAM)
        except OSError as exc:
            raise TransportError(
                f"Failed connecting to syslog {host}:{port}",
                transport=self.name,
                details={"host": host, "port": port},
            ) from exc
        self._handler.on_error = on_error
        self._handler.append_nul = False
        self._handler.setFormatter(Rfc3164Formatter(hostname or socket.gethostname(), program or DEFAULT_PROGRAM))

    def emit(self, event_dict: EventDict) -> None:
        levelno = SYSLOG_LEVELS.get(event_dict.get("level", "info"), logging.INFO)
        message = " ".join(str(event_dict.get("message", "")).splitlines())
        record = logging.makeLogRecord(
            {
                "msg": message,
                "levelno": levelno,
                "levelname": logging.getLevelName(levelno),
            }
        )
        self._handler.emit(record)

    def close(self) -> None:
        self._handler.close()
