"""
Logging backend: a structlog processor pipeline fanning out to sinks.

Exposes one plain log function per registered level. Those functions are
what the router wraps; the backend itself knows nothing about the bus.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import structlog
from structlog.typing import EventDict, WrappedLogger

from .formatters import format_message
from .levels import LEVELS, normalize_level, rank_of
from .sinks import BaseSink

LogFunction = Callable[..., None]


# =============================================================================
# Structlog Processors
# =============================================================================


def add_level(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Record the level, which is the name of the method the event was logged with."""
    event_dict["level"] = method_name
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def render_message(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Collapse the variadic call arguments into a `message` string."""
    event_dict["message"] = format_message(event_dict.pop("args", ()))
    event_dict.pop("event", None)
    return event_dict


class _SilentLogger:
    """Wrapped logger that discards the rendered output for any level name.

    The sinks do the writing; structlog's PrintLogger only knows the stdlib
    level names, not remote, audit or silly.
    """

    def msg(self, *args: Any, **kwargs: Any) -> None:
        pass

    def __getattr__(self, name: str) -> Callable[..., None]:
        if name.startswith("__"):
            raise AttributeError(name)
        return self.msg


# =============================================================================
# Backend
# =============================================================================


class LogBackend:
    """Multi-sink logging backend with named, ranked levels.

    Args:
        level: Verbosity floor; events ranked above it are dropped before any
            sink sees them. Unknown names fall back to "info".
    """

    def __init__(self, level: str = "info"):
        self.level = normalize_level(level)
        self._sinks: list[BaseSink] = []
        self._logger = structlog.wrap_logger(
            _SilentLogger(),
            processors=[
                add_level,
                self.filter_by_level,
                add_timestamp,
                render_message,
                self.multi_sink_renderer,
            ],
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
            cache_logger_on_first_use=False,
        ).bind()
        self._functions: dict[str, LogFunction] = {level.name: self._make_function(level.name) for level in LEVELS}

    @property
    def sinks(self) -> tuple[BaseSink, ...]:
        return tuple(self._sinks)

    def add_sink(self, sink: BaseSink) -> None:
        """Register an output transport."""
        self._sinks.append(sink)

    def close(self) -> None:
        for sink in self._sinks:
            sink.close()
        self._sinks.clear()

    def function_for(self, level: str) -> LogFunction | None:
        """Return the unwrapped log function for `level`, if there is one."""
        return self._functions.get(level)

    def functions(self) -> dict[str, LogFunction]:
        return dict(self._functions)

    def _make_function(self, level: str) -> LogFunction:
        def log(*args: Any) -> None:
            getattr(self._logger, level)(args=args)

        log.__name__ = level
        log.__qualname__ = f"{type(self).__name__}.{level}"
        return log

    def filter_by_level(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        """Drop events less severe than the backend floor."""
        rank = rank_of(event_dict.get("level"))
        if rank is None or rank > rank_of(self.level):
            raise structlog.DropEvent
        return event_dict

    def multi_sink_renderer(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        """Render log to all sinks. Returns empty to suppress default output."""
        level = event_dict["level"]
        for sink in self._sinks:
            if not sink.accepts(level):
                continue
            try:
                sink.emit(dict(event_dict))
            except Exception as exc:
                self._report_sink_error(sink, exc)
        return ""

    @staticmethod
    def _report_sink_error(sink: BaseSink, exc: Exception) -> None:
        if sink.on_error is None:
            return
        try:
            sink.on_error(exc)
        except Exception:
            pass  # A broken error callback must not break the caller
