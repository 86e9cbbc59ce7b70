"""
Timestamp and console line formatting.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Iterable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import orjson
from structlog.typing import EventDict

from .levels import COLORS as LEVEL_COLORS

# =============================================================================
# ANSI Colors
# =============================================================================

COLORS = {
    "reset": "\033[0m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "gray": "\033[90m",
}


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{COLORS.get(color, '')}{text}{COLORS['reset']}"


# =============================================================================
# Timestamps
# =============================================================================

UTC = ZoneInfo("UTC")

# `%I` is the 12-hour clock, the same as "hh" in the old moment format string
TIMESTAMP_FORMAT = "%Y-%m-%d %I:%M:%S"


def resolve_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA timezone name, falling back to UTC."""
    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def format_timestamp(timezone: str | tzinfo | None, now: datetime | None = None) -> str:
    """Return `[YYYY-MM-DD hh:mm:ss]` for the current time in `timezone`."""
    tz = timezone if isinstance(timezone, tzinfo) else resolve_timezone(timezone)
    moment = now.astimezone(tz) if now is not None else datetime.now(tz)
    return f"[{moment.strftime(TIMESTAMP_FORMAT)}]"


# =============================================================================
# Message Rendering
# =============================================================================


def orjson_dumps(v: Any, *, pretty: bool = False) -> str:
    """Fast JSON serialization using orjson."""
    option = orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC | orjson.OPT_NON_STR_KEYS
    if pretty:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(v, default=str, option=option).decode()


def _render_arg(arg: Any) -> str:
    if isinstance(arg, str):
        return arg
    if isinstance(arg, BaseException):
        return f"{type(arg).__name__}: {arg}"
    try:
        return orjson_dumps(arg, pretty=True)
    except (TypeError, orjson.JSONEncodeError):
        return repr(arg)


def format_message(args: Iterable[Any]) -> str:
    """Join variadic log arguments into a single message string."""
    return " ".join(_render_arg(arg) for arg in args)


class ConsoleFormatter:
    """Renders `<timestamp> - <level>: <message>` lines for the console."""

    SEPARATOR = " - "

    @classmethod
    def format(cls, event_dict: EventDict, *, timestamp: str | None = None, use_color: bool = True) -> str:
        level = event_dict.get("level", "info")
        message = event_dict.get("message", "")
        body = f"{level}: {message}"

        if use_color:
            body = colorize(body, LEVEL_COLORS.get(level, "reset"))

        if not timestamp:
            return body
        return f"{timestamp}{cls.SEPARATOR}{body}"
