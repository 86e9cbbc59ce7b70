"""
Interceptors for routing standard library logs and unhandled exceptions
into a BusLogger.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TYPE_CHECKING, Any, Callable

from .publisher import publishing

if TYPE_CHECKING:
    from .facade import BusLogger


def level_for_record(levelno: int) -> str:
    """Map a stdlib level number onto a registered level name."""
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    if levelno >= logging.DEBUG:
        return "debug"
    return "silly"


class StdlibBridgeHandler(logging.Handler):
    """
    Redirect standard library logging events to a BusLogger.
    This lets third-party logs reach the console and, for forwarded
    levels, the bus.

    Records emitted while the bridge is already dispatching on the same
    thread, or while a bus client publish is running (clients that log their
    own activity), are dropped.
    """

    def __init__(self, logger: "BusLogger", level: int = logging.NOTSET):
        super().__init__(level)
        self.logger = logger
        self._local = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "dispatching", False) or publishing():
            return
        self._local.dispatching = True
        try:
            msg = self.format(record)
            self.logger.log(level_for_record(record.levelno), f"[{record.name}] {msg}")
        except Exception:
            self.handleError(record)
        finally:
            self._local.dispatching = False


def intercept_stdlib_logging(logger: "BusLogger", name: str | None = None, level: int = logging.INFO) -> StdlibBridgeHandler:
    """Replace the handlers of a stdlib logger (root by default) with the bridge."""
    target = logging.getLogger(name)
    handler = StdlibBridgeHandler(logger)
    target.handlers = [handler]
    target.setLevel(level)
    return handler


def install_unhandled_hooks(logger: "BusLogger") -> None:
    """
    Log uncaught exceptions at error level, then defer to the previous hooks.

    Installing again replaces the hooks from an earlier call instead of
    stacking another layer on top of them.
    """
    previous_excepthook = getattr(sys.excepthook, "__buslog_previous__", sys.excepthook)
    previous_threading_hook = getattr(threading.excepthook, "__buslog_previous__", threading.excepthook)

    def excepthook(exc_type, exc_value, exc_tb) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            logger.error(exc_value)
        previous_excepthook(exc_type, exc_value, exc_tb)

    def threading_hook(args: threading.ExceptHookArgs) -> None:
        if args.exc_value is not None and not isinstance(args.exc_value, SystemExit):
            logger.error(args.exc_value)
        previous_threading_hook(args)

    excepthook.__buslog_previous__ = previous_excepthook  # type: ignore[attr-defined]
    threading_hook.__buslog_previous__ = previous_threading_hook  # type: ignore[attr-defined]
    sys.excepthook = excepthook
    threading.excepthook = threading_hook


def asyncio_exception_handler(logger: "BusLogger") -> Callable[[Any, dict], None]:
    """Build an event loop exception handler, usable with loop.set_exception_handler()."""

    def handler(loop: Any, context: dict) -> None:
        exc = context.get("exception")
        logger.error(exc if exc is not None else context.get("message", "Unhandled exception in event loop"))

    return handler
