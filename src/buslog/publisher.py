"""
Best-effort publishing of log entries onto the message bus.

The bus is a convenience path, never a correctness path: every failure
(missing library, disconnected client, broken publish) is swallowed here
and nothing is retried.
"""

from __future__ import annotations

import asyncio
import contextvars
import importlib
import inspect
import uuid
from typing import Any, Callable, Optional, Protocol, runtime_checkable

LOG_SUBJECT = "log"

ClientProvider = Callable[[], Any]

_publishing: contextvars.ContextVar[bool] = contextvars.ContextVar("buslog_publishing", default=False)


def publishing() -> bool:
    """True while a bus client publish call is running in the current context."""
    return _publishing.get()


@runtime_checkable
class BusClient(Protocol):
    """What the publisher needs from a bus client."""

    def publish(self, subject: str, envelope: dict) -> Any: ...


def import_client(target: str) -> ClientProvider:
    """
    Build a provider that imports a bus client on first use.

    `target` is `"package.module"` or `"package.module:attribute"`. The provider
    returns None if the library is not installed or the attribute is missing.
    """
    module_name, _, attribute = target.partition(":")

    def provider() -> Any:
        try:
            client = importlib.import_module(module_name)
            for part in filter(None, attribute.split(".")):
                client = getattr(client, part)
            return client
        except Exception:
            return None

    return provider


def is_connected(client: Any) -> bool:
    """Connectivity check tolerant of the shapes bus clients come in."""
    if client is None:
        return False
    flag = getattr(client, "is_connected", None)
    if flag is not None:
        return bool(flag() if callable(flag) else flag)
    # Clients without a flag only expose request() once connected
    return callable(getattr(client, "request", None))


async def _publish_guarded(awaitable: Any) -> Any:
    # Runs in the task's own context copy
    _publishing.set(True)
    return await awaitable


def _discard_task_result(task: asyncio.Future) -> None:
    if not task.cancelled():
        task.exception()


class BusPublisher:
    """
    Fire-and-forget publisher.

    The client is resolved lazily through `client_provider` and memoized once a
    client is found. Resolving twice is harmless.
    """

    def __init__(self, client_provider: Optional[ClientProvider] = None):
        self._client_provider = client_provider
        self._client: BusClient | None = None
        self._pending: set[asyncio.Future] = set()

    @property
    def client(self) -> BusClient | None:
        if self._client is None and self._client_provider is not None:
            try:
                self._client = self._client_provider()
            except Exception:
                self._client = None
        return self._client

    def publish(self, subject: str, data: Any) -> None:
        try:
            client = self.client
            if not is_connected(client):
                return
            token = _publishing.set(True)
            try:
                result = client.publish(subject, {"correlationId": str(uuid.uuid4()), "data": data})
            finally:
                _publishing.reset(token)
            if inspect.isawaitable(result):
                self._schedule(result)
        except Exception:
            pass  # Nothing to do, the entry is lost

    @property
    def pending(self) -> int:
        """Number of scheduled publishes that have not finished yet."""
        return len(self._pending)

    def _schedule(self, awaitable: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop to run it on; drop the entry without a never-awaited warning
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        # The loop only keeps weak references to tasks
        task = asyncio.ensure_future(_publish_guarded(awaitable), loop=loop)
        self._pending.add(task)
        task.add_done_callback(self._finish)

    def _finish(self, task: asyncio.Future) -> None:
        self._pending.discard(task)
        _discard_task_result(task)
