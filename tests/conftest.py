import io
import typing as t

import pytest

from buslog.facade import BusLogger
from buslog.publisher import BusPublisher


class FakeBus:
    """In-memory bus client recording every publish."""

    def __init__(self, connected: bool = True):
        self.is_connected = connected
        self.published: list[tuple[str, dict]] = []

    def publish(self, subject: str, envelope: dict) -> None:
        self.published.append((subject, envelope))


class BrokenBus(FakeBus):
    def publish(self, subject: str, envelope: dict) -> None:
        raise ConnectionError("bus is down")


@pytest.fixture
def bus() -> FakeBus:
    return FakeBus()


@pytest.fixture
def stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def make_logger(bus: FakeBus, stream: io.StringIO) -> t.Callable[..., BusLogger]:
    """Factory for loggers writing to an in-memory stream and publishing to `bus`."""
    created: list[BusLogger] = []

    def factory(log_level: str = "silly", remote_log_level: str | None = "error", **kwargs: t.Any) -> BusLogger:
        kwargs.setdefault("publisher", BusPublisher(lambda: bus))
        kwargs.setdefault("stream", stream)
        logger = BusLogger(log_level, "UTC", remote_log_level, **kwargs)
        created.append(logger)
        return logger

    yield factory

    for logger in created:
        logger.close()


@pytest.fixture
def broken_bus() -> BrokenBus:
    return BrokenBus()


@pytest.fixture
def disconnected_bus() -> FakeBus:
    return FakeBus(connected=False)
