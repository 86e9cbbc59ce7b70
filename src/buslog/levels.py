"""
Severity level registry.

Lower rank means more severe. The gap at rank 6 is intentional and carries
no meaning; ranks only need to be strictly ordered.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Level:
    name: str
    rank: int
    color: str


REMOTE_LEVEL = "remote"
AUDIT_LEVEL = "audit"

# Always forwarded to the bus, whatever the configured threshold
MANDATORY_LEVELS = (REMOTE_LEVEL, AUDIT_LEVEL)

LEVELS: tuple[Level, ...] = (
    # Something really bad happened
    Level("error", 0, "red"),
    # Something went wrong, but did not fail completely
    Level("warn", 1, "yellow"),
    # Forwarded to the log collector if the bus is up
    Level(REMOTE_LEVEL, 2, "magenta"),
    # Audit trail entry, forwarded to the log collector if the bus is up
    Level(AUDIT_LEVEL, 3, "green"),
    Level("info", 4, "cyan"),
    Level("debug", 5, "reset"),
    # Log everything
    Level("silly", 7, "gray"),
)

RANKS: Mapping[str, int] = MappingProxyType({level.name: level.rank for level in LEVELS})
COLORS: Mapping[str, str] = MappingProxyType({level.name: level.color for level in LEVELS})

DEFAULT_LEVEL = "info"


def rank_of(name: str | None, ranks: Mapping[str, int] = RANKS) -> int | None:
    """Return the rank of a level name, or None if it is not registered."""
    if not name:
        return None
    return ranks.get(str(name).strip().lower())


def normalize_level(name: str | None, default: str = DEFAULT_LEVEL) -> str:
    """Lower-case a level name, falling back to `default` when unknown."""
    if rank_of(name) is None:
        return default
    return str(name).strip().lower()
