"""
Level routing: decides which levels are forwarded to the bus and wraps
their log functions so each call also publishes an envelope.

Note that `remote` and `audit` are always forwarded no matter the configured
threshold, even though they also carry ordinary ranks.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Mapping

from .levels import AUDIT_LEVEL, MANDATORY_LEVELS, RANKS, rank_of
from .publisher import LOG_SUBJECT, BusPublisher

LogFunction = Callable[..., None]

AUDIT_LOG_SUBJECT = LOG_SUBJECT
REMOTE_LOG_SUBJECT = LOG_SUBJECT


def forwarding_levels(remote_log_level: str | None, ranks: Mapping[str, int] = RANKS) -> list[str]:
    """
    Compute the levels forwarded to the bus for a threshold level name.

    Every level ranked at or above the threshold (numerically <=) is included,
    in registry order, followed by any mandatory level not already present.
    An unknown threshold only disables the rank-based part.

    Args:
        remote_log_level: Threshold level name, may be unknown or None
        ranks: Level name to rank mapping

    Returns:
        Ordered list of level names, without duplicates
    """
    threshold = rank_of(remote_log_level, ranks)
    levels: list[str] = []

    # Rank 0 is a real threshold, hence the explicit None check
    if threshold is not None:
        levels = [name for name, rank in ranks.items() if rank <= threshold]

    for name in MANDATORY_LEVELS:
        if name not in levels:
            levels.append(name)

    return levels


def is_forwarding(fn: Callable[..., Any]) -> bool:
    return getattr(fn, "__forwarded_level__", None) is not None


def wrap_level(level: str, base_fn: LogFunction, publisher: BusPublisher) -> LogFunction:
    """Wrap a variadic log function so every call is also published."""
    if is_forwarding(base_fn):
        return base_fn

    @functools.wraps(base_fn)
    def forward(*msg: Any) -> None:
        base_fn(*msg)
        publisher.publish(REMOTE_LOG_SUBJECT, {"level": level, "msg": list(msg)})

    forward.__forwarded_level__ = level  # type: ignore[attr-defined]
    return forward


def wrap_audit(base_fn: LogFunction, publisher: BusPublisher) -> LogFunction:
    """Wrap the audit log function; its signature is (user_id, msg, payload)."""
    if is_forwarding(base_fn):
        return base_fn

    @functools.wraps(base_fn)
    def audit(user_id: Any, msg: Any, payload: Any = None) -> None:
        # Payload goes to the bus only, never to the console
        base_fn(f"[{user_id}] {msg}")
        publisher.publish(
            AUDIT_LOG_SUBJECT,
            {"userId": user_id, "msg": msg, "payload": payload, "level": AUDIT_LEVEL},
        )

    audit.__forwarded_level__ = AUDIT_LEVEL  # type: ignore[attr-defined]
    return audit


def install_forwarding(
    functions: Mapping[str, LogFunction],
    remote_log_level: str | None,
    publisher: BusPublisher,
    ranks: Mapping[str, int] = RANKS,
) -> dict[str, LogFunction]:
    """
    Build the level -> function table with forwarding installed.

    Levels that are not forwarded keep their base function. Forwarded levels
    with no base function are skipped.
    """
    table = dict(functions)
    for level in forwarding_levels(remote_log_level, ranks):
        base_fn = functions.get(level)
        if base_fn is None:
            continue
        if level == AUDIT_LEVEL:
            table[level] = wrap_audit(base_fn, publisher)
        else:
            table[level] = wrap_level(level, base_fn, publisher)
    return table
