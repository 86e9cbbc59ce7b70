from __future__ import annotations

import pytest

from buslog.levels import RANKS
from buslog.publisher import BusPublisher
from buslog.router import (
    forwarding_levels,
    install_forwarding,
    is_forwarding,
    wrap_audit,
    wrap_level,
)


class Recorder:
    """Stand-in for a backend log function."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __call__(self, *args) -> None:
        self.calls.append(args)


# ================================
# forwarding_levels
# ================================


class TestForwardingLevels:
    def test_threshold_warn(self) -> None:
        assert forwarding_levels("warn") == ["error", "warn", "remote", "audit"]

    def test_threshold_rank_zero_is_not_treated_as_unset(self) -> None:
        assert forwarding_levels("error") == ["error", "remote", "audit"]

    def test_threshold_includes_remote_and_audit_by_rank(self) -> None:
        assert forwarding_levels("info") == ["error", "warn", "remote", "audit", "info"]

    def test_threshold_silly_forwards_everything_once(self) -> None:
        levels = forwarding_levels("silly")
        assert sorted(levels) == sorted(RANKS)
        assert len(levels) == len(set(levels))

    @pytest.mark.parametrize("threshold", [None, "", "verbose"])
    def test_unknown_threshold_still_forwards_mandatory_levels(self, threshold) -> None:
        assert forwarding_levels(threshold) == ["remote", "audit"]

    @pytest.mark.parametrize("threshold", list(RANKS))
    def test_rank_rule_for_every_threshold(self, threshold: str) -> None:
        levels = set(forwarding_levels(threshold))
        assert {"remote", "audit"} <= levels
        for name, rank in RANKS.items():
            if rank <= RANKS[threshold]:
                assert name in levels
            elif name not in ("remote", "audit"):
                assert name not in levels

    def test_custom_rank_table(self) -> None:
        ranks = {"fatal": 0, "error": 1, "remote": 5, "audit": 6}
        assert forwarding_levels("fatal", ranks) == ["fatal", "remote", "audit"]


# ================================
# Wrapping
# ================================


class TestWrapLevel:
    def test_calls_base_with_original_arguments_then_publishes(self, bus) -> None:
        base = Recorder()
        wrapped = wrap_level("error", base, BusPublisher(lambda: bus))

        wrapped("x", {"code": 7})

        assert base.calls == [("x", {"code": 7})]
        assert len(bus.published) == 1
        subject, envelope = bus.published[0]
        assert subject == "log"
        assert envelope["data"] == {"level": "error", "msg": ["x", {"code": 7}]}
        assert envelope["correlationId"]

    def test_wrapping_is_idempotent(self, bus) -> None:
        base = Recorder()
        publisher = BusPublisher(lambda: bus)
        once = wrap_level("warn", base, publisher)
        twice = wrap_level("warn", once, publisher)

        assert twice is once
        twice("hello")
        assert len(bus.published) == 1
        assert base.calls == [("hello",)]

    def test_wrapped_function_is_marked(self, bus) -> None:
        base = Recorder()
        wrapped = wrap_level("warn", base, BusPublisher(lambda: bus))
        assert is_forwarding(wrapped)
        assert not is_forwarding(base)
        assert wrapped.__wrapped__ is base

    def test_console_output_survives_publish_failure(self) -> None:
        def explode():
            raise RuntimeError("no bus")

        base = Recorder()
        wrapped = wrap_level("error", base, BusPublisher(explode))
        wrapped("still logged")
        assert base.calls == [("still logged",)]


class TestWrapAudit:
    def test_audit_shape(self, bus) -> None:
        base = Recorder()
        audit = wrap_audit(base, BusPublisher(lambda: bus))

        audit("u1", "did thing", {"x": 1})

        assert base.calls == [("[u1] did thing",)]
        _, envelope = bus.published[0]
        assert envelope["data"] == {"userId": "u1", "msg": "did thing", "payload": {"x": 1}, "level": "audit"}

    def test_payload_is_optional(self, bus) -> None:
        audit = wrap_audit(Recorder(), BusPublisher(lambda: bus))
        audit("u2", "logged in")
        assert bus.published[0][1]["data"]["payload"] is None


class TestInstallForwarding:
    def test_only_forwarded_levels_are_wrapped(self, bus) -> None:
        functions = {name: Recorder() for name in RANKS}
        table = install_forwarding(functions, "warn", BusPublisher(lambda: bus))

        assert {name for name, fn in table.items() if is_forwarding(fn)} == {"error", "warn", "remote", "audit"}
        assert table["info"] is functions["info"]

    def test_does_not_mutate_input_table(self, bus) -> None:
        functions = {name: Recorder() for name in RANKS}
        install_forwarding(functions, "silly", BusPublisher(lambda: bus))
        assert not any(is_forwarding(fn) for fn in functions.values())

    def test_missing_base_function_is_skipped(self, bus) -> None:
        functions = {"error": Recorder(), "remote": Recorder()}
        table = install_forwarding(functions, "warn", BusPublisher(lambda: bus))
        assert set(table) == {"error", "remote"}
        assert is_forwarding(table["error"])
        assert is_forwarding(table["remote"])

    def test_info_not_forwarded_error_forwarded(self, bus) -> None:
        functions = {name: Recorder() for name in RANKS}
        table = install_forwarding(functions, "warn", BusPublisher(lambda: bus))

        table["info"]("quiet")
        assert bus.published == []
        assert functions["info"].calls == [("quiet",)]

        table["error"]("x")
        assert bus.published[0][1]["data"] == {"level": "error", "msg": ["x"]}
