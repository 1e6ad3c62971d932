"""Tests for LinearizabilityChecker."""

from itertools import count

import pytest
from structlog.testing import capture_logs

from lincheck.contracts import Event, EventKind, MalformedHistoryError, Verdict
from lincheck.oracle import checker as checker_module
from lincheck.oracle.checker import LinearizabilityChecker
from lincheck.oracle.model import Model, partition_by_call_key
from lincheck.oracle.protocols import BudgetedOracleProtocol, OracleProtocol
from lincheck.testing.kv import KvRequest, KvResponse, kv_model


def C(event_id: int, value: object) -> Event:
    return Event(kind=EventKind.CALL, id=event_id, value=value)


def R(event_id: int, value: object) -> Event:
    return Event(kind=EventKind.RETURN, id=event_id, value=value)


def register_model() -> Model:
    """Single register: ("w", v) writes v, ("r", None) reads; returns carry the value read."""

    def step(state: int, request: tuple[str, int | None], response: int | None) -> tuple[bool, int]:
        op, value = request
        if op == "w":
            assert value is not None
            return True, value
        return response == state, state

    return Model(name="register", init=lambda: 0, step=step)


@pytest.fixture
def checker() -> LinearizabilityChecker:
    return LinearizabilityChecker()


class TestCheckerProtocols:
    def test_satisfies_oracle_protocols(self, checker: LinearizabilityChecker) -> None:
        assert isinstance(checker, OracleProtocol)
        assert isinstance(checker, BudgetedOracleProtocol)
        assert checker.name == "wgl"


class TestLinearizability:
    def test_empty_history_is_linearizable(self, checker: LinearizabilityChecker) -> None:
        assert checker.check(register_model(), []) is True

    def test_sequential_history(self, checker: LinearizabilityChecker) -> None:
        events = [C(0, ("w", 1)), R(0, None), C(1, ("r", None)), R(1, 1)]

        assert checker.check(register_model(), events) is True

    def test_stale_read_after_completed_write(self, checker: LinearizabilityChecker) -> None:
        events = [C(0, ("w", 1)), R(0, None), C(1, ("r", None)), R(1, 0)]

        assert checker.check(register_model(), events) is False

    def test_concurrent_read_may_see_either_value(self, checker: LinearizabilityChecker) -> None:
        for observed in (0, 1):
            events = [C(0, ("w", 1)), C(1, ("r", None)), R(1, observed), R(0, None)]
            assert checker.check(register_model(), events) is True

    def test_concurrent_read_cannot_see_unwritten_value(self, checker: LinearizabilityChecker) -> None:
        events = [C(0, ("w", 1)), C(1, ("r", None)), R(1, 2), R(0, None)]

        assert checker.check(register_model(), events) is False

    def test_reads_cannot_go_backwards(self, checker: LinearizabilityChecker) -> None:
        # Both reads overlap the write, but the first read (which finished
        # before the second started) saw the new value and the second the old.
        events = [
            C(0, ("w", 1)),
            C(1, ("r", None)),
            R(1, 1),
            C(2, ("r", None)),
            R(2, 0),
            R(0, None),
        ]

        assert checker.check(register_model(), events) is False

    def test_requires_backtracking(self, checker: LinearizabilityChecker) -> None:
        # The search first tries w1 first, which fails; w2 then w1 works.
        events = [
            C(0, ("w", 1)),
            C(1, ("w", 2)),
            C(2, ("r", None)),
            R(0, None),
            R(1, None),
            R(2, 1),
            C(3, ("r", None)),
            R(3, 1),
        ]

        assert checker.check(register_model(), events) is True

    def test_ids_need_not_be_dense(self, checker: LinearizabilityChecker) -> None:
        events = [C(10, ("w", 5)), R(10, None), C(42, ("r", None)), R(42, 5)]

        assert checker.check(register_model(), events) is True

    def test_check_within_decides_small_history(self, checker: LinearizabilityChecker) -> None:
        good = [C(0, ("w", 1)), R(0, None)]
        bad = [C(0, ("r", None)), R(0, 7)]

        assert checker.check_within(register_model(), good, timeout_seconds=10) == Verdict.LINEARIZABLE
        assert checker.check_within(register_model(), bad, timeout_seconds=10) == Verdict.NOT_LINEARIZABLE

    def test_check_within_rejects_non_positive_budget(self, checker: LinearizabilityChecker) -> None:
        with pytest.raises(ValueError):
            checker.check_within(register_model(), [], timeout_seconds=0)


class TestPartitions:
    def _model(self) -> Model:
        def step(state: int, request: tuple[str, str, int | None], response: int | None) -> tuple[bool, int]:
            op, _key, value = request
            if op == "w":
                assert value is not None
                return True, value
            return response == state, state

        return Model(
            name="multi-register",
            init=lambda: 0,
            step=step,
            partition=partition_by_call_key(lambda request: request[1]),
        )

    def test_independent_keys(self, checker: LinearizabilityChecker) -> None:
        events = [
            C(0, ("w", "a", 1)),
            C(1, ("w", "b", 2)),
            R(0, None),
            R(1, None),
            C(2, ("r", "a", None)),
            C(3, ("r", "b", None)),
            R(2, 1),
            R(3, 2),
        ]

        assert checker.check(self._model(), events) is True

    def test_violation_in_one_partition_fails_history(self, checker: LinearizabilityChecker) -> None:
        events = [
            C(0, ("w", "a", 1)),
            R(0, None),
            C(1, ("r", "a", None)),
            R(1, 1),
            C(2, ("w", "b", 2)),
            R(2, None),
            C(3, ("r", "b", None)),
            R(3, 0),
        ]

        assert checker.check(self._model(), events) is False


class TestMalformedHistories:
    @pytest.mark.parametrize(
        "events",
        [
            [R(0, None)],
            [C(0, ("w", 1))],
            [C(0, ("w", 1)), C(0, ("w", 2)), R(0, None), R(0, None)],
            [C(0, ("w", 1)), R(0, None), R(0, None)],
        ],
        ids=["return-without-call", "call-without-return", "duplicate-call", "duplicate-return"],
    )
    def test_unpaired_events_raise(self, checker: LinearizabilityChecker, events: list[Event]) -> None:
        with pytest.raises(MalformedHistoryError):
            checker.check(register_model(), events)


class TestViolationReport:
    def test_violation_names_operation_via_model(self, checker: LinearizabilityChecker) -> None:
        events = [
            C(0, KvRequest(op="put", key="x", value="1")),
            R(0, KvResponse()),
            C(1, KvRequest(op="get", key="x")),
            R(1, KvResponse(value="")),
        ]

        with capture_logs() as logs:
            assert checker.check(kv_model(), events) is False

        violations = [log for log in logs if log["event"] == "linearizability_violation"]
        assert len(violations) == 1
        assert violations[0]["model"] == "kv"
        assert violations[0]["operation"] == "put('x', '1')"

    def test_violation_without_describe_uses_operation_index(self, checker: LinearizabilityChecker) -> None:
        events = [C(0, ("w", 1)), R(0, None), C(1, ("r", None)), R(1, 0)]

        with capture_logs() as logs:
            assert checker.check(register_model(), events) is False

        violations = [log for log in logs if log["event"] == "linearizability_violation"]
        assert violations[0]["operation"] == "operation 0"

    def test_linearizable_history_logs_no_violation(self, checker: LinearizabilityChecker) -> None:
        events = [C(0, ("w", 1)), R(0, None), C(1, ("r", None)), R(1, 1)]

        with capture_logs() as logs:
            assert checker.check(register_model(), events) is True

        assert not [log for log in logs if log["event"] == "linearizability_violation"]


class TestTimeBudget:
    def test_exhausted_budget_is_unknown(self, checker: LinearizabilityChecker, monkeypatch: pytest.MonkeyPatch) -> None:
        # Each clock reading advances by an hour, so the first poll is past the deadline
        ticks = count(start=0.0, step=3600.0)
        monkeypatch.setattr(checker_module, "_DEADLINE_POLL_INTERVAL", 1)
        monkeypatch.setattr(checker_module.time, "monotonic", lambda: next(ticks))

        events = [C(0, ("w", 1)), R(0, None), C(1, ("r", None)), R(1, 1)]

        assert checker.check_within(register_model(), events, timeout_seconds=1.0) == Verdict.UNKNOWN
