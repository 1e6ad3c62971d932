# src/lincheck/oracle/checker.py
"""Linearizability checker (Wing & Gong search with Lowe's memoization).

The history is a doubly linked list of call and return entries in event
order. The search repeatedly picks a call that can be linearized next
(every operation that returned before it started has already been
linearized, i.e. it appears before the first remaining return), applies the
model's step function, and removes ("lifts") the call and its return from
the list. When the head of the list is a return whose call cannot be
placed, the most recent choice is undone. A cache of
(linearized set, state) pairs prunes configurations already explored.

Partitions produced by the model are independent and checked separately;
the history is linearizable only if every partition is.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from lincheck.contracts import Event, MalformedHistoryError, Verdict
from lincheck.oracle.model import Model

logger = structlog.get_logger(__name__)

# Deadline is polled every this many search steps
_DEADLINE_POLL_INTERVAL = 256


class _BudgetExhausted(Exception):
    """Internal signal: the time budget ran out mid-search."""


@dataclass(eq=False)
class _Entry:
    value: Any
    id: int
    # Set on call entries: the matching return entry
    match: _Entry | None = None
    # Set on return entries: the matching call entry
    call: _Entry | None = None
    prev: _Entry | None = None
    next: _Entry | None = None


def _build_list(events: Sequence[Event]) -> tuple[_Entry, int]:
    """Link events into a list headed by a sentinel, renumbering ids densely.

    Returns:
        (head sentinel, number of operations)

    Raises:
        MalformedHistoryError: If calls and returns do not pair up
    """
    dense: dict[int, int] = {}
    calls: dict[int, _Entry] = {}
    returned: set[int] = set()
    head = _Entry(value=None, id=-1)
    tail = head

    for event in events:
        if event.is_call:
            if event.id in dense:
                raise MalformedHistoryError(f"duplicate call for event id {event.id}")
            dense[event.id] = len(dense)
            entry = _Entry(value=event.value, id=dense[event.id])
            calls[event.id] = entry
        else:
            if event.id not in calls:
                raise MalformedHistoryError(f"return for event id {event.id} has no preceding call")
            if event.id in returned:
                raise MalformedHistoryError(f"duplicate return for event id {event.id}")
            returned.add(event.id)
            entry = _Entry(value=event.value, id=dense[event.id], call=calls[event.id])
            calls[event.id].match = entry
        entry.prev = tail
        tail.next = entry
        tail = entry

    missing = sorted(set(calls) - returned)
    if missing:
        raise MalformedHistoryError(f"calls without returns for event ids {missing}")
    return head, len(dense)


def _lift(entry: _Entry) -> None:
    # A call is always followed by its own return, so entry.next is set
    assert entry.prev is not None and entry.next is not None and entry.match is not None
    entry.prev.next = entry.next
    entry.next.prev = entry.prev
    match = entry.match
    assert match.prev is not None
    match.prev.next = match.next
    if match.next is not None:
        match.next.prev = match.prev


def _unlift(entry: _Entry) -> None:
    assert entry.prev is not None and entry.next is not None and entry.match is not None
    match = entry.match
    assert match.prev is not None
    match.prev.next = match
    if match.next is not None:
        match.next.prev = match
    entry.prev.next = entry
    entry.next.prev = entry


class LinearizabilityChecker:
    """Oracle deciding linearizability by exhaustive backtracking search.

    Implements both OracleProtocol and BudgetedOracleProtocol.

    Example:
        checker = LinearizabilityChecker()
        ok = checker.check(model, events)
        verdict = checker.check_within(model, events, timeout_seconds=30)
    """

    name = "wgl"

    def check(self, model: Model, events: Sequence[Event]) -> bool:
        """Return True if events are linearizable under model.

        Raises:
            MalformedHistoryError: If calls and returns do not pair up
        """
        return self._check(model, events, deadline=None) == Verdict.LINEARIZABLE

    def check_within(self, model: Model, events: Sequence[Event], timeout_seconds: float) -> Verdict:
        """Check with a time budget.

        Returns:
            LINEARIZABLE, NOT_LINEARIZABLE, or UNKNOWN if the budget ran out
            before every partition was decided.
        """
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        return self._check(model, events, deadline=time.monotonic() + timeout_seconds)

    def _check(self, model: Model, events: Sequence[Event], deadline: float | None) -> Verdict:
        partitions = model.partition_events(events)
        for index, partition in enumerate(partitions):
            try:
                stuck = self._check_partition(model, partition, deadline)
            except _BudgetExhausted:
                logger.warning(
                    "linearizability_check_timed_out",
                    model=model.name,
                    partition=index,
                    partitions=len(partitions),
                )
                return Verdict.UNKNOWN
            if stuck is not None:
                logger.info(
                    "linearizability_violation",
                    model=model.name,
                    partition=index,
                    operation=_describe(model, stuck),
                )
                return Verdict.NOT_LINEARIZABLE
        return Verdict.LINEARIZABLE

    @staticmethod
    def _check_partition(model: Model, events: Sequence[Event], deadline: float | None) -> _Entry | None:
        """Search one partition.

        Returns:
            None if the partition is linearizable, otherwise the return
            entry of the earliest operation that could not be placed.
        """
        head, _count = _build_list(events)
        # Bit i set <=> operation i has been linearized
        linearized = 0
        cache: dict[int, list[Any]] = {}
        calls: list[tuple[_Entry, Any]] = []
        state = model.init()
        entry = head.next
        steps = 0

        while head.next is not None:
            steps += 1
            if deadline is not None and steps % _DEADLINE_POLL_INTERVAL == 0 and time.monotonic() > deadline:
                raise _BudgetExhausted()

            assert entry is not None
            if entry.match is not None:
                ok, new_state = model.step(state, entry.value, entry.match.value)
                if ok:
                    new_linearized = linearized | (1 << entry.id)
                    seen = cache.setdefault(new_linearized, [])
                    if not any(model.equal(existing, new_state) for existing in seen):
                        seen.append(new_state)
                        calls.append((entry, state))
                        state = new_state
                        linearized = new_linearized
                        _lift(entry)
                        entry = head.next
                        continue
                entry = entry.next
            else:
                # A return reached the front: its call cannot be placed here
                if not calls:
                    return entry
                entry, state = calls.pop()
                linearized &= ~(1 << entry.id)
                _unlift(entry)
                entry = entry.next

        return None


def _describe(model: Model, returned: _Entry) -> str:
    assert returned.call is not None
    if model.describe_operation is None:
        return f"operation {returned.id}"
    return model.describe_operation(returned.call.value, returned.value)
