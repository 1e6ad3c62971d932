# src/lincheck/oracle/model.py
"""Consistency model description consumed by oracles.

A model is a sequential specification: an initial state and a step
function that says whether an operation with a given input and output is
legal in a state, and what state it leads to.
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass
from typing import Any

from lincheck.contracts import Event, MalformedHistoryError

StepFunction = Callable[[Any, Any, Any], tuple[bool, Any]]
PartitionFunction = Callable[[Sequence[Event]], list[list[Event]]]


@dataclass(frozen=True)
class Model:
    """Sequential specification of the system under test.

    Attributes:
        name: Model name for logs and reports
        init: Returns the initial state
        step: (state, input, output) -> (legal, next_state). Must not
            mutate state; the oracle backtracks to earlier states.
        equal: State equality used for memoization (default ==)
        partition: Optional split of the events into independent
            sub-histories (e.g. one per key) that are checked separately
        describe_operation: Optional (input, output) -> text, used to name
            the operation a violation is reported against
    """

    name: str
    init: Callable[[], Any]
    step: StepFunction
    equal: Callable[[Any, Any], bool] = operator.eq
    partition: PartitionFunction | None = None
    describe_operation: Callable[[Any, Any], str] | None = None

    def partition_events(self, events: Sequence[Event]) -> list[list[Event]]:
        if self.partition is None:
            return [list(events)]
        return self.partition(events)


def partition_by_call_key(key: Callable[[Any], Hashable | None]) -> PartitionFunction:
    """Build a partition function grouping operations by a key of their call value.

    Returns follow the partition of their call. Operations whose key is None
    belong to no partition and are not checked. Partitions are returned in
    the order their first call appears.

    Example:
        model = Model(..., partition=partition_by_call_key(lambda request: request.key))
    """

    def partition(events: Sequence[Event]) -> list[list[Event]]:
        groups: dict[Hashable, list[Event]] = {}
        key_of_id: dict[int, Hashable | None] = {}
        for event in events:
            if event.is_call:
                group_key = key(event.value)
                key_of_id[event.id] = group_key
            else:
                if event.id not in key_of_id:
                    raise MalformedHistoryError(f"return for event id {event.id} precedes its call")
                group_key = key_of_id[event.id]
            if group_key is None:
                continue
            groups.setdefault(group_key, []).append(event)
        return list(groups.values())

    return partition
