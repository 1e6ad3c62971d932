# src/lincheck/contracts/__init__.py
"""Shared contracts for cross-boundary data types.

Records, events, completion results, enums, and exceptions used by the
recorder, replayer, oracle, and cluster wrappers are defined here.

This package is a LEAF MODULE with no outbound dependencies to core,
history, or oracle.

Import patterns:
    from lincheck.contracts import Event, EventKind, Resolved, UNRESOLVED
"""

from lincheck.contracts.completion import UNRESOLVED, Completion, Resolved, Unresolved
from lincheck.contracts.enums import Action, CorrelationPolicy, EventKind, Verdict
from lincheck.contracts.errors import (
    AdapterNotFoundError,
    CorrelationError,
    HistoryError,
    MalformedHistoryError,
    NodeOperationError,
    PayloadDecodeError,
    RecordDecodeError,
    RecordEncodingError,
    RecorderClosedError,
)
from lincheck.contracts.events import Event
from lincheck.contracts.records import OperationRecord

__all__ = [
    "UNRESOLVED",
    "Action",
    "AdapterNotFoundError",
    "Completion",
    "CorrelationError",
    "CorrelationPolicy",
    "Event",
    "EventKind",
    "HistoryError",
    "MalformedHistoryError",
    "NodeOperationError",
    "OperationRecord",
    "PayloadDecodeError",
    "RecordDecodeError",
    "RecordEncodingError",
    "RecorderClosedError",
    "Resolved",
    "Unresolved",
    "Verdict",
]
