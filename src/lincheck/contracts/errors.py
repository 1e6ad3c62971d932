# src/lincheck/contracts/errors.py
"""Exceptions raised by history recording, replay, and checking.

I/O failures are never wrapped: OSError and its subclasses propagate to the
caller unchanged. Everything defined here derives from HistoryError so a test
driver can fail the run on any of them with a single except clause.

A non-linearizable verdict is NOT an error and has no exception.
"""

from typing import Any


class HistoryError(Exception):
    """Base class for all history subsystem errors."""


class RecorderClosedError(HistoryError):
    """Raised when recording on a recorder that is not open."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"History recorder for {path} is not open")


class RecordEncodingError(HistoryError):
    """Raised when an operation cannot be serialized to JSON.

    Nothing is written to the history when this is raised.

    Attributes:
        proc: Process that tried to record the operation
        operation: The operation object that failed to encode
    """

    def __init__(self, proc: int, operation: Any, reason: str) -> None:
        self.proc = proc
        self.operation = operation
        self.reason = reason
        super().__init__(f"Cannot encode operation for proc {proc}: {reason}")


class RecordDecodeError(HistoryError):
    """Raised when a history line is not a well-formed operation record.

    A corrupted record invalidates the causal order of everything after it,
    so replay aborts on the first one.

    Attributes:
        source: Path (or label) of the history being replayed
        line_number: 1-based line number of the bad record
        reason: What was wrong with the line
    """

    def __init__(self, source: str, line_number: int, reason: str) -> None:
        self.source = source
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"{source}:{line_number}: malformed history record: {reason}")


class PayloadDecodeError(HistoryError):
    """Raised when the parser capability rejects a record payload.

    Attributes:
        source: Path (or label) of the history being replayed
        line_number: 1-based line number of the record
        action: Action of the rejected record ("call" or "return")
        proc: Process of the rejected record
        reason: Message from the parser's ValueError
    """

    def __init__(self, source: str, line_number: int, action: str, proc: int, reason: str) -> None:
        self.source = source
        self.line_number = line_number
        self.action = action
        self.proc = proc
        self.reason = reason
        super().__init__(f"{source}:{line_number}: parser rejected {action} payload for proc {proc}: {reason}")


class CorrelationError(HistoryError):
    """Raised in strict mode when a record breaks call/return pairing.

    Two cases are detected:
    - a call for a proc that already has an unmatched call
    - a resolved completion for a proc with no unmatched call

    Attributes:
        source: Path (or label) of the history being replayed
        line_number: 1-based line number of the offending record
        proc: Process whose pairing was broken
    """

    def __init__(self, source: str, line_number: int, proc: int, reason: str) -> None:
        self.source = source
        self.line_number = line_number
        self.proc = proc
        self.reason = reason
        super().__init__(f"{source}:{line_number}: proc {proc}: {reason}")


class MalformedHistoryError(HistoryError, ValueError):
    """Raised when an oracle receives events whose calls and returns do not pair up."""


class AdapterNotFoundError(HistoryError, LookupError):
    """Raised when no adapter or oracle is registered under a name.

    Attributes:
        name: Requested name
        available: Names that are registered
    """

    def __init__(self, kind: str, name: str, available: list[str]) -> None:
        self.kind = kind
        self.name = name
        self.available = available
        listed = ", ".join(available) if available else "none"
        super().__init__(f"Unknown {kind} '{name}' (available: {listed})")


class NodeOperationError(HistoryError):
    """Raised by cluster node clients when a remote operation fails.

    Attributes:
        operation: Operation name (e.g. "set_up_database")
        target: Database or nemesis name the operation addressed
        reason: Failure description from the node
    """

    def __init__(self, operation: str, target: str, reason: str) -> None:
        self.operation = operation
        self.target = target
        self.reason = reason
        super().__init__(f"{operation}({target}) failed: {reason}")
