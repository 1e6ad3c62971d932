# src/lincheck/contracts/enums.py
"""All status codes, actions, and kinds used across subsystem boundaries.

Values of Action are written verbatim to history files, so they are part of
the on-disk format and must never change.
"""

from enum import StrEnum


class Action(StrEnum):
    """Which half of an operation a history record describes.

    Stored in the history file (record.action).
    """

    INVOKE = "call"
    COMPLETE = "return"


class EventKind(StrEnum):
    """Kind of an oracle-facing event."""

    CALL = "call"
    RETURN = "return"


class Verdict(StrEnum):
    """Outcome of checking a history against a consistency model.

    UNKNOWN means the oracle exhausted its time budget. It is inconclusive,
    not a violation.
    """

    LINEARIZABLE = "linearizable"
    NOT_LINEARIZABLE = "not_linearizable"
    UNKNOWN = "unknown"


class CorrelationPolicy(StrEnum):
    """How the replayer treats records that break call/return pairing.

    STRICT rejects the history with CorrelationError.
    LENIENT logs a warning, drops unmatched completions, and keeps
    overwritten calls balanced with synthesized returns.
    """

    STRICT = "strict"
    LENIENT = "lenient"
