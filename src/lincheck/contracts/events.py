# src/lincheck/contracts/events.py
"""Oracle-facing events reconstructed from a history."""

from dataclasses import dataclass
from typing import Any

from lincheck.contracts.enums import EventKind


@dataclass(frozen=True)
class Event:
    """A call or return as seen by the consistency oracle.

    Attributes:
        kind: CALL or RETURN
        id: Identifier assigned at call time and echoed by the matching return.
            Independent of the process that issued the operation.
        value: Domain value produced by the parser capability
    """

    kind: EventKind
    id: int
    value: Any

    @property
    def is_call(self) -> bool:
        return self.kind == EventKind.CALL

    @property
    def is_return(self) -> bool:
        return self.kind == EventKind.RETURN
