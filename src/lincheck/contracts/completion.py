# src/lincheck/contracts/completion.py
"""Tagged result of decoding a completion record.

A parser returns Resolved(value) when the operation's outcome is known, or
UNRESOLVED when the operation may still take effect (for example the client
gave up waiting). Replay emits no return event for an unresolved completion;
the operation stays pending until a later completion or end-of-log synthesis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, TypeAlias


@dataclass(frozen=True)
class Resolved:
    """Completion whose outcome is known."""

    value: Any


class Unresolved:
    """Completion whose outcome is indeterminate.

    Use the UNRESOLVED singleton rather than instantiating this class.
    """

    _instance: Unresolved | None = None

    def __new__(cls) -> Unresolved:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __reduce__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED: Final = Unresolved()

Completion: TypeAlias = Resolved | Unresolved
