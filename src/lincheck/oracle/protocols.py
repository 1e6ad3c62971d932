# src/lincheck/oracle/protocols.py
"""Protocol definitions for consistency oracles.

An oracle decides whether an ordered call/return event sequence is
consistent with a model. The recorder and replayer never depend on a
particular decision procedure; any object satisfying OracleProtocol can be
passed to the verifier.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from lincheck.contracts import Event, Verdict
    from lincheck.oracle.model import Model


@runtime_checkable
class OracleProtocol(Protocol):
    """Decides consistency of a complete event sequence.

    check() is pure: no side effects, same answer for the same input.
    It may run for a long time on large histories.
    """

    name: str

    def check(self, model: "Model", events: Sequence["Event"]) -> bool:
        """Return True if events are consistent with model."""
        ...


@runtime_checkable
class BudgetedOracleProtocol(OracleProtocol, Protocol):
    """Oracle that can stop after a time budget.

    Running out of time yields Verdict.UNKNOWN, which callers must treat
    as inconclusive rather than as a violation.
    """

    def check_within(self, model: "Model", events: Sequence["Event"], timeout_seconds: float) -> "Verdict":
        """Check events against model, giving up after timeout_seconds."""
        ...
