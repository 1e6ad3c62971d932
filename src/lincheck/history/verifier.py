# src/lincheck/history/verifier.py
"""History verifier - replays a history and asks an oracle for a verdict.

A non-linearizable history is a normal outcome, reported as False (or
Verdict.NOT_LINEARIZABLE); only replay and I/O failures raise.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path

import structlog

from lincheck.contracts import CorrelationPolicy, Verdict
from lincheck.core.logging import bind_history
from lincheck.history.parser import RecordParser
from lincheck.history.replayer import HistoryReplayer
from lincheck.oracle.checker import LinearizabilityChecker
from lincheck.oracle.model import Model
from lincheck.oracle.protocols import BudgetedOracleProtocol, OracleProtocol

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying one history.

    Attributes:
        verdict: Oracle verdict (UNKNOWN only when a time budget ran out)
        event_count: Events handed to the oracle
        synthesized_count: Returns synthesized for operations that never completed
        anomaly_count: Pairing violations tolerated in lenient mode
        elapsed_ms: Time spent in the oracle
    """

    verdict: Verdict
    event_count: int
    synthesized_count: int
    anomaly_count: int
    elapsed_ms: float

    @property
    def is_linearizable(self) -> bool:
        return self.verdict == Verdict.LINEARIZABLE

    @property
    def is_conclusive(self) -> bool:
        return self.verdict != Verdict.UNKNOWN


class HistoryVerifier:
    """Verifies recorded histories against a consistency model.

    Example:
        verifier = HistoryVerifier(timeout_seconds=60)
        result = verifier.verify("history.jsonl", kv_model(), KvParser())
        if not result.is_conclusive:
            ...  # budget exhausted, neither pass nor fail
        elif not result.is_linearizable:
            ...  # consistency violation
    """

    def __init__(
        self,
        oracle: OracleProtocol | None = None,
        *,
        timeout_seconds: float | None = None,
        correlation: CorrelationPolicy = CorrelationPolicy.STRICT,
    ) -> None:
        """Initialize verifier.

        Args:
            oracle: Decision procedure (default LinearizabilityChecker)
            timeout_seconds: Oracle time budget; None means unbounded
            correlation: Pairing policy passed to the replayer

        Raises:
            ValueError: If a timeout is requested from an oracle that
                cannot honour one, or the timeout is not positive
        """
        self._oracle: OracleProtocol = oracle if oracle is not None else LinearizabilityChecker()
        if timeout_seconds is not None:
            if timeout_seconds <= 0:
                raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
            if not isinstance(self._oracle, BudgetedOracleProtocol):
                raise ValueError(f"Oracle '{self._oracle.name}' does not support a time budget")
        self._timeout_seconds = timeout_seconds
        self._correlation = correlation

    @property
    def oracle(self) -> OracleProtocol:
        return self._oracle

    def verify(self, path: str | Path, model: Model, parser: RecordParser) -> VerificationResult:
        """Replay the history at path and check it against model.

        Raises:
            OSError: If the history cannot be read
            HistoryError: If replay fails (malformed record, rejected
                payload, or broken pairing in strict mode)
        """
        with bind_history(str(path)):
            return self._verify(path, model, parser)

    def _verify(self, path: str | Path, model: Model, parser: RecordParser) -> VerificationResult:
        history = HistoryReplayer(parser, correlation=self._correlation).replay(path)

        start = time.perf_counter()
        if self._timeout_seconds is None:
            verdict = Verdict.LINEARIZABLE if self._oracle.check(model, history.events) else Verdict.NOT_LINEARIZABLE
        else:
            assert isinstance(self._oracle, BudgetedOracleProtocol)
            verdict = self._oracle.check_within(model, history.events, self._timeout_seconds)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "history_verified",
            model=model.name,
            oracle=self._oracle.name,
            verdict=verdict.value,
            events=len(history),
            synthesized=history.synthesized_count,
            elapsed_ms=round(elapsed_ms, 3),
        )

        return VerificationResult(
            verdict=verdict,
            event_count=len(history),
            synthesized_count=history.synthesized_count,
            anomaly_count=history.anomaly_count,
            elapsed_ms=elapsed_ms,
        )


def verify_history(
    path: str | Path,
    model: Model,
    parser: RecordParser,
    *,
    oracle: OracleProtocol | None = None,
    correlation: CorrelationPolicy = CorrelationPolicy.STRICT,
) -> bool:
    """Check whether the history at path is linearizable under model.

    Returns:
        True if linearizable, False if the history violates the model.

    Raises:
        OSError: If the history cannot be read
        HistoryError: If replay fails
    """
    result = HistoryVerifier(oracle, correlation=correlation).verify(path, model, parser)
    return result.is_linearizable
