# src/lincheck/history/replayer.py
"""History replayer - reconstructs call/return events from a history file.

The replayer reads records strictly in file order (no timestamps are
trusted) and correlates each process's invocation with its completion:

1. An invocation allocates the next event id, emits a CALL event and marks
   the process pending.
2. A resolved completion emits a RETURN event carrying the pending id of
   its process. An unresolved completion emits nothing and leaves the
   process pending.
3. At end of log every still-pending process gets a synthesized RETURN
   built from the parser's placeholder value, in ascending process order.

Any malformed line, rejected payload, or (in strict mode) broken pairing
aborts the whole replay; partial results are discarded.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from lincheck.contracts import (
    Action,
    CorrelationError,
    CorrelationPolicy,
    Event,
    EventKind,
    OperationRecord,
    PayloadDecodeError,
    RecordDecodeError,
    Resolved,
    Unresolved,
)
from lincheck.core.logging import bind_history
from lincheck.history.parser import RecordParser

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReplayedHistory:
    """Ordered events reconstructed from one history, plus replay counters.

    Attributes:
        events: CALL/RETURN events in emission order
        call_count: Number of CALL events
        return_count: RETURN events produced from resolved completions in the log
        synthesized_count: RETURN events synthesized at end of log
        anomaly_count: Pairing violations tolerated in lenient mode
    """

    events: tuple[Event, ...]
    call_count: int
    return_count: int
    synthesized_count: int
    anomaly_count: int = 0

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)


class HistoryReplayer:
    """Replays a history file into an oracle-ready event sequence.

    Example:
        replayer = HistoryReplayer(KvParser())
        history = replayer.replay("history.jsonl")
        for event in history:
            ...

    A replayer holds no state between replays; each call starts with a
    fresh pending map and an event id counter at 0.
    """

    def __init__(
        self,
        parser: RecordParser,
        *,
        correlation: CorrelationPolicy = CorrelationPolicy.STRICT,
    ) -> None:
        """Initialize replayer.

        Args:
            parser: Adapter-supplied parser capability
            correlation: STRICT rejects broken call/return pairing,
                LENIENT tolerates it with warnings
        """
        self._parser = parser
        self._correlation = correlation

    @property
    def correlation(self) -> CorrelationPolicy:
        return self._correlation

    def replay(self, path: str | Path) -> ReplayedHistory:
        """Replay the history file at path.

        Raises:
            OSError: If the file cannot be opened or read
            RecordDecodeError: If a line is not a well-formed record
            PayloadDecodeError: If the parser rejects a payload
            CorrelationError: In strict mode, if pairing is broken
        """
        with open(path, "rb") as handle:
            return self.replay_lines(handle, source=str(path))

    def replay_lines(self, lines: Iterable[str | bytes], *, source: str = "<lines>") -> ReplayedHistory:
        """Replay records from any iterable of lines (one JSON record each).

        Args:
            lines: Lines with or without trailing newlines
            source: Label used in error messages and logs
        """
        with bind_history(source):
            return self._replay_lines(lines, source)

    def _replay_lines(self, lines: Iterable[str | bytes], source: str) -> ReplayedHistory:
        events: list[Event] = []
        # proc -> id of its most recent unmatched call
        pending: dict[int, int] = {}
        # Lenient mode: ids orphaned by a second call for the same proc
        displaced: list[int] = []
        next_id = 0
        return_count = 0
        anomaly_count = 0

        for line_number, line in enumerate(lines, start=1):
            record = self._parse_record(line, source, line_number)

            if record.action == Action.INVOKE:
                value = self._decode(self._parser.decode_invocation, record, source, line_number)
                if record.proc in pending:
                    previous_id = pending[record.proc]
                    if self._correlation == CorrelationPolicy.STRICT:
                        raise CorrelationError(
                            source,
                            line_number,
                            record.proc,
                            f"call issued while call {previous_id} is still outstanding",
                        )
                    logger.warning(
                        "history_call_overwritten",
                        line=line_number,
                        proc=record.proc,
                        displaced_id=previous_id,
                    )
                    displaced.append(previous_id)
                    anomaly_count += 1

                event_id = next_id
                next_id += 1
                events.append(Event(kind=EventKind.CALL, id=event_id, value=value))
                pending[record.proc] = event_id
                continue

            completion = self._decode(self._parser.decode_completion, record, source, line_number)
            if isinstance(completion, Unresolved):
                continue
            if not isinstance(completion, Resolved):
                raise TypeError(
                    f"{type(self._parser).__name__}.decode_completion must return Resolved or UNRESOLVED, "
                    f"got {type(completion).__name__}"
                )

            if record.proc not in pending:
                if self._correlation == CorrelationPolicy.STRICT:
                    raise CorrelationError(source, line_number, record.proc, "completion without an outstanding call")
                logger.warning("history_orphan_completion_dropped", line=line_number, proc=record.proc)
                anomaly_count += 1
                continue

            events.append(Event(kind=EventKind.RETURN, id=pending.pop(record.proc), value=completion.value))
            return_count += 1

        synthesized_count = 0
        unfinished = sorted(displaced) + [event_id for _proc, event_id in sorted(pending.items())]
        for event_id in unfinished:
            events.append(
                Event(
                    kind=EventKind.RETURN,
                    id=event_id,
                    value=self._parser.synthesize_unresolved_completion(),
                )
            )
            synthesized_count += 1

        logger.info(
            "history_replayed",
            calls=next_id,
            returns=return_count,
            synthesized=synthesized_count,
            anomalies=anomaly_count,
        )

        return ReplayedHistory(
            events=tuple(events),
            call_count=next_id,
            return_count=return_count,
            synthesized_count=synthesized_count,
            anomaly_count=anomaly_count,
        )

    @staticmethod
    def _parse_record(line: str | bytes, source: str, line_number: int) -> OperationRecord:
        stripped = line.rstrip(b"\r\n") if isinstance(line, bytes) else line.rstrip("\r\n")
        if not stripped:
            raise RecordDecodeError(source, line_number, "empty line")
        try:
            return OperationRecord.model_validate_json(stripped)
        except ValidationError as e:
            reasons = "; ".join(f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in e.errors())
            raise RecordDecodeError(source, line_number, reasons) from e

    @staticmethod
    def _decode(
        decode: Callable[[Any], Any],
        record: OperationRecord,
        source: str,
        line_number: int,
    ) -> Any:
        try:
            return decode(record.data)
        except ValueError as e:
            raise PayloadDecodeError(source, line_number, record.action.value, record.proc, str(e)) from e


def replay_history(
    path: str | Path,
    parser: RecordParser,
    *,
    correlation: CorrelationPolicy = CorrelationPolicy.STRICT,
) -> list[Event]:
    """Replay a history file and return its events.

    Convenience wrapper around HistoryReplayer for callers that only need
    the event sequence.
    """
    return list(HistoryReplayer(parser, correlation=correlation).replay(path).events)
