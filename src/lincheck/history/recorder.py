# src/lincheck/history/recorder.py
"""Append-only operation history recorder.

The test driver calls record_invocation() just before issuing an operation
and record_completion() once the outcome is observed. Each call appends one
JSON line to the history file:

    {"action":"call","proc":3,"data":{"op":"put","key":"x","value":"1"}}
    {"action":"return","proc":3,"data":{"value":"1"}}

File order is the only ordering the replayer trusts, so appends from
concurrent clients are serialized under a lock and every record is written
with a single write() followed by a flush. The file is never rewritten.
"""

from __future__ import annotations

import math
import os
from collections.abc import Callable
from pathlib import Path
from threading import Lock
from types import TracebackType
from typing import IO, Any

import structlog
from pydantic_core import PydanticSerializationError, to_jsonable_python

from lincheck.contracts import Action, OperationRecord, RecordEncodingError, RecorderClosedError
from lincheck.core.config import HistorySettings

logger = structlog.get_logger(__name__)

# rw-r--r--
HISTORY_FILE_MODE = 0o644

Encoder = Callable[[Any], Any]


class HistoryRecorder:
    """Durably appends invocation and completion records to a history file.

    Usage:
        with HistoryRecorder("history.jsonl") as recorder:
            recorder.record_invocation(proc, request)
            response = client.call(request)
            recorder.record_completion(proc, response)

    The context manager guarantees the file handle is released on every
    exit path. open()/close() are available for callers that manage the
    lifetime themselves; close() is idempotent.

    Thread Safety:
        Safe for concurrent use. Appends are serialized under an internal
        lock so lines from different processes never interleave.

    Durability:
        Every record is flushed to the OS. With fsync=True each record is
        also fsynced; otherwise a hard crash may lose the tail of the log.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        fsync: bool = False,
        encoder: Encoder = to_jsonable_python,
    ) -> None:
        """Initialize recorder. The file is not opened until open()/__enter__.

        Args:
            path: History file; created if absent, appended to if present
            fsync: fsync after every record
            encoder: Converts an operation object into JSON-compatible data.
                The default handles pydantic models, dataclasses, enums and
                JSON primitives.
        """
        self._path = Path(path)
        self._fsync = fsync
        self._encoder = encoder
        self._lock = Lock()
        self._handle: IO[str] | None = None
        self._records_written = 0

    @classmethod
    def from_settings(cls, settings: HistorySettings, *, encoder: Encoder = to_jsonable_python) -> HistoryRecorder:
        """Create a recorder for the configured history path and fsync mode.

        Raises:
            ValueError: If settings has no history path
        """
        if settings.path is None:
            raise ValueError("history.path must be set to record a history")
        return cls(settings.path, fsync=settings.fsync, encoder=encoder)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def fsync(self) -> bool:
        return self._fsync

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def records_written(self) -> int:
        """Number of records appended since this recorder was created."""
        return self._records_written

    def open(self) -> HistoryRecorder:
        """Open the history file for appending.

        Raises:
            OSError: If the file cannot be created or opened for writing
            RuntimeError: If the recorder is already open
        """
        with self._lock:
            if self._handle is not None:
                raise RuntimeError(f"History recorder for {self._path} is already open")
            fd = os.open(self._path, os.O_CREAT | os.O_WRONLY | os.O_APPEND, HISTORY_FILE_MODE)
            try:
                self._handle = os.fdopen(fd, "a", encoding="utf-8")
            except BaseException:
                os.close(fd)
                raise
        logger.debug("history_recorder_opened", path=str(self._path), fsync=self._fsync)
        return self

    def close(self) -> None:
        """Release the file handle. Safe to call more than once."""
        with self._lock:
            handle = self._handle
            self._handle = None
        if handle is None:
            return
        handle.close()
        logger.debug("history_recorder_closed", path=str(self._path), records=self._records_written)

    def __enter__(self) -> HistoryRecorder:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def record_invocation(self, proc: int, operation: Any) -> None:
        """Record that proc is about to issue operation.

        Raises:
            RecordEncodingError: If operation cannot be serialized
            RecorderClosedError: If the recorder is not open
            OSError: If the write fails
        """
        self._record(proc, Action.INVOKE, operation)

    def record_completion(self, proc: int, operation: Any) -> None:
        """Record the observed outcome of proc's outstanding operation.

        Raises:
            RecordEncodingError: If operation cannot be serialized
            RecorderClosedError: If the recorder is not open
            OSError: If the write fails
        """
        self._record(proc, Action.COMPLETE, operation)

    def _record(self, proc: int, action: Action, operation: Any) -> None:
        # Encode outside the lock; a bad payload must not write anything
        line = self._encode(proc, action, operation) + "\n"

        with self._lock:
            if self._handle is None:
                raise RecorderClosedError(str(self._path))
            self._handle.write(line)
            self._handle.flush()
            if self._fsync:
                os.fsync(self._handle.fileno())
            self._records_written += 1

    def _encode(self, proc: int, action: Action, operation: Any) -> str:
        try:
            _reject_non_finite(operation)
            data = self._encoder(operation)
            _reject_non_finite(data)
            record = OperationRecord(action=action, proc=proc, data=data)
            return record.to_line()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise RecordEncodingError(proc, operation, str(e)) from e


def _reject_non_finite(data: Any) -> None:
    """Raise ValueError if plain JSON-shaped data holds NaN or Infinity.

    JSON has no representation for them; writing null instead would turn
    a completed operation into one whose outcome looks unknown.
    """
    if isinstance(data, float):
        if math.isnan(data) or math.isinf(data):
            raise ValueError(f"Cannot record non-finite float: {data}. Use None for missing values, not NaN.")
    elif isinstance(data, dict):
        for value in data.values():
            _reject_non_finite(value)
    elif isinstance(data, list | tuple):
        for item in data:
            _reject_non_finite(item)
