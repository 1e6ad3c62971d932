# src/lincheck/core/logging.py
"""Structured logging for lincheck.

configure_logging() points structlog and the stdlib root logger at one
handler whose ProcessorFormatter renders either JSON lines or console
text. Library modules never configure logging; they obtain a logger with
structlog.get_logger(__name__) and log event names with keyword fields:

    logger.warning("history_orphan_completion_dropped", line=12, proc=3)

bind_history() attaches the history being replayed or verified to every
line logged inside it, including lines from the oracle, which never sees
the file path.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

# Settings-file discovery and hook-call tracing; kept at WARNING or above
_NOISY_LOGGERS: tuple[str, ...] = (
    "dynaconf",
    "pluggy",
)


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Drop ProcessorFormatter's bookkeeping keys before rendering."""
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and stdlib logging.

    Safe to call repeatedly; each call replaces the root handler.

    Args:
        json_output: Render one JSON object per line instead of console text.
        level: Root log level (DEBUG, INFO, WARNING, ERROR).
        stream: Destination for log lines, stdout by default. The CLI uses
            stderr so replayed events and verdicts on stdout stay parseable.
    """
    log_level = getattr(logging, level.upper())

    # Applied to structlog events and to foreign stdlib records alike
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: list[Any]
    if json_output:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguration must reach loggers created before it
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(
            processors=[_remove_internal_fields, *renderer],
            foreign_pre_chain=shared_processors,
        )
    )

    root = logging.getLogger()
    root.handlers = []
    root.addHandler(handler)
    root.setLevel(log_level)

    noisy_level = max(log_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(noisy_level)


@contextmanager
def bind_history(source: str) -> Iterator[None]:
    """Add history=source to every log line emitted in this context."""
    with structlog.contextvars.bound_contextvars(history=source):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound logger named after the calling module."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
