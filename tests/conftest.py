# tests/conftest.py
"""Shared test fixtures and helpers.

Test Helpers:
- EchoParser: RecordParser that passes payloads through unchanged
- write_history(): writes raw history lines for replay tests
- history_path: fixture with a fresh history file location

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from lincheck.contracts import UNRESOLVED, Completion, Resolved

UNRESOLVED_PLACEHOLDER = "<unresolved>"


class EchoParser:
    """Parser that returns payloads as-is.

    A completion payload of null decodes to UNRESOLVED. An invocation
    payload of null is rejected, so tests can exercise parser failures.
    """

    def __init__(self, placeholder: Any = UNRESOLVED_PLACEHOLDER) -> None:
        self.placeholder = placeholder
        self.synthesized = 0

    def decode_invocation(self, data: Any) -> Any:
        if data is None:
            raise ValueError("invocation payload must not be null")
        return data

    def decode_completion(self, data: Any) -> Completion:
        if data is None:
            return UNRESOLVED
        return Resolved(data)

    def synthesize_unresolved_completion(self) -> Any:
        self.synthesized += 1
        return self.placeholder


def call(proc: int, data: Any) -> str:
    """Build one invocation line."""
    return json.dumps({"action": "call", "proc": proc, "data": data})


def ret(proc: int, data: Any) -> str:
    """Build one completion line."""
    return json.dumps({"action": "return", "proc": proc, "data": data})


def write_history(path: Path, lines: Iterable[str]) -> Path:
    """Write history lines, each terminated by a newline."""
    path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return path


@pytest.fixture
def history_path(tmp_path: Path) -> Path:
    return tmp_path / "history.jsonl"


@pytest.fixture
def echo_parser() -> EchoParser:
    return EchoParser()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
