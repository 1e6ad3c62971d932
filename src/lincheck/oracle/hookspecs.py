# src/lincheck/oracle/hookspecs.py
"""pluggy hook specifications for adapters and oracles.

Adapters pair a consistency model with the parser that decodes its
history payloads. Third-party packages expose them through the
"lincheck" setuptools entry point group.

Usage (implementing an adapter plugin):
    from lincheck.oracle.hookspecs import hookimpl

    class MyAdapterPlugin:
        @hookimpl
        def lincheck_get_adapters(self):
            return [HistoryAdapter(name="bank", ...)]
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from lincheck.oracle.protocols import OracleProtocol
    from lincheck.oracle.registry import HistoryAdapter

PROJECT_NAME = "lincheck"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class LincheckAdapterSpec:
    """Hook specifications for adapter and oracle plugins."""

    @hookspec
    def lincheck_get_adapters(self) -> list["HistoryAdapter"]:  # type: ignore[empty-body]
        """Return history adapters (model + parser pairs)."""

    @hookspec
    def lincheck_get_oracles(self) -> list[type["OracleProtocol"]]:  # type: ignore[empty-body]
        """Return oracle classes. Each must be constructible without arguments."""
