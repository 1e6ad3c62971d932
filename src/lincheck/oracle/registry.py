# src/lincheck/oracle/registry.py
"""Adapter and oracle registry backed by pluggy.

Usage:
    registry = AdapterRegistry()
    registry.register_builtin_plugins()

    adapter = registry.get_adapter("kv")
    oracle = registry.create_oracle("wgl")
    verify_history(path, adapter.create_model(), adapter.create_parser(), oracle=oracle)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pluggy
import structlog

from lincheck.contracts import AdapterNotFoundError
from lincheck.history.parser import RecordParser
from lincheck.oracle.hookspecs import PROJECT_NAME, LincheckAdapterSpec, hookimpl
from lincheck.oracle.model import Model
from lincheck.oracle.protocols import OracleProtocol

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HistoryAdapter:
    """Registration record tying a target system's model to its parser.

    Factories are called per verification so adapters may hold
    per-run state without leaking it between runs.
    """

    name: str
    description: str
    model_factory: Callable[[], Model]
    parser_factory: Callable[[], RecordParser]

    def create_model(self) -> Model:
        return self.model_factory()

    def create_parser(self) -> RecordParser:
        return self.parser_factory()


class BuiltinPlugin:
    """Registers the adapters and oracle shipped with lincheck."""

    @hookimpl
    def lincheck_get_adapters(self) -> list[HistoryAdapter]:
        from lincheck.testing.kv import KvParser, kv_model

        return [
            HistoryAdapter(
                name="kv",
                description="Key-value store with get/put, checked per key as a register",
                model_factory=kv_model,
                parser_factory=KvParser,
            )
        ]

    @hookimpl
    def lincheck_get_oracles(self) -> list[type[OracleProtocol]]:
        from lincheck.oracle.checker import LinearizabilityChecker

        return [LinearizabilityChecker]


class AdapterRegistry:
    """Discovers, registers, and looks up adapters and oracles."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(LincheckAdapterSpec)
        self._adapters: dict[str, HistoryAdapter] = {}
        self._oracles: dict[str, type[OracleProtocol]] = {}

    def register_builtin_plugins(self) -> None:
        self.register(BuiltinPlugin())

    def load_entrypoint_plugins(self) -> int:
        """Load plugins from the "lincheck" setuptools entry point group.

        Returns:
            Number of plugins loaded
        """
        count = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        if count:
            logger.debug("lincheck_plugins_loaded", count=count)
            self._refresh_caches()
        return count

    def register(self, plugin: Any) -> None:
        """Register a plugin object implementing one or more hooks.

        Raises:
            ValueError: If an adapter or oracle name is already taken
        """
        self._pm.register(plugin)
        try:
            self._refresh_caches()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def _refresh_caches(self) -> None:
        new_adapters: dict[str, HistoryAdapter] = {}
        new_oracles: dict[str, type[OracleProtocol]] = {}

        for adapters in self._pm.hook.lincheck_get_adapters():
            for adapter in adapters:
                if adapter.name in new_adapters:
                    raise ValueError(f"Duplicate adapter name: '{adapter.name}'")
                new_adapters[adapter.name] = adapter

        for oracles in self._pm.hook.lincheck_get_oracles():
            for cls in oracles:
                if cls.name in new_oracles:
                    raise ValueError(
                        f"Duplicate oracle name: '{cls.name}'. Already registered by {new_oracles[cls.name].__name__}"
                    )
                new_oracles[cls.name] = cls

        self._adapters = new_adapters
        self._oracles = new_oracles

    def get_adapters(self) -> list[HistoryAdapter]:
        return sorted(self._adapters.values(), key=lambda adapter: adapter.name)

    def get_oracle_names(self) -> list[str]:
        return sorted(self._oracles)

    def get_adapter(self, name: str) -> HistoryAdapter:
        """Get adapter by name.

        Raises:
            AdapterNotFoundError: If no adapter has that name
        """
        if name not in self._adapters:
            raise AdapterNotFoundError("adapter", name, sorted(self._adapters))
        return self._adapters[name]

    def create_oracle(self, name: str) -> OracleProtocol:
        """Instantiate the oracle registered under name.

        Raises:
            AdapterNotFoundError: If no oracle has that name
        """
        if name not in self._oracles:
            raise AdapterNotFoundError("oracle", name, sorted(self._oracles))
        return self._oracles[name]()
