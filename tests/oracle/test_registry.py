"""Tests for AdapterRegistry plugin discovery."""

import pytest

from lincheck.contracts import AdapterNotFoundError
from lincheck.oracle.checker import LinearizabilityChecker
from lincheck.oracle.hookspecs import hookimpl
from lincheck.oracle.model import Model
from lincheck.oracle.registry import AdapterRegistry, HistoryAdapter
from lincheck.testing.kv import KvParser
from tests.conftest import EchoParser


def _echo_adapter(name: str) -> HistoryAdapter:
    return HistoryAdapter(
        name=name,
        description="echo payloads",
        model_factory=lambda: Model(name=name, init=lambda: None, step=lambda s, i, o: (True, s)),
        parser_factory=EchoParser,
    )


class EchoAdapterPlugin:
    @hookimpl
    def lincheck_get_adapters(self) -> list[HistoryAdapter]:
        return [_echo_adapter("echo")]


class AlwaysTrueOracle:
    name = "always-true"

    def check(self, model: Model, events: object) -> bool:
        return True


class OraclePlugin:
    @hookimpl
    def lincheck_get_oracles(self) -> list[type]:
        return [AlwaysTrueOracle]


@pytest.fixture
def registry() -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register_builtin_plugins()
    return registry


class TestBuiltinPlugins:
    def test_kv_adapter_registered(self, registry: AdapterRegistry) -> None:
        adapter = registry.get_adapter("kv")

        assert adapter.create_model().name == "kv"
        assert isinstance(adapter.create_parser(), KvParser)

    def test_factories_create_fresh_instances(self, registry: AdapterRegistry) -> None:
        adapter = registry.get_adapter("kv")

        assert adapter.create_parser() is not adapter.create_parser()

    def test_wgl_oracle_registered(self, registry: AdapterRegistry) -> None:
        assert registry.get_oracle_names() == ["wgl"]
        assert isinstance(registry.create_oracle("wgl"), LinearizabilityChecker)


class TestRegistration:
    def test_third_party_plugins(self, registry: AdapterRegistry) -> None:
        registry.register(EchoAdapterPlugin())
        registry.register(OraclePlugin())

        assert [adapter.name for adapter in registry.get_adapters()] == ["echo", "kv"]
        assert isinstance(registry.create_oracle("always-true"), AlwaysTrueOracle)

    def test_duplicate_adapter_name_rejected(self, registry: AdapterRegistry) -> None:
        registry.register(EchoAdapterPlugin())

        class DuplicatePlugin:
            @hookimpl
            def lincheck_get_adapters(self) -> list[HistoryAdapter]:
                return [_echo_adapter("kv")]

        with pytest.raises(ValueError, match="Duplicate adapter name: 'kv'"):
            registry.register(DuplicatePlugin())

        # Registry still works with the previously registered plugins
        assert [adapter.name for adapter in registry.get_adapters()] == ["echo", "kv"]

    def test_unknown_adapter(self, registry: AdapterRegistry) -> None:
        with pytest.raises(AdapterNotFoundError) as exc_info:
            registry.get_adapter("bank")

        assert exc_info.value.name == "bank"
        assert exc_info.value.available == ["kv"]
        assert "available: kv" in str(exc_info.value)

    def test_unknown_oracle(self, registry: AdapterRegistry) -> None:
        with pytest.raises(AdapterNotFoundError, match="Unknown oracle 'knossos'"):
            registry.create_oracle("knossos")

    def test_empty_registry(self) -> None:
        with pytest.raises(AdapterNotFoundError, match="available: none"):
            AdapterRegistry().get_adapter("kv")
