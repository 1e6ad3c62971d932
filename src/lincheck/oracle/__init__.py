# src/lincheck/oracle/__init__.py
"""Consistency oracles: model type, protocols, checker, and plugin registry."""

from lincheck.oracle.checker import LinearizabilityChecker
from lincheck.oracle.model import Model, partition_by_call_key
from lincheck.oracle.protocols import BudgetedOracleProtocol, OracleProtocol

__all__ = [
    "BudgetedOracleProtocol",
    "LinearizabilityChecker",
    "Model",
    "OracleProtocol",
    "partition_by_call_key",
]
