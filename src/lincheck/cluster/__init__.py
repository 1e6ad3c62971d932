# src/lincheck/cluster/__init__.py
"""Cluster node interface and its recording wrapper."""

from lincheck.cluster.protocols import NodeClientProtocol
from lincheck.cluster.recording import NODE_OPERATIONS, NodeCommand, NodeCommandResult, RecordingNodeClient

__all__ = ["NODE_OPERATIONS", "NodeClientProtocol", "NodeCommand", "NodeCommandResult", "RecordingNodeClient"]
