# src/lincheck/history/__init__.py
"""History recording, replay, and verification."""

from lincheck.history.parser import RecordParser
from lincheck.history.recorder import HistoryRecorder
from lincheck.history.replayer import HistoryReplayer, ReplayedHistory, replay_history
from lincheck.history.verifier import HistoryVerifier, VerificationResult, verify_history

__all__ = [
    "HistoryRecorder",
    "HistoryReplayer",
    "HistoryVerifier",
    "RecordParser",
    "ReplayedHistory",
    "VerificationResult",
    "replay_history",
    "verify_history",
]
