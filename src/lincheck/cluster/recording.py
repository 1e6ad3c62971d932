# src/lincheck/cluster/recording.py
"""Node client wrapper that records every command to the history.

Nemesis activity is recorded under its own process id so the history shows
when faults were active relative to client operations. An invocation is
recorded before the command is sent and a completion after the node
answers (or fails); the collaborator's exception is re-raised unchanged.
Adapters recognise these payloads by their "op" and leave them out of the
operations they check (see lincheck.testing.kv).

    {"action":"call","proc":100,"data":{"op":"invoke_nemesis","target":"partition","args":["n1"]}}
    {"action":"return","proc":100,"data":{"op":"invoke_nemesis","target":"partition","ok":true,"error":null,"timeout":false}}
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from lincheck.cluster.protocols import NodeClientProtocol
from lincheck.history.recorder import HistoryRecorder

logger = structlog.get_logger(__name__)

# Values of the "op" field in node command payloads
NODE_OPERATIONS = frozenset(
    {
        "set_up_database",
        "tear_down_database",
        "set_up_nemesis",
        "invoke_nemesis",
        "tear_down_nemesis",
    }
)


@dataclass(frozen=True)
class NodeCommand:
    """Invocation payload for a node command."""

    op: str
    target: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class NodeCommandResult:
    """Completion payload for a node command.

    timeout=True means the node did not answer; the command may or may
    not have taken effect.
    """

    op: str
    target: str
    ok: bool
    error: str | None = None
    timeout: bool = False


class RecordingNodeClient:
    """Wraps a NodeClientProtocol so each command is recorded as an operation.

    Example:
        with HistoryRecorder(path) as recorder:
            node = RecordingNodeClient(client, recorder, proc=NEMESIS_PROC)
            node.set_up_nemesis("partition")
            node.invoke_nemesis("partition", "n1", "n2")

    Thread Safety:
        One wrapper per proc. A proc has at most one outstanding command,
        so a wrapper must not be shared between threads.
    """

    def __init__(self, client: NodeClientProtocol, recorder: HistoryRecorder, proc: int) -> None:
        self._client = client
        self._recorder = recorder
        self._proc = proc

    @property
    def proc(self) -> int:
        return self._proc

    def set_up_database(self, name: str) -> None:
        self._call("set_up_database", name, (), lambda: self._client.set_up_database(name))

    def tear_down_database(self, name: str) -> None:
        self._call("tear_down_database", name, (), lambda: self._client.tear_down_database(name))

    def set_up_nemesis(self, name: str) -> None:
        self._call("set_up_nemesis", name, (), lambda: self._client.set_up_nemesis(name))

    def invoke_nemesis(self, name: str, *args: str) -> None:
        self._call("invoke_nemesis", name, args, lambda: self._client.invoke_nemesis(name, *args))

    def tear_down_nemesis(self, name: str) -> None:
        self._call("tear_down_nemesis", name, (), lambda: self._client.tear_down_nemesis(name))

    def _call(self, op: str, target: str, args: tuple[str, ...], send: Callable[[], None]) -> None:
        self._recorder.record_invocation(self._proc, NodeCommand(op=op, target=target, args=list(args)))
        try:
            send()
        except TimeoutError as e:
            self._recorder.record_completion(
                self._proc,
                NodeCommandResult(op=op, target=target, ok=False, error=str(e) or "timed out", timeout=True),
            )
            logger.warning("node_command_timed_out", op=op, target=target, proc=self._proc)
            raise
        except Exception as e:
            self._recorder.record_completion(
                self._proc,
                NodeCommandResult(op=op, target=target, ok=False, error=str(e)),
            )
            logger.warning("node_command_failed", op=op, target=target, proc=self._proc, error=str(e))
            raise
        self._recorder.record_completion(self._proc, NodeCommandResult(op=op, target=target, ok=True))
