# src/lincheck/cluster/protocols.py
"""Protocol for the cluster node client consumed by test drivers.

A node runs an agent reachable over a TCP-style connection; the client
sends it database and nemesis commands by name. Transport, timeouts and
retries belong to the client implementation, not to lincheck.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class NodeClientProtocol(Protocol):
    """Synchronous remote control of one cluster node.

    Every method blocks until the node answers and raises on failure
    (implementations typically raise NodeOperationError, or TimeoutError
    when the node did not answer in time).
    """

    def set_up_database(self, name: str) -> None:
        """Install and start the named database on the node."""
        ...

    def tear_down_database(self, name: str) -> None:
        """Stop and remove the named database."""
        ...

    def set_up_nemesis(self, name: str) -> None:
        """Prepare the named fault injector (e.g. install iptables rules)."""
        ...

    def invoke_nemesis(self, name: str, *args: str) -> None:
        """Trigger the named fault injector with optional arguments."""
        ...

    def tear_down_nemesis(self, name: str) -> None:
        """Heal the fault and remove the injector."""
        ...
