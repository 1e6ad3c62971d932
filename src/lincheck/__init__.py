# src/lincheck/__init__.py
"""
Lincheck: operation history recording and linearizability verification.

A test driver records every operation's invocation and completion while a
cluster is exercised under fault injection; afterwards the history is
replayed into call/return events and handed to a consistency oracle.
"""

__version__ = "0.1.0"
