# src/lincheck/testing/__init__.py
"""Reference adapters for exercising lincheck end to end.

Not part of the recording/replay core: real target systems supply their
own model and parser through the adapter registry.
"""
