# tests/property/__init__.py
"""Property-based tests for flowwire.

Invariants checked for ALL generated inputs rather than hand-picked
examples: the type round-trip law, compatibility rules, idempotence of
the cleanup pass and determinism of activation.
"""
