# tests/fixtures/__init__.py
"""Shared test data for flowwire tests.

Available data:
- TEST_REGISTRY: node type registry covering every category and capability
- PERSON_SHAPE: JSON shape declared by the jsonConsumer target handle
"""

from tests.fixtures.registry import PERSON_SHAPE, TEST_REGISTRY

__all__ = [
    "PERSON_SHAPE",
    "TEST_REGISTRY",
]
