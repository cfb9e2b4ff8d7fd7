# src/flowwire/core/canonical.py
"""
Canonical JSON serialization for deterministic fingerprints.

Node data and connection topology are fingerprinted to key the activation
cache. Fingerprints must be identical for equal data regardless of dict
insertion order, so data is serialized per RFC 8785/JCS (rfc8785 package)
before hashing.

Node data is owned by the graph provider and may hold values JSON cannot
express (sets, NaN, arbitrary objects). fingerprint() falls back to
repr_hash() for those; repr is not stable across Python versions, which
is acceptable for an in-process cache key.
"""

from __future__ import annotations

import hashlib
import math
from collections.abc import Mapping
from typing import Any

import rfc8785

CANONICAL_VERSION = "sha256-rfc8785-v1"


def _normalize_value(obj: Any) -> Any:
    """Convert a single value to a JSON-safe primitive.

    Raises:
        ValueError: If value is NaN or Infinity
        TypeError: If value has no JSON representation
    """
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError(f"Cannot canonicalize non-finite float: {obj}.")
        return obj
    if obj is None or isinstance(obj, str | int | bool):
        return obj
    raise TypeError(f"Cannot canonicalize value of type {type(obj).__name__}")


def _normalize_for_canonical(data: Any) -> Any:
    """Recursively normalize a data structure for canonical JSON."""
    if isinstance(data, Mapping):
        return {str(k): _normalize_for_canonical(v) for k, v in data.items()}
    if isinstance(data, list | tuple):
        return [_normalize_for_canonical(v) for v in data]
    return _normalize_value(data)


def canonical_json(obj: Any) -> str:
    """Produce canonical JSON for hashing.

    Returns:
        Canonical JSON string (no whitespace, sorted keys)

    Raises:
        ValueError: If data contains NaN or Infinity
        TypeError: If data contains types that cannot be serialized
    """
    normalized = _normalize_for_canonical(obj)
    result: bytes = rfc8785.dumps(normalized)
    return result.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of canonical JSON."""
    canonical = canonical_json(obj)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def repr_hash(obj: Any) -> str:
    """Hash of repr(obj) for data that cannot be canonicalized.

    NOT deterministic across Python versions; use only for in-process keys.
    """
    return hashlib.sha256(repr(obj).encode("utf-8")).hexdigest()


def fingerprint(obj: Any) -> str:
    """stable_hash() when possible, repr_hash() otherwise.

    The prefix keeps the two hash spaces apart so a repr hash can never
    collide with a canonical one.
    """
    try:
        return f"c:{stable_hash(obj)}"
    except (TypeError, ValueError):
        return f"r:{repr_hash(obj)}"
