"""Expected JSON document shapes for JSON-typed target handles.

A target handle may declare the structure it expects, for example::

    {"type": "object", "properties": {"name": {"type": "string"},
                                      "tags": {"type": "array", "optional": true,
                                               "items": {"type": "string"}}}}

conforms_to_shape() checks a concrete value against such a declaration.
Unknown shape types accept everything.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Literal

ShapeType = Literal["any", "null", "string", "number", "boolean", "array", "object"]

_SHAPE_TYPES: frozenset[str] = frozenset({"any", "null", "string", "number", "boolean", "array", "object"})


@dataclass(frozen=True, slots=True)
class JsonShape:
    """Declared structure of a JSON value."""

    type: ShapeType
    items: JsonShape | None = None
    properties: Mapping[str, JsonShape] = field(default_factory=lambda: MappingProxyType({}))
    optional: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> JsonShape:
        """Build a shape from its JSON declaration.

        Raises:
            ValueError: If the declared type is not a known shape type
        """
        shape_type = raw.get("type", "any")
        if shape_type not in _SHAPE_TYPES:
            raise ValueError(f"Unknown JSON shape type '{shape_type}'. Expected one of: {sorted(_SHAPE_TYPES)}")
        items_raw = raw.get("items")
        properties_raw = raw.get("properties") or {}
        return cls(
            type=shape_type,
            items=cls.from_dict(items_raw) if isinstance(items_raw, Mapping) else None,
            properties=MappingProxyType({str(k): cls.from_dict(v) for k, v in properties_raw.items()}),
            optional=bool(raw.get("optional", False)),
        )


def is_json_value(value: Any) -> bool:
    """True for values a JSON shape can meaningfully describe."""
    return value is None or isinstance(value, (Mapping, list, str, int, float, bool))


def conforms_to_shape(value: Any, shape: JsonShape | None) -> bool:
    """Check value against shape. A missing shape accepts everything."""
    if shape is None:
        return True
    match shape.type:
        case "any":
            return True
        case "null":
            return value is None
        case "string":
            return isinstance(value, str)
        case "number":
            if isinstance(value, bool):
                return False
            return isinstance(value, int) or (isinstance(value, float) and math.isfinite(value))
        case "boolean":
            return isinstance(value, bool)
        case "array":
            if not isinstance(value, list):
                return False
            return all(conforms_to_shape(item, shape.items) for item in value)
        case "object":
            if not isinstance(value, Mapping):
                return False
            for key, sub in shape.properties.items():
                if key not in value:
                    if sub.optional:
                        continue
                    return False
                if not conforms_to_shape(value[key], sub):
                    return False
            return True
    return True
