"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.

The one confusion this module exists to prevent: a handle id such as
``"trigger"`` and a data-type code such as ``"b"`` are both strings, and
comparing one against the other silently never matches. Handle ids are
``HandleId``; data types travel as ``DataType`` objects (see
``contracts.datatypes``) and only their wire form is a ``DataTypeCode``.
"""

from collections.abc import Callable, Mapping
from typing import Any, NewType

NodeID = NewType("NodeID", str)
"""Node identifier owned by the graph provider (e.g., 'node_3f2a')"""

EdgeID = NewType("EdgeID", str)
"""Edge identifier owned by the graph provider (e.g., 'xy-edge__a-b')"""

HandleId = NewType("HandleId", str)
"""Port identifier, unique within one node (e.g., 'trigger', 'output')"""

DataTypeCode = NewType("DataTypeCode", str)
"""Wire form of a data type (e.g., 's', 'b', 's|n')"""

Commit = Callable[[NodeID, Mapping[str, Any]], None]
"""Graph provider sink that merges a partial data patch into a node."""

# Separator between a handle id and an encoded data-type suffix
# ("output__s|n"). Only the part before it is the handle id.
HANDLE_TYPE_SEPARATOR = "__"


def _require_text(raw: str, kind: str) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"{kind} must be a string, got {type(raw).__name__}")
    value = raw.strip()
    if not value:
        raise ValueError(f"{kind} must not be empty")
    return value


def make_node_id(raw: str) -> NodeID:
    """Brand a raw string as a node identifier.

    Raises:
        ValueError: If raw is not a string or is blank
    """
    return NodeID(_require_text(raw, "node id"))


def make_edge_id(raw: str) -> EdgeID:
    """Brand a raw string as an edge identifier."""
    return EdgeID(_require_text(raw, "edge id"))


def make_handle_id(raw: str) -> HandleId:
    """Brand a raw string as a handle identifier.

    Any encoded type suffix ("output__s") is stripped; use
    split_handle_id() when the suffix is needed.

    Raises:
        ValueError: If raw is not a string or is blank
    """
    handle_id, _ = split_handle_id(raw)
    return handle_id


def make_data_type_code(raw: str) -> DataTypeCode:
    """Brand a raw string as a data-type code.

    Raises:
        ValueError: If raw is not a string or is blank
    """
    return DataTypeCode(_require_text(raw, "data type code"))


def split_handle_id(raw: str) -> tuple[HandleId, DataTypeCode | None]:
    """Split 'output__s|n' into (HandleId('output'), DataTypeCode('s|n')).

    Raises:
        ValueError: If the handle part is blank
    """
    text = _require_text(raw, "handle id")
    head, sep, tail = text.partition(HANDLE_TYPE_SEPARATOR)
    handle_id = HandleId(_require_text(head, "handle id"))
    if not sep or not tail.strip():
        return handle_id, None
    return handle_id, DataTypeCode(tail.strip())


# Well-known handles. Compare handle ids only against these, never
# against DataTypeCode values.
TRIGGER_HANDLE = HandleId("trigger")
"""Gating input: a downstream node is inactive unless something active feeds it."""

JSON_HANDLE = HandleId("j")
"""Universal JSON passthrough input; ignored for head classification."""

INPUT_HANDLE = HandleId("input")
OUTPUT_HANDLE = HandleId("output")


def is_trigger_handle(handle_id: HandleId) -> bool:
    """Return True if handle_id names the trigger gating port.

    This is the only sanctioned trigger test. Encoded type suffixes are
    ignored, so 'trigger__b' is still the trigger handle.
    """
    head, _, _ = handle_id.partition(HANDLE_TYPE_SEPARATOR)
    return head == TRIGGER_HANDLE


def is_json_passthrough_handle(handle_id: HandleId) -> bool:
    """Return True if handle_id names the universal JSON passthrough input."""
    head, _, _ = handle_id.partition(HANDLE_TYPE_SEPARATOR)
    return head == JSON_HANDLE
