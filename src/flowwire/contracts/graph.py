"""Graph element contracts: handles, edges, nodes and activation records.

These are transient views over data owned by the graph provider. The core
never mutates them; node data changes only through a Commit sink.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from flowwire.contracts.datatypes import ANY, DataType
from flowwire.contracts.enums import ActivationSource, HandleDirection, NodeCategory
from flowwire.contracts.json_shape import JsonShape
from flowwire.contracts.types import EdgeID, HandleId, NodeID, make_edge_id, make_handle_id, make_node_id


@dataclass(frozen=True, slots=True)
class HandleSpec:
    """Handle declaration for a node TYPE (no node id yet).

    Attributes:
        id: Handle id, unique within the node type
        direction: SOURCE (output) or TARGET (input)
        declared_type: Accepted/emitted DataType
        json_shape: Optional expected structure for JSON inputs
    """

    id: HandleId
    direction: HandleDirection
    declared_type: DataType = ANY
    json_shape: JsonShape | None = None

    def bind(self, node_id: NodeID) -> Handle:
        """Attach this declaration to a concrete node."""
        return Handle(
            id=self.id,
            node_id=node_id,
            direction=self.direction,
            declared_type=self.declared_type,
            json_shape=self.json_shape,
        )


@dataclass(frozen=True, slots=True)
class Handle:
    """A typed, directional port on a concrete node."""

    id: HandleId
    node_id: NodeID
    direction: HandleDirection
    declared_type: DataType = ANY
    json_shape: JsonShape | None = None


@dataclass(frozen=True, slots=True)
class Edge:
    """A committed connection between two handles."""

    id: EdgeID
    source: NodeID
    source_handle: HandleId
    target: NodeID
    target_handle: HandleId

    @property
    def endpoints(self) -> tuple[NodeID, HandleId, NodeID, HandleId]:
        return (self.source, self.source_handle, self.target, self.target_handle)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Edge:
        """Build an edge from a graph-provider edge dict.

        Accepts both ``source``/``sourceHandle`` and
        ``source``/``source_handle`` spellings. A missing id is derived
        from the endpoints.

        Raises:
            ValueError: If an endpoint is missing or blank
        """
        source = make_node_id(raw.get("source") or "")
        target = make_node_id(raw.get("target") or "")
        source_handle = make_handle_id(raw.get("sourceHandle") or raw.get("source_handle") or "")
        target_handle = make_handle_id(raw.get("targetHandle") or raw.get("target_handle") or "")
        edge_id = raw.get("id") or f"{source}:{source_handle}->{target}:{target_handle}"
        return cls(
            id=make_edge_id(str(edge_id)),
            source=source,
            source_handle=source_handle,
            target=target,
            target_handle=target_handle,
        )


@dataclass(frozen=True, slots=True)
class ConnectionCandidate:
    """A proposed edge, as produced by a drag-to-connect gesture.

    Fields are optional because the UI can hand over partial connections;
    the validator rejects those as malformed before any type logic runs.
    """

    source: NodeID | None
    source_handle: HandleId | None
    target: NodeID | None
    target_handle: HandleId | None

    @classmethod
    def from_edge(cls, edge: Edge) -> ConnectionCandidate:
        return cls(
            source=edge.source,
            source_handle=edge.source_handle,
            target=edge.target,
            target_handle=edge.target_handle,
        )

    @property
    def missing_fields(self) -> tuple[str, ...]:
        """Names of endpoint fields that are missing or blank."""
        values = {
            "source": self.source,
            "source_handle": self.source_handle,
            "target": self.target,
            "target_handle": self.target_handle,
        }
        return tuple(name for name, value in values.items() if not value or not value.strip())


@dataclass(frozen=True, slots=True)
class Node:
    """Snapshot of one node as supplied by the graph provider.

    ``data`` is frozen to a MappingProxyType on construction; the provider
    remains the single owner of the real data.
    """

    id: NodeID
    type: str
    category: NodeCategory = NodeCategory.OTHER
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Node:
        """Build a node from a graph-provider node dict (``id``, ``type``, ``data``).

        A ``category`` key is honored when present; otherwise the catalog
        decides.

        Raises:
            ValueError: If id is missing/blank or category is unknown
        """
        category = raw.get("category")
        return cls(
            id=make_node_id(raw.get("id") or ""),
            type=str(raw.get("type") or ""),
            category=NodeCategory(category) if category else NodeCategory.OTHER,
            data=raw.get("data") or {},
        )


@dataclass(frozen=True, slots=True)
class ActivationRecord:
    """Derived activation state for one node in one evaluation tick."""

    node_id: NodeID
    is_active: bool
    is_head: bool
    source: ActivationSource

    @classmethod
    def failed(cls, node_id: NodeID) -> ActivationRecord:
        """Safe default used when evaluating a node raised."""
        return cls(node_id=node_id, is_active=False, is_head=False, source=ActivationSource.HEAD)
