# src/flowwire/engine/validator.py
"""Connection validation: may this proposed edge be created?

validate() is the edge-creation hook. It never raises; every failure
(malformed candidate, unknown node, missing handle, category conflict,
type mismatch, JSON shape violation, duplicate) comes back as
ValidationResult(allowed=False, reason=...).

Checks run in a fixed order and the first rejection wins:
    1. malformed candidate
    2. catalog readiness
    3. endpoint nodes and handles
    4. category policy
    5. type compatibility
    6. JSON shape (when the target declares one)
    7. duplicate edge
"""

from __future__ import annotations

import json
from collections.abc import Collection, Mapping
from typing import Any

import structlog

from flowwire.contracts.compatibility import check_compatibility
from flowwire.contracts.datatypes import is_json_like
from flowwire.contracts.enums import HandleDirection
from flowwire.contracts.errors import CatalogNotReadyError, NodeTypeNotFound
from flowwire.contracts.events import CatalogNotReadyEvent, ConnectionRejectedEvent, EventSink
from flowwire.contracts.graph import ConnectionCandidate, Edge, HandleSpec, Node
from flowwire.contracts.json_shape import conforms_to_shape, is_json_value
from flowwire.contracts.results import ValidationResult
from flowwire.contracts.types import EdgeID, HandleId, NodeID, split_handle_id
from flowwire.core.catalog import NodeTypeCatalog
from flowwire.core.config import ValidationSettings
from flowwire.core.graph import GraphSnapshot

logger = structlog.get_logger(__name__)

_NO_VALUE = object()


def validate(
    candidate: ConnectionCandidate,
    catalog: NodeTypeCatalog,
    edges: Collection[Edge],
    nodes: Mapping[NodeID, Node],
    *,
    settings: ValidationSettings | None = None,
    sink: EventSink | None = None,
    ignore_edge: EdgeID | None = None,
) -> ValidationResult:
    """Decide whether ``candidate`` may become an edge.

    Args:
        candidate: Proposed connection
        catalog: Node type catalog (may still be loading)
        edges: Existing edges, for duplicate detection
        nodes: Node lookup by id
        settings: Validator behavior; defaults apply when None
        sink: Optional receiver for structured events
        ignore_edge: Existing edge to leave out of duplicate detection
            (the cleanup pass re-validates edges against themselves)
    """
    settings = settings if settings is not None else ValidationSettings()

    missing = candidate.missing_fields
    if missing:
        return _reject(candidate, f"malformed connection: missing {', '.join(missing)}", sink)

    if not catalog.is_ready:
        return _catalog_not_ready(settings, sink)

    try:
        result = _validate_endpoints(candidate, catalog, nodes, settings)
    except CatalogNotReadyError:
        return _catalog_not_ready(settings, sink)
    except NodeTypeNotFound as exc:
        result = ValidationResult.deny(str(exc))

    if result is None and settings.reject_duplicate_edges:
        result = _check_duplicate(candidate, edges, ignore_edge)

    if result is not None:
        return _reject(candidate, result.reason or "connection rejected", sink)

    logger.debug(
        "connection_allowed",
        source=candidate.source,
        source_handle=candidate.source_handle,
        target=candidate.target,
        target_handle=candidate.target_handle,
    )
    return ValidationResult.allow()


class ConnectionValidator:
    """validate() bound to a catalog, a node lookup, existing edges and settings.

    Hosts install ``is_valid_connection`` as their edge-creation hook.
    ``nodes`` and ``edges`` are read on every call, so a live mapping
    and list owned by the host stay current.
    """

    def __init__(
        self,
        catalog: NodeTypeCatalog,
        nodes: Mapping[NodeID, Node],
        edges: Collection[Edge] = (),
        *,
        settings: ValidationSettings | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self._catalog = catalog
        self._nodes = nodes
        self._edges = edges
        self._settings = settings if settings is not None else ValidationSettings()
        self._sink = sink

    @classmethod
    def for_snapshot(
        cls,
        catalog: NodeTypeCatalog,
        snapshot: GraphSnapshot,
        *,
        settings: ValidationSettings | None = None,
        sink: EventSink | None = None,
    ) -> ConnectionValidator:
        return cls(catalog, snapshot.node_lookup, snapshot.edges, settings=settings, sink=sink)

    @property
    def settings(self) -> ValidationSettings:
        return self._settings

    def validate(self, candidate: ConnectionCandidate) -> ValidationResult:
        return validate(
            candidate,
            self._catalog,
            self._edges,
            self._nodes,
            settings=self._settings,
            sink=self._sink,
        )

    def is_valid_connection(self, candidate: ConnectionCandidate) -> bool:
        return self.validate(candidate).allowed


def _validate_endpoints(
    candidate: ConnectionCandidate,
    catalog: NodeTypeCatalog,
    nodes: Mapping[NodeID, Node],
    settings: ValidationSettings,
) -> ValidationResult | None:
    """Node, handle, category, type and shape checks. None means "passed"."""
    if (
        candidate.source is None
        or candidate.target is None
        or candidate.source_handle is None
        or candidate.target_handle is None
    ):
        return ValidationResult.deny("malformed connection")

    source_node = nodes.get(candidate.source)
    if source_node is None:
        return ValidationResult.deny(f"node not found: {candidate.source}")
    target_node = nodes.get(candidate.target)
    if target_node is None:
        return ValidationResult.deny(f"node not found: {candidate.target}")

    source_handle = catalog.get_handle(source_node.type, candidate.source_handle, HandleDirection.SOURCE)
    if source_handle is None:
        return ValidationResult.deny(
            f"handle not found: source handle '{candidate.source_handle}' on node type '{source_node.type}'"
        )
    target_handle = catalog.get_handle(target_node.type, candidate.target_handle, HandleDirection.TARGET)
    if target_handle is None:
        return ValidationResult.deny(
            f"handle not found: target handle '{candidate.target_handle}' on node type '{target_node.type}'"
        )

    category_reason = catalog.policy.check(catalog.category_of(source_node), catalog.category_of(target_node))
    if category_reason is not None:
        return ValidationResult.deny(category_reason)

    compatibility = check_compatibility(source_handle.declared_type, target_handle.declared_type)
    if not compatibility.compatible:
        return ValidationResult.deny(compatibility.error_message or "incompatible handle types")

    if settings.enforce_json_shapes:
        return _check_json_shape(source_node, candidate.source_handle, target_handle)
    return None


def _check_json_shape(source_node: Node, source_handle: HandleId, target_handle: HandleSpec) -> ValidationResult | None:
    if target_handle.json_shape is None or not is_json_like(target_handle.declared_type):
        return None
    value = _current_json_value(source_node.data, source_handle)
    if value is _NO_VALUE:
        return None
    if conforms_to_shape(value, target_handle.json_shape):
        return None
    return ValidationResult.deny(
        f"JSON shape mismatch: value on '{source_handle}' of node '{source_node.id}' "
        f"does not match the shape expected by '{target_handle.id}'"
    )


def _current_json_value(data: Mapping[str, Any], handle_id: HandleId) -> Any:
    """JSON value a node currently exposes on a source handle.

    Looks at ``data["output"][handle]`` first, then ``data["output"]``.
    JSON text is decoded. Returns a sentinel when there is no usable
    value (missing, undecodable, or not a JSON type), in which case
    nothing can be checked.
    """
    output = data.get("output")
    if output is None:
        return _NO_VALUE
    bare, _ = split_handle_id(handle_id)
    if isinstance(output, Mapping) and bare in output:
        output = output[bare]
    if isinstance(output, str):
        try:
            return json.loads(output)
        except (ValueError, RecursionError):
            return _NO_VALUE
    if not is_json_value(output):
        return _NO_VALUE
    return output


def _check_duplicate(
    candidate: ConnectionCandidate,
    edges: Collection[Edge],
    ignore_edge: EdgeID | None,
) -> ValidationResult | None:
    endpoints = (candidate.source, candidate.source_handle, candidate.target, candidate.target_handle)
    for edge in edges:
        if edge.id != ignore_edge and edge.endpoints == endpoints:
            return ValidationResult.deny(f"duplicate connection: edge '{edge.id}' already links these handles")
    return None


def _catalog_not_ready(settings: ValidationSettings, sink: EventSink | None) -> ValidationResult:
    allowed = settings.allow_when_catalog_not_ready
    logger.info("catalog_not_ready", allowed=allowed)
    if sink is not None:
        sink(CatalogNotReadyEvent(allowed=allowed))
    if allowed:
        return ValidationResult.allow("catalog not ready: connection allowed without type checks")
    return ValidationResult.deny("catalog not ready: connections are blocked until node types are loaded")


def _reject(candidate: ConnectionCandidate, reason: str, sink: EventSink | None) -> ValidationResult:
    logger.info("connection_rejected", source=candidate.source, target=candidate.target, reason=reason)
    if sink is not None:
        sink(ConnectionRejectedEvent(source=candidate.source, target=candidate.target, reason=reason))
    return ValidationResult.deny(reason)
