# src/flowwire/engine/diagnostics.py
"""Developer diagnostics for handles and connections.

Nothing here is on the validation hot path. These helpers answer
"why does my node not see its input?" for tooling and debugging.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping

import structlog

from flowwire.contracts.compatibility import compatible
from flowwire.contracts.datatypes import BOOLEAN, DataType, parse, render
from flowwire.contracts.enums import HandleDirection, ValueKind
from flowwire.contracts.errors import CatalogNotReadyError, NodeTypeNotFound
from flowwire.contracts.graph import ConnectionCandidate, Edge, HandleSpec, Node
from flowwire.contracts.results import (
    ConnectionDiagnostic,
    FlowDiagnostic,
    HandleDiagnostic,
    MismatchDiagnosis,
)
from flowwire.contracts.types import TRIGGER_HANDLE, HandleId, NodeID, is_trigger_handle, split_handle_id
from flowwire.core.catalog import NodeTypeCatalog
from flowwire.core.catalog.providers import HandlesFound, PatternFallbackProvider, UniversalDefaultProvider
from flowwire.core.config import ValidationSettings
from flowwire.core.graph import GraphSnapshot
from flowwire.engine.validator import validate

logger = structlog.get_logger(__name__)


def _is_data_type_code(text: str) -> bool:
    try:
        ValueKind(text)
    except ValueError:
        return False
    return True


def _handle_type(
    handle_id: HandleId,
    node: Node | None,
    catalog: NodeTypeCatalog | None,
) -> DataType | None:
    """Best guess at the DataType a target handle carries."""
    _, suffix = split_handle_id(handle_id)
    if suffix is not None:
        return parse(suffix)
    if node is not None and catalog is not None and catalog.is_ready:
        try:
            spec = catalog.get_handle(node.type, handle_id, HandleDirection.TARGET)
        except NodeTypeNotFound:
            spec = None
        if spec is not None:
            return spec.declared_type
    if is_trigger_handle(handle_id):
        return BOOLEAN
    return None


def diagnose_mismatch(
    edges: Iterable[Edge],
    node_id: NodeID,
    expected_handle: str,
    *,
    catalog: NodeTypeCatalog | None = None,
    nodes: Mapping[NodeID, Node] | None = None,
) -> MismatchDiagnosis:
    """Explain why looking up ``expected_handle`` on a node finds no edge.

    Flags the classic mistake of passing a DataType code where a handle
    id was meant (e.g. "b" instead of "trigger"): when the expected id
    is a type code and an incoming handle carries that type, a
    "LIKELY BUG" suggestion names the handle to use.
    """
    incoming = [e for e in edges if e.target == node_id]
    actual: dict[HandleId, None] = {}
    for edge in incoming:
        actual.setdefault(edge.target_handle, None)
    actual_handles = tuple(actual)

    matching = sum(1 for e in incoming if split_handle_id(e.target_handle)[0] == expected_handle)

    suggestions: list[str] = []
    if matching == 0 and actual_handles:
        suggestions.append(
            f'No connections found for handle "{expected_handle}". Available handles: {", ".join(actual_handles)}'
        )
        if _is_data_type_code(expected_handle):
            node = nodes.get(node_id) if nodes is not None else None
            for handle_id in actual_handles:
                carried = _handle_type(handle_id, node, catalog)
                if carried is not None and render(carried) == expected_handle:
                    bare, _ = split_handle_id(handle_id)
                    suggestions.append(
                        f'LIKELY BUG: You are looking for dataType "{expected_handle}" but should use handle ID "{bare}"'
                    )
                    if bare == TRIGGER_HANDLE:
                        suggestions.append("Use TRIGGER_HANDLE / is_trigger_handle() instead of the boolean type code")

    diagnosis = MismatchDiagnosis(
        node_id=node_id,
        expected_handle=expected_handle,
        actual_handles=actual_handles,
        matching_connections=matching,
        suggestions=tuple(suggestions),
    )
    if diagnosis.likely_bug:
        logger.warning(
            "handle_mismatch_likely_bug",
            node_id=node_id,
            expected_handle=expected_handle,
            actual_handles=list(actual_handles),
        )
    return diagnosis


def _node_handles(node: Node, catalog: NodeTypeCatalog) -> tuple[tuple[HandleSpec, ...], list[str]]:
    """Declared handles for a node plus issues found while resolving them."""
    if not catalog.is_ready:
        # Same fallback chain the catalog would end with
        for provider in (PatternFallbackProvider(), UniversalDefaultProvider()):
            result = provider.lookup(node.type)
            if isinstance(result, HandlesFound):
                return result.spec.handles, []
        return (), []
    try:
        found = catalog.resolve(node.type)
    except NodeTypeNotFound as exc:
        return (), [str(exc)]
    issues: list[str] = []
    if found.provider == UniversalDefaultProvider.name:
        issues.append(f"Node type '{node.type}' is not declared; using default any-typed handles")
    return found.spec.handles, issues


def _handle_connections(node: Node, handle: HandleSpec, edges: Iterable[Edge]) -> list[str]:
    connections = []
    for edge in edges:
        if handle.direction is HandleDirection.SOURCE:
            node_id, handle_id = edge.source, edge.source_handle
        else:
            node_id, handle_id = edge.target, edge.target_handle
        if node_id == node.id and split_handle_id(handle_id)[0] == handle.id:
            connections.append(edge.id)
    return connections


def _type_match(edge: Edge, nodes: Mapping[NodeID, Node], catalog: NodeTypeCatalog) -> bool:
    source = nodes.get(edge.source)
    target = nodes.get(edge.target)
    if source is None or target is None or not catalog.is_ready:
        return True
    try:
        source_handle = catalog.get_handle(source.type, edge.source_handle, HandleDirection.SOURCE)
        target_handle = catalog.get_handle(target.type, edge.target_handle, HandleDirection.TARGET)
    except (CatalogNotReadyError, NodeTypeNotFound):
        return True
    if source_handle is None or target_handle is None:
        return True
    return compatible(source_handle.declared_type, target_handle.declared_type)


def analyze_flow_handles(
    snapshot: GraphSnapshot,
    catalog: NodeTypeCatalog,
    *,
    settings: ValidationSettings | None = None,
) -> FlowDiagnostic:
    """Whole-graph report: every handle, every connection, global issues."""
    nodes = snapshot.node_lookup
    edges = snapshot.edges
    global_issues: list[str] = []
    if not catalog.is_ready:
        global_issues.append("Node type catalog is not ready; handle and type checks are provisional")

    handle_diagnostics: list[HandleDiagnostic] = []
    for node in snapshot.nodes:
        handles, node_issues = _node_handles(node, catalog)
        for handle in handles:
            connections = _handle_connections(node, handle, edges)
            handle_diagnostics.append(
                HandleDiagnostic(
                    node_id=node.id,
                    node_type=node.type,
                    handle_id=handle.id,
                    direction=handle.direction,
                    data_type=render(handle.declared_type),
                    is_connected=bool(connections),
                    connections=tuple(connections),
                    issues=tuple(node_issues),
                )
            )
        if not handles and node_issues:
            global_issues.extend(node_issues)

    connection_diagnostics: list[ConnectionDiagnostic] = []
    for edge in edges:
        result = validate(
            ConnectionCandidate.from_edge(edge),
            catalog,
            edges,
            nodes,
            settings=settings,
            ignore_edge=edge.id,
        )
        connection_diagnostics.append(
            ConnectionDiagnostic(
                edge=edge,
                is_valid=result.allowed,
                type_match=_type_match(edge, nodes, catalog),
                issues=() if result.allowed or result.reason is None else (result.reason,),
            )
        )

    by_endpoints: dict[tuple[str, str, str, str], list[str]] = defaultdict(list)
    for edge in edges:
        by_endpoints[edge.endpoints].append(edge.id)
    duplicates = [ids for ids in by_endpoints.values() if len(ids) > 1]
    for ids in duplicates:
        global_issues.append(f"Duplicate connections found: {', '.join(ids)}")

    diagnostic = FlowDiagnostic(
        handles=tuple(handle_diagnostics),
        connections=tuple(connection_diagnostics),
        global_issues=tuple(global_issues),
    )
    logger.info(
        "flow_handles_analyzed",
        nodes=snapshot.node_count,
        handles=len(diagnostic.handles),
        connections=len(diagnostic.connections),
        valid_connections=diagnostic.valid_connections,
        invalid_connections=diagnostic.invalid_connections,
        unconnected_handles=diagnostic.unconnected_handles,
    )
    return diagnostic
