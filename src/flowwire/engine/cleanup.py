# src/flowwire/engine/cleanup.py
"""Cleanup pass: find existing edges that no longer validate.

Edges can go stale when node types are reconfigured or the catalog
finishes loading after edges were drawn. sweep() re-runs the validator
over every edge and reports the ones to delete; it never mutates the
graph itself.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from flowwire.contracts.events import EdgeSweptEvent, EventSink
from flowwire.contracts.graph import ConnectionCandidate, Edge, Node
from flowwire.contracts.results import RemovedEdge, SweepResult
from flowwire.contracts.types import NodeID
from flowwire.core.catalog import NodeTypeCatalog
from flowwire.core.config import ValidationSettings
from flowwire.engine.validator import validate

logger = structlog.get_logger(__name__)


def sweep(
    edges: Iterable[Edge],
    catalog: NodeTypeCatalog,
    nodes: Mapping[NodeID, Node],
    *,
    settings: ValidationSettings | None = None,
    sink: EventSink | None = None,
) -> SweepResult:
    """Partition edges into kept and removed.

    While the catalog is loading nothing is removed: metadata is
    incomplete, so every edge is kept.

    Duplicates are judged against the edges kept so far, so of several
    identical edges the first survives. This makes the pass idempotent:
    ``sweep(sweep(E).kept).removed == ()``.
    """
    edge_list = tuple(edges)
    if not catalog.is_ready:
        logger.debug("sweep_skipped_catalog_not_ready", edges=len(edge_list))
        return SweepResult(kept=edge_list)

    kept: list[Edge] = []
    removed: list[RemovedEdge] = []
    for edge in edge_list:
        result = validate(
            ConnectionCandidate.from_edge(edge),
            catalog,
            kept,
            nodes,
            settings=settings,
            ignore_edge=edge.id,
        )
        if result.allowed:
            kept.append(edge)
            continue

        reason = result.reason or "connection rejected"
        removed.append(RemovedEdge(edge=edge, reason=reason))
        logger.info("edge_swept", edge_id=edge.id, reason=reason)
        if sink is not None:
            sink(EdgeSweptEvent(edge_id=edge.id, reason=reason))

    return SweepResult(kept=tuple(kept), removed=tuple(removed))
