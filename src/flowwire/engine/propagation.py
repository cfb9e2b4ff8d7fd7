# src/flowwire/engine/propagation.py
"""Write activation back into node data.

Node data is owned by the graph provider; these functions only relay a
patch through the host's Commit callback and keep no state of their own.
The next evaluation tick reads the committed data back.
"""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from flowwire.contracts.events import ActivationCommittedEvent, EventSink
from flowwire.contracts.graph import ActivationRecord
from flowwire.contracts.results import activation_changed
from flowwire.contracts.types import Commit, NodeID
from flowwire.core.graph import GraphSnapshot

logger = structlog.get_logger(__name__)


def propagate(node_id: NodeID, active: bool, commit: Commit) -> None:
    """Relay ``{"triggered": active, "outputValue": active}``."""
    commit(node_id, {"triggered": active, "outputValue": active})


def force_deactivate(node_id: NodeID, commit: Commit) -> None:
    """Emergency stop: clear every activation-bearing field."""
    logger.debug("node_force_deactivated", node_id=node_id)
    commit(node_id, {"triggered": False, "isActive": False, "value": False, "outputValue": False})


def commit_activations(
    snapshot: GraphSnapshot,
    records: Mapping[NodeID, ActivationRecord],
    commit: Commit,
    *,
    sink: EventSink | None = None,
) -> list[NodeID]:
    """Write ``{"isActive": ...}`` for nodes whose activation flipped.

    Nodes whose stored ``isActive`` already matches the record, and
    records for nodes missing from the snapshot, are skipped.

    Returns:
        Ids of the nodes that were committed, in record order
    """
    changed: list[NodeID] = []
    for node_id, record in records.items():
        node = snapshot.get_node(node_id)
        if node is None:
            continue
        change = activation_changed(node.data.get("isActive") is True, record.is_active)
        if not change.has_changed:
            continue
        commit(node_id, {"isActive": record.is_active})
        changed.append(node_id)
        logger.debug("activation_committed", node_id=node_id, is_active=record.is_active)
        if sink is not None:
            sink(ActivationCommittedEvent(node_id=node_id, is_active=record.is_active))
    return changed
