# src/flowwire/engine/activation.py
"""Node activation: which nodes are "on" given their data and their inputs.

Every node is in one of two states, recomputed each tick:

HEAD:
    No incoming edge other than on the JSON passthrough handle. Active
    state depends on the node's own data only (see head_activation()).

DOWNSTREAM:
    Active when an upstream neighbor is active, the trigger input (if
    wired) is active, and the node-kind specific condition holds (see
    downstream_activation()).

Within one tick every node reads the data as it was at the start of the
tick; multi-hop propagation takes several ticks, driven by the host's
update loop.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from flowwire.contracts.enums import ActivationSource, NodeCategory
from flowwire.contracts.errors import CatalogNotReadyError, NodeTypeNotFound
from flowwire.contracts.events import ActivationFailedEvent, EventSink
from flowwire.contracts.graph import ActivationRecord, Node
from flowwire.contracts.types import NodeID, is_json_passthrough_handle, is_trigger_handle
from flowwire.core.catalog import NodeTypeCatalog, NodeTypeSpec
from flowwire.core.config import ActivationSettings
from flowwire.core.graph import GraphSnapshot
from flowwire.engine.cache import ActivationCache

logger = structlog.get_logger(__name__)

DEFAULT_OUTPUT_FIELDS: tuple[str, ...] = ("text", "value", "output", "heldText")


# =============================================================================
# Value predicates
# =============================================================================


def has_meaningful_content(value: Any) -> bool:
    """Not None, not "", and not an empty list/tuple/dict."""
    if value is None or (isinstance(value, str) and value == ""):
        return False
    if isinstance(value, list | tuple | Mapping):
        return len(value) > 0
    return True


def has_valid_output(data: Mapping[str, Any], output_fields: Sequence[str] = DEFAULT_OUTPUT_FIELDS) -> bool:
    """True if any output-bearing field holds meaningful content."""
    return any(has_meaningful_content(data.get(name)) for name in output_fields)


def _coerce_flag(value: Any) -> bool | None:
    """Boolean reading of a value/output field; None when the type says nothing."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    if isinstance(value, float):
        return value != 0 and not math.isnan(value)
    if isinstance(value, int):
        return value != 0
    return None


def is_node_active(data: Mapping[str, Any]) -> bool:
    """Activation as read from a node's own data.

    ``triggered`` or ``isActive`` set to True wins. Otherwise ``value``
    then ``output`` are coerced: booleans as-is, strings equal to
    "true" (case-insensitive), non-zero numbers.
    """
    if data.get("triggered") is True or data.get("isActive") is True:
        return True
    for name in ("value", "output"):
        flag = _coerce_flag(data.get(name))
        if flag is not None:
            return flag
    return False


def has_displayed_content(data: Mapping[str, Any]) -> bool:
    """View-output check: at least one displayed value with real content."""
    displayed = data.get("displayedValues")
    if not isinstance(displayed, list | tuple):
        return False
    for item in displayed:
        if not isinstance(item, Mapping):
            continue
        content = item.get("content")
        if not has_meaningful_content(content):
            continue
        if isinstance(content, str):
            if content.strip():
                return True
        elif isinstance(content, list | tuple | Mapping):
            return True
        elif content:
            return True
    return False


# =============================================================================
# Classification
# =============================================================================


@dataclass(frozen=True, slots=True)
class NodeTraits:
    """How the activation rules see one node."""

    category: NodeCategory
    transforms: bool = False
    view_output: bool = False
    json_test: bool = False


def classify_node(node: Node, catalog: NodeTypeCatalog | None, settings: ActivationSettings) -> NodeTraits:
    """Resolve category and capabilities from the catalog.

    Declared capabilities win. When the node type declares nothing (or
    the catalog cannot answer yet) and ``settings.use_name_patterns`` is
    set, the type name decides.
    """
    spec = _lookup_spec(node, catalog)
    category = node.category
    if category is NodeCategory.OTHER and spec is not None:
        category = spec.category

    patterns = settings.use_name_patterns
    type_lower = node.type.lower()
    if category is NodeCategory.OTHER and patterns:
        if "trigger" in type_lower:
            category = NodeCategory.TRIGGER
        elif "cycle" in type_lower:
            category = NodeCategory.CYCLE

    def capability(declared: bool | None, by_name: bool) -> bool:
        if declared is not None:
            return declared
        return patterns and by_name

    return NodeTraits(
        category=category,
        transforms=capability(
            spec.transforms if spec else None,
            any(p.lower() in type_lower for p in settings.transformation_patterns),
        ),
        view_output=capability(spec.view_output if spec else None, node.type in settings.view_output_types),
        json_test=capability(spec.json_test if spec else None, node.type in settings.json_test_types),
    )


def _lookup_spec(node: Node, catalog: NodeTypeCatalog | None) -> NodeTypeSpec | None:
    if catalog is None or not catalog.is_ready:
        return None
    try:
        return catalog.lookup(node.type)
    except (CatalogNotReadyError, NodeTypeNotFound):
        return None


# =============================================================================
# Head / downstream rules
# =============================================================================


def is_head(snapshot: GraphSnapshot, node_id: NodeID) -> bool:
    """True when no incoming edge targets anything but the JSON handle."""
    return all(is_json_passthrough_handle(e.target_handle) for e in snapshot.incoming_edges(node_id))


def head_activation(
    data: Mapping[str, Any],
    traits: NodeTraits,
    output_fields: Sequence[str] = DEFAULT_OUTPUT_FIELDS,
) -> bool:
    """Activation of a head node, from its own data only."""
    if traits.category is NodeCategory.TRIGGER:
        return bool(data.get("triggered"))
    if traits.category is NodeCategory.CYCLE:
        return bool(data.get("isOn")) and bool(data.get("triggered") or data.get("phase") or data.get("pulsing"))
    if "isManuallyActivated" in data:
        return bool(data["isManuallyActivated"])
    if traits.json_test:
        return data.get("parsedJson") is not None and data.get("parseError") is None
    return has_valid_output(data, output_fields)


def has_active_input(
    snapshot: GraphSnapshot,
    node_id: NodeID,
    output_fields: Sequence[str] = DEFAULT_OUTPUT_FIELDS,
) -> bool:
    """At least one non-JSON upstream neighbor is active or has output."""
    for edge in snapshot.incoming_edges(node_id):
        if is_json_passthrough_handle(edge.target_handle):
            continue
        source = snapshot.get_node(edge.source)
        if source is not None and (is_node_active(source.data) or has_valid_output(source.data, output_fields)):
            return True
    return False


def trigger_allows(snapshot: GraphSnapshot, node_id: NodeID) -> bool:
    """Trigger gating. Passes when no edge targets the trigger handle."""
    trigger_edges = [e for e in snapshot.incoming_edges(node_id) if is_trigger_handle(e.target_handle)]
    if not trigger_edges:
        return True
    for edge in trigger_edges:
        source = snapshot.get_node(edge.source)
        if source is not None and is_node_active(source.data):
            return True
    return False


def downstream_activation(
    snapshot: GraphSnapshot,
    node: Node,
    traits: NodeTraits,
    output_fields: Sequence[str] = DEFAULT_OUTPUT_FIELDS,
) -> bool:
    """Activation of a downstream node."""
    if not has_active_input(snapshot, node.id, output_fields):
        return False
    if not trigger_allows(snapshot, node.id):
        return False
    if traits.transforms:
        return has_valid_output(node.data, output_fields)
    if traits.view_output:
        return has_displayed_content(node.data)
    return True


# =============================================================================
# Evaluator
# =============================================================================


class ActivationEvaluator:
    """Computes an ActivationRecord for every node of a snapshot.

    Records are memoized in an ActivationCache. A failure while
    evaluating one node is isolated: it is logged, reported to the sink
    and the node degrades to ActivationRecord.failed().

    Example:
        evaluator = ActivationEvaluator(catalog)
        records = evaluator.evaluate(GraphSnapshot(nodes, edges))
        commit_activations(snapshot, records, commit)
    """

    def __init__(
        self,
        catalog: NodeTypeCatalog | None = None,
        *,
        settings: ActivationSettings | None = None,
        cache: ActivationCache | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self._catalog = catalog
        self._settings = settings if settings is not None else ActivationSettings()
        self._cache = cache if cache is not None else ActivationCache(self._settings.cache_size)
        self._sink = sink
        self._catalog_was_ready = self._catalog_ready()

    @property
    def cache(self) -> ActivationCache:
        return self._cache

    @property
    def settings(self) -> ActivationSettings:
        return self._settings

    def invalidate(self, node_id: NodeID) -> None:
        self._cache.invalidate(node_id)

    def evaluate(self, snapshot: GraphSnapshot) -> dict[NodeID, ActivationRecord]:
        """Evaluate every node in snapshot.evaluation_order()."""
        self._sync_catalog_state()
        return {node_id: self._evaluate_cached(snapshot, node_id) for node_id in snapshot.evaluation_order()}

    def evaluate_node(self, snapshot: GraphSnapshot, node_id: NodeID) -> ActivationRecord:
        """Evaluate a single node.

        Raises:
            KeyError: If node_id is not in the snapshot
        """
        if node_id not in snapshot:
            raise KeyError(f"Node '{node_id}' is not in the snapshot")
        self._sync_catalog_state()
        return self._evaluate_cached(snapshot, node_id)

    def _evaluate_cached(self, snapshot: GraphSnapshot, node_id: NodeID) -> ActivationRecord:
        node = snapshot.node_lookup[node_id]
        try:
            key = (node_id, snapshot.data_fingerprint(node_id), snapshot.topology_fingerprint(node_id))
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            record = self._compute(snapshot, node)
        except Exception as exc:
            logger.error(
                "activation_failed",
                node_id=node_id,
                node_type=node.type,
                error=str(exc),
                exc_info=True,
            )
            if self._sink is not None:
                self._sink(
                    ActivationFailedEvent(
                        node_id=node_id,
                        node_type=node.type,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                )
            return ActivationRecord.failed(node_id)

        self._cache.put(key, record)
        return record

    def _compute(self, snapshot: GraphSnapshot, node: Node) -> ActivationRecord:
        traits = classify_node(node, self._catalog, self._settings)
        fields = self._settings.output_fields
        if is_head(snapshot, node.id):
            return ActivationRecord(
                node_id=node.id,
                is_active=head_activation(node.data, traits, fields),
                is_head=True,
                source=ActivationSource.HEAD,
            )
        return ActivationRecord(
            node_id=node.id,
            is_active=downstream_activation(snapshot, node, traits, fields),
            is_head=False,
            source=ActivationSource.DOWNSTREAM,
        )

    def _catalog_ready(self) -> bool:
        return self._catalog is not None and self._catalog.is_ready

    def _sync_catalog_state(self) -> None:
        # Classification changes once the catalog finishes loading
        ready = self._catalog_ready()
        if ready != self._catalog_was_ready:
            self._cache.clear()
            self._catalog_was_ready = ready
