# src/flowwire/engine/__init__.py
"""Connection validation, cleanup, activation and propagation.

Example:
    from flowwire.core import GraphSnapshot, NodeTypeCatalog, default_providers
    from flowwire.engine import ActivationEvaluator, ConnectionValidator, commit_activations, sweep

    catalog = NodeTypeCatalog(default_providers())
    snapshot = GraphSnapshot.from_dicts(raw_nodes, raw_edges)

    validator = ConnectionValidator.for_snapshot(catalog, snapshot)
    result = validator.validate(candidate)

    stale = sweep(snapshot.edges, catalog, snapshot.node_lookup).removed

    records = ActivationEvaluator(catalog).evaluate(snapshot)
    commit_activations(snapshot, records, host.update_node_data)
"""

from flowwire.engine.activation import (
    ActivationEvaluator,
    NodeTraits,
    classify_node,
    downstream_activation,
    has_active_input,
    has_displayed_content,
    has_meaningful_content,
    has_valid_output,
    head_activation,
    is_head,
    is_node_active,
    trigger_allows,
)
from flowwire.engine.cache import ActivationCache
from flowwire.engine.cleanup import sweep
from flowwire.engine.diagnostics import analyze_flow_handles, diagnose_mismatch
from flowwire.engine.propagation import commit_activations, force_deactivate, propagate
from flowwire.engine.validator import ConnectionValidator, validate

__all__ = [
    "ActivationCache",
    "ActivationEvaluator",
    "ConnectionValidator",
    "NodeTraits",
    "analyze_flow_handles",
    "classify_node",
    "commit_activations",
    "diagnose_mismatch",
    "downstream_activation",
    "force_deactivate",
    "has_active_input",
    "has_displayed_content",
    "has_meaningful_content",
    "has_valid_output",
    "head_activation",
    "is_head",
    "is_node_active",
    "propagate",
    "sweep",
    "trigger_allows",
    "validate",
]
