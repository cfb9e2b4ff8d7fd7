"""Tests for connection validation."""

from collections.abc import Mapping
from typing import Any

import pytest

from flowwire.contracts import (
    CatalogNotReadyEvent,
    ConnectionCandidate,
    ConnectionRejectedEvent,
    Edge,
    EventCollector,
    HandleId,
    Node,
    NodeCategory,
    NodeID,
)
from flowwire.core.catalog import CategoryPolicy, NodeTypeCatalog, NodeTypeSpec, RegistryProvider
from flowwire.core.config import CategoryPolicySettings, ValidationSettings
from flowwire.core.graph import GraphSnapshot
from flowwire.engine import ConnectionValidator, validate


def _nodes(*specs: tuple[str, str] | tuple[str, str, Mapping[str, Any]]) -> dict[NodeID, Node]:
    nodes: dict[NodeID, Node] = {}
    for spec in specs:
        node_id, node_type = spec[0], spec[1]
        data = spec[2] if len(spec) > 2 else {}  # type: ignore[misc]
        nodes[NodeID(node_id)] = Node(id=NodeID(node_id), type=node_type, data=data)
    return nodes


def _candidate(source: str | None, source_handle: str | None, target: str | None, target_handle: str | None) -> ConnectionCandidate:
    return ConnectionCandidate(
        source=NodeID(source) if source is not None else None,
        source_handle=HandleId(source_handle) if source_handle is not None else None,
        target=NodeID(target) if target is not None else None,
        target_handle=HandleId(target_handle) if target_handle is not None else None,
    )


def _edge(edge_id: str, source: str, source_handle: str, target: str, target_handle: str) -> Edge:
    return Edge.from_dict(
        {"id": edge_id, "source": source, "sourceHandle": source_handle, "target": target, "targetHandle": target_handle}
    )


class TestTypeScenarios:
    def test_string_into_boolean_denied(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "booleanSink"))

        result = validate(_candidate("a", "output", "b", "input"), catalog, [], nodes)

        assert not result.allowed
        assert result.reason == "Cannot connect type 'Text' (s) to 'On|Off' (b)."

    def test_string_into_any_allowed(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))

        result = validate(_candidate("a", "output", "b", "input"), catalog, [], nodes)

        assert result.allowed
        assert result.reason is None

    def test_string_into_string_allowed(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "turnToUppercase"))
        assert validate(_candidate("a", "output", "b", "input"), catalog, [], nodes).allowed

    def test_union_source_needs_one_matching_member(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "textOrNumber"), ("b", "booleanSink"))

        assert validate(_candidate("a", "output", "b", "number"), catalog, [], nodes).allowed
        assert not validate(_candidate("a", "output", "b", "input"), catalog, [], nodes).allowed

    def test_boolean_into_trigger_handle(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("t", "triggerToggle"), ("c", "createText"))
        assert validate(_candidate("t", "output", "c", "trigger"), catalog, [], nodes).allowed

    def test_type_suffix_on_handle_is_ignored(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        assert validate(_candidate("a", "output__s", "b", "input__x"), catalog, [], nodes).allowed


class TestRejectionOrder:
    def test_malformed_candidate(self, catalog: NodeTypeCatalog) -> None:
        result = validate(_candidate(None, "output", "b", ""), catalog, [], {})

        assert not result.allowed
        assert result.reason == "malformed connection: missing source, target_handle"

    def test_malformed_checked_before_readiness(self, pending_catalog: NodeTypeCatalog) -> None:
        result = validate(_candidate("a", None, "b", "input"), pending_catalog, [], {})
        assert not result.allowed

    def test_unknown_source_node(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("b", "viewOutput"))
        result = validate(_candidate("ghost", "output", "b", "input"), catalog, [], nodes)
        assert result.reason == "node not found: ghost"

    def test_unknown_target_node(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"))
        result = validate(_candidate("a", "output", "ghost", "input"), catalog, [], nodes)
        assert result.reason == "node not found: ghost"

    def test_unknown_source_handle(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        result = validate(_candidate("a", "nope", "b", "input"), catalog, [], nodes)
        assert result.reason == "handle not found: source handle 'nope' on node type 'createText'"

    def test_target_handle_used_as_source(self, catalog: NodeTypeCatalog) -> None:
        # "trigger" exists on createText, but only as a target
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        result = validate(_candidate("a", "trigger", "b", "input"), catalog, [], nodes)
        assert result.reason == "handle not found: source handle 'trigger' on node type 'createText'"

    def test_unknown_target_handle(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        result = validate(_candidate("a", "output", "b", "nope"), catalog, [], nodes)
        assert result.reason == "handle not found: target handle 'nope' on node type 'viewOutput'"

    def test_unknown_node_type_without_default_provider(self, registry_specs: dict[str, NodeTypeSpec]) -> None:
        catalog = NodeTypeCatalog([RegistryProvider(registry_specs)])
        nodes = _nodes(("a", "mystery"), ("b", "viewOutput"))

        result = validate(_candidate("a", "output", "b", "input"), catalog, [], nodes)

        assert not result.allowed
        assert result.reason == "Unknown node type 'mystery'"

    def test_category_checked_before_types(self, catalog: NodeTypeCatalog) -> None:
        # b into s|b is type-legal; the cycle/test conflict still blocks it
        nodes = _nodes(("c", "cyclePulse"), ("t", "testJson"))
        result = validate(_candidate("c", "output", "t", "input"), catalog, [], nodes)
        assert result.reason == "Category 'cycle' is incompatible with category 'test'."

    def test_node_category_overrides_catalog_category(self, catalog: NodeTypeCatalog) -> None:
        nodes = {
            NodeID("a"): Node(id=NodeID("a"), type="createText", category=NodeCategory.TEST),
            NodeID("c"): Node(id=NodeID("c"), type="turnToUppercase", category=NodeCategory.CYCLE),
        }
        result = validate(_candidate("a", "output", "c", "input"), catalog, [], nodes)
        assert result.reason == "Categories 'test' and 'cycle' conflict and cannot be connected."

    def test_strict_policy_blocks_same_category(self, registry_specs: dict[str, NodeTypeSpec]) -> None:
        strict = NodeTypeCatalog(
            [RegistryProvider(registry_specs)],
            policy=CategoryPolicy.from_settings(CategoryPolicySettings(preset="strict")),
        )
        nodes = _nodes(("a", "createText"), ("b", "turnToUppercase"))

        result = validate(_candidate("a", "output", "b", "input"), strict, [], nodes)

        assert result.reason == "Category 'create' cannot connect to category 'create'."


class TestJsonShapes:
    def _validate(self, catalog: NodeTypeCatalog, data: Mapping[str, Any], **settings: bool) -> Any:
        nodes = _nodes(("src", "createJson", data), ("dst", "jsonConsumer"))
        return validate(_candidate("src", "output", "dst", "j"), catalog, [], nodes, settings=ValidationSettings(**settings))

    def test_conforming_value(self, catalog: NodeTypeCatalog) -> None:
        assert self._validate(catalog, {"output": {"name": "Ada"}}).allowed

    def test_violating_value(self, catalog: NodeTypeCatalog) -> None:
        result = self._validate(catalog, {"output": {"age": 3}})

        assert not result.allowed
        assert result.reason is not None
        assert result.reason.startswith("JSON shape mismatch")

    def test_json_text_is_decoded(self, catalog: NodeTypeCatalog) -> None:
        assert self._validate(catalog, {"output": '{"name": "Ada"}'}).allowed
        assert not self._validate(catalog, {"output": "[1, 2]"}).allowed

    def test_per_handle_output(self, catalog: NodeTypeCatalog) -> None:
        assert not self._validate(catalog, {"output": {"output": {"age": 3}}}).allowed

    def test_no_value_yet(self, catalog: NodeTypeCatalog) -> None:
        assert self._validate(catalog, {}).allowed

    def test_undecodable_text_cannot_be_checked(self, catalog: NodeTypeCatalog) -> None:
        assert self._validate(catalog, {"output": "{not json"}).allowed

    def test_too_deeply_nested_text_cannot_be_checked(self, catalog: NodeTypeCatalog) -> None:
        nested = "[" * 200_000 + "]" * 200_000
        assert self._validate(catalog, {"output": nested}).allowed

    def test_non_json_value_cannot_be_checked(self, catalog: NodeTypeCatalog) -> None:
        assert self._validate(catalog, {"output": {"name", "Ada"}}).allowed

    def test_enforcement_can_be_disabled(self, catalog: NodeTypeCatalog) -> None:
        assert self._validate(catalog, {"output": {"age": 3}}, enforce_json_shapes=False).allowed


class TestDuplicates:
    def test_duplicate_rejected(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        existing = [_edge("e1", "a", "output", "b", "input")]

        result = validate(_candidate("a", "output", "b", "input"), catalog, existing, nodes)

        assert result.reason == "duplicate connection: edge 'e1' already links these handles"

    def test_duplicates_allowed_when_disabled(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        existing = [_edge("e1", "a", "output", "b", "input")]
        settings = ValidationSettings(reject_duplicate_edges=False)

        assert validate(_candidate("a", "output", "b", "input"), catalog, existing, nodes, settings=settings).allowed

    def test_ignore_edge(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        existing = [_edge("e1", "a", "output", "b", "input")]

        result = validate(_candidate("a", "output", "b", "input"), catalog, existing, nodes, ignore_edge=existing[0].id)

        assert result.allowed

    def test_type_error_wins_over_duplicate(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"), ("b", "booleanSink"))
        existing = [_edge("e1", "a", "output", "b", "input")]

        result = validate(_candidate("a", "output", "b", "input"), catalog, existing, nodes)

        assert result.reason == "Cannot connect type 'Text' (s) to 'On|Off' (b)."


class TestCatalogNotReady:
    def test_allowed_by_default(self, pending_catalog: NodeTypeCatalog, collector: EventCollector) -> None:
        nodes = _nodes(("a", "createText"), ("b", "booleanSink"))

        result = validate(_candidate("a", "output", "b", "input"), pending_catalog, [], nodes, sink=collector)

        assert result.allowed
        assert result.reason == "catalog not ready: connection allowed without type checks"
        assert collector.events == [CatalogNotReadyEvent(allowed=True)]

    def test_blocked_when_configured(self, pending_catalog: NodeTypeCatalog, collector: EventCollector) -> None:
        settings = ValidationSettings(allow_when_catalog_not_ready=False)

        result = validate(_candidate("a", "output", "b", "input"), pending_catalog, [], {}, settings=settings, sink=collector)

        assert not result.allowed
        assert result.reason is not None
        assert result.reason.startswith("catalog not ready")
        assert collector.events == [CatalogNotReadyEvent(allowed=False)]

    def test_node_existence_not_checked_while_loading(self, pending_catalog: NodeTypeCatalog) -> None:
        assert validate(_candidate("ghost", "output", "b", "input"), pending_catalog, [], {}).allowed


class TestEvents:
    def test_rejection_is_reported(self, catalog: NodeTypeCatalog, collector: EventCollector, captured_logs: list) -> None:
        nodes = _nodes(("a", "createText"), ("b", "booleanSink"))

        validate(_candidate("a", "output", "b", "input"), catalog, [], nodes, sink=collector)

        assert collector.of_type(ConnectionRejectedEvent) == [
            ConnectionRejectedEvent(source=NodeID("a"), target=NodeID("b"), reason="Cannot connect type 'Text' (s) to 'On|Off' (b).")
        ]
        rejected = [e for e in captured_logs if e["event"] == "connection_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["log_level"] == "info"

    def test_allowed_connection_emits_nothing(self, catalog: NodeTypeCatalog, collector: EventCollector) -> None:
        nodes = _nodes(("a", "createText"), ("b", "viewOutput"))
        validate(_candidate("a", "output", "b", "input"), catalog, [], nodes, sink=collector)
        assert collector.events == []


class TestConnectionValidator:
    def test_is_valid_connection(self, catalog: NodeTypeCatalog) -> None:
        validator = ConnectionValidator(catalog, _nodes(("a", "createText"), ("b", "booleanSink"), ("v", "viewOutput")))

        assert validator.is_valid_connection(_candidate("a", "output", "v", "input"))
        assert not validator.is_valid_connection(_candidate("a", "output", "b", "input"))

    def test_reads_live_host_state(self, catalog: NodeTypeCatalog) -> None:
        nodes = _nodes(("a", "createText"))
        edges: list[Edge] = []
        validator = ConnectionValidator(catalog, nodes, edges)
        candidate = _candidate("a", "output", "v", "input")

        assert not validator.is_valid_connection(candidate)

        nodes.update(_nodes(("v", "viewOutput")))
        assert validator.is_valid_connection(candidate)

        edges.append(_edge("e1", "a", "output", "v", "input"))
        assert not validator.is_valid_connection(candidate)

    def test_for_snapshot(self, catalog: NodeTypeCatalog) -> None:
        snapshot = GraphSnapshot(
            list(_nodes(("a", "createText"), ("v", "viewOutput")).values()),
            [_edge("e1", "a", "output", "v", "input")],
        )
        validator = ConnectionValidator.for_snapshot(catalog, snapshot, settings=ValidationSettings(reject_duplicate_edges=False))

        assert validator.settings.reject_duplicate_edges is False
        assert validator.is_valid_connection(_candidate("a", "output", "v", "input"))


@pytest.mark.parametrize("target_handle", ["input", "number"])
def test_boolean_sink_rejects_text_on_every_handle(catalog: NodeTypeCatalog, target_handle: str) -> None:
    nodes = _nodes(("a", "createText"), ("b", "booleanSink"))
    assert not validate(_candidate("a", "output", "b", target_handle), catalog, [], nodes).allowed
