"""Tests for graph element contracts and result helpers."""

from types import MappingProxyType

import pytest

from flowwire.contracts import (
    STRING,
    ActivationRecord,
    ActivationSource,
    ConnectionCandidate,
    Edge,
    FlowDiagnostic,
    HandleDirection,
    HandleSpec,
    Node,
    NodeCategory,
    NodeID,
    NodeTypeNotFound,
    ValidationResult,
    activation_changed,
    make_handle_id,
)


class TestEdgeFromDict:
    def test_camel_case_keys(self) -> None:
        edge = Edge.from_dict({"id": "e1", "source": "a", "sourceHandle": "output__s", "target": "b", "targetHandle": "input"})

        assert edge.id == "e1"
        assert edge.endpoints == ("a", "output", "b", "input")

    def test_snake_case_keys(self) -> None:
        edge = Edge.from_dict({"id": "e1", "source": "a", "source_handle": "output", "target": "b", "target_handle": "input"})
        assert edge.source_handle == "output"

    def test_missing_id_is_derived_from_endpoints(self) -> None:
        edge = Edge.from_dict({"source": "a", "sourceHandle": "output", "target": "b", "targetHandle": "input"})
        assert edge.id == "a:output->b:input"

    def test_missing_endpoint_rejected(self) -> None:
        with pytest.raises(ValueError):
            Edge.from_dict({"source": "a", "sourceHandle": "output", "target": "b"})


class TestNode:
    def test_data_is_frozen(self) -> None:
        node = Node(id=NodeID("a"), type="createText", data={"text": "hi"})

        assert isinstance(node.data, MappingProxyType)
        with pytest.raises(TypeError):
            node.data["text"] = "changed"  # type: ignore[index]

    def test_source_dict_is_copied(self) -> None:
        raw = {"text": "hi"}
        node = Node(id=NodeID("a"), type="createText", data=raw)
        raw["text"] = "changed"
        assert node.data["text"] == "hi"

    def test_from_dict(self) -> None:
        node = Node.from_dict({"id": "a", "type": "triggerToggle", "category": "trigger", "data": {"triggered": True}})

        assert node.category is NodeCategory.TRIGGER
        assert node.data["triggered"] is True

    def test_from_dict_without_category_or_data(self) -> None:
        node = Node.from_dict({"id": "a", "type": "createText"})
        assert node.category is NodeCategory.OTHER
        assert dict(node.data) == {}

    def test_from_dict_blank_id(self) -> None:
        with pytest.raises(ValueError):
            Node.from_dict({"id": " ", "type": "createText"})

    def test_from_dict_unknown_category(self) -> None:
        with pytest.raises(ValueError):
            Node.from_dict({"id": "a", "type": "createText", "category": "bogus"})


class TestHandleSpec:
    def test_bind_attaches_node(self) -> None:
        spec = HandleSpec(id=make_handle_id("output"), direction=HandleDirection.SOURCE, declared_type=STRING)
        handle = spec.bind(NodeID("a"))

        assert handle.node_id == "a"
        assert handle.declared_type is STRING
        assert handle.direction is HandleDirection.SOURCE


class TestConnectionCandidate:
    def test_missing_fields(self) -> None:
        candidate = ConnectionCandidate(source=NodeID("a"), source_handle=None, target=NodeID(" "), target_handle=make_handle_id("input"))
        assert candidate.missing_fields == ("source_handle", "target")

    def test_from_edge_is_complete(self) -> None:
        edge = Edge.from_dict({"source": "a", "sourceHandle": "output", "target": "b", "targetHandle": "input"})
        assert ConnectionCandidate.from_edge(edge).missing_fields == ()


class TestResults:
    def test_validation_result_factories(self) -> None:
        assert ValidationResult.allow() == ValidationResult(allowed=True, reason=None)
        assert ValidationResult.deny("nope") == ValidationResult(allowed=False, reason="nope")

    @pytest.mark.parametrize(
        ("current", "calculated", "activating", "deactivating"),
        [
            (False, True, True, False),
            (True, False, False, True),
            (True, True, False, False),
            (False, False, False, False),
        ],
    )
    def test_activation_changed(self, current: bool, calculated: bool, activating: bool, deactivating: bool) -> None:
        change = activation_changed(current, calculated)

        assert change.is_activating is activating
        assert change.is_deactivating is deactivating
        assert change.has_changed is (activating or deactivating)

    def test_failed_record_is_inactive(self) -> None:
        record = ActivationRecord.failed(NodeID("a"))
        assert not record.is_active
        assert not record.is_head
        assert record.source is ActivationSource.HEAD

    def test_empty_flow_diagnostic_counts(self) -> None:
        diagnostic = FlowDiagnostic(handles=(), connections=())
        assert (diagnostic.valid_connections, diagnostic.invalid_connections, diagnostic.unconnected_handles) == (0, 0, 0)


class TestNodeTypeNotFound:
    def test_message_lists_suggestions(self) -> None:
        error = NodeTypeNotFound("createTxt", ["createText"])
        assert str(error) == "Unknown node type 'createTxt'. Did you mean: createText?"

    def test_message_without_suggestions(self) -> None:
        assert str(NodeTypeNotFound("zzz")) == "Unknown node type 'zzz'"
