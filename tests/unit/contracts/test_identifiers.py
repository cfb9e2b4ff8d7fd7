"""Tests for branded identifiers and well-known handle predicates."""

import pytest

from flowwire.contracts import (
    JSON_HANDLE,
    TRIGGER_HANDLE,
    HandleId,
    is_json_passthrough_handle,
    is_trigger_handle,
    make_data_type_code,
    make_edge_id,
    make_handle_id,
    make_node_id,
    split_handle_id,
)


class TestMakers:
    def test_node_id_strips_whitespace(self) -> None:
        assert make_node_id("  node-1 ") == "node-1"

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_blank_values_rejected(self, raw: str) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            make_node_id(raw)
        with pytest.raises(ValueError, match="must not be empty"):
            make_edge_id(raw)
        with pytest.raises(ValueError, match="must not be empty"):
            make_handle_id(raw)
        with pytest.raises(ValueError, match="must not be empty"):
            make_data_type_code(raw)

    def test_non_string_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be a string"):
            make_node_id(42)  # type: ignore[arg-type]

    def test_handle_id_drops_type_suffix(self) -> None:
        assert make_handle_id("output__s|n") == "output"

    def test_data_type_code_keeps_union(self) -> None:
        assert make_data_type_code("s|n") == "s|n"


class TestSplitHandleId:
    def test_with_suffix(self) -> None:
        assert split_handle_id("output__s|n") == ("output", "s|n")

    def test_without_suffix(self) -> None:
        assert split_handle_id("output") == ("output", None)

    def test_empty_suffix_is_none(self) -> None:
        assert split_handle_id("output__") == ("output", None)

    def test_blank_handle_part_rejected(self) -> None:
        with pytest.raises(ValueError):
            split_handle_id("__s")


class TestWellKnownHandles:
    def test_trigger_handle(self) -> None:
        assert is_trigger_handle(TRIGGER_HANDLE)
        assert is_trigger_handle(HandleId("trigger__b"))

    def test_boolean_type_code_is_not_the_trigger_handle(self) -> None:
        # "b" is the boolean DataType code, not a handle id
        assert not is_trigger_handle(HandleId("b"))

    def test_json_passthrough_handle(self) -> None:
        assert is_json_passthrough_handle(JSON_HANDLE)
        assert is_json_passthrough_handle(HandleId("j__{}"))
        assert not is_json_passthrough_handle(HandleId("json"))
