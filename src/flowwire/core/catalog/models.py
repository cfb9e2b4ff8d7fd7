# src/flowwire/core/catalog/models.py
"""Node type declarations.

NodeTypeSpec is the catalog's in-memory record for one node type.
RegistryDocument/NodeTypeDeclaration are the Pydantic models that
validate an external registry file (YAML or JSON) before it is turned
into NodeTypeSpecs.

Leaf module: no intra-package imports beyond contracts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flowwire.contracts.datatypes import normalize
from flowwire.contracts.enums import HandleDirection, NodeCategory
from flowwire.contracts.graph import HandleSpec
from flowwire.contracts.json_shape import JsonShape
from flowwire.contracts.types import HandleId, make_handle_id


@dataclass(frozen=True, slots=True)
class NodeTypeSpec:
    """Everything the core needs to know about one node type.

    Capability flags are tri-state: True/False when the node type
    declares the capability, None when it is silent and name-pattern
    classification may apply (see ActivationSettings.use_name_patterns).

    Attributes:
        node_type: Node type string as used by the graph provider
        category: Functional category (drives connection policy and head activation)
        handles: Declared handles; ids unique within the node type
        transforms: Node transforms its input (downstream activation needs own output)
        view_output: Node displays upstream values (activation needs displayed content)
        json_test: Node parses JSON (head activation needs a parsed value, no error)
    """

    node_type: str
    category: NodeCategory = NodeCategory.OTHER
    handles: tuple[HandleSpec, ...] = ()
    transforms: bool | None = None
    view_output: bool | None = None
    json_test: bool | None = None

    def __post_init__(self) -> None:
        seen: set[HandleId] = set()
        for handle in self.handles:
            if handle.id in seen:
                raise ValueError(f"Duplicate handle '{handle.id}' on node type '{self.node_type}'")
            seen.add(handle.id)

    def get_handle(self, handle_id: HandleId, direction: HandleDirection) -> HandleSpec | None:
        for handle in self.handles:
            if handle.id == handle_id and handle.direction is direction:
                return handle
        return None


class HandleDeclaration(BaseModel):
    """One handle as written in a registry file.

    Accepts the editor's camelCase spelling (``dataType``, ``jsonShape``)
    and long-form type names ("string"), which are normalized to codes.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: str
    type: Literal["source", "target"]
    data_type: str = Field(default="x", alias="dataType")
    json_shape: dict[str, Any] | None = Field(default=None, alias="jsonShape")

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("handle id must not be empty")
        return v.strip()

    def to_spec(self) -> HandleSpec:
        return HandleSpec(
            id=make_handle_id(self.id),
            direction=HandleDirection(self.type),
            declared_type=normalize(self.data_type),
            json_shape=JsonShape.from_dict(self.json_shape) if self.json_shape else None,
        )


class NodeTypeDeclaration(BaseModel):
    """One node type entry in a registry file."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    category: NodeCategory = NodeCategory.OTHER
    handles: list[HandleDeclaration] = Field(default_factory=list)
    transforms: bool | None = None
    view_output: bool | None = Field(default=None, alias="viewOutput")
    json_test: bool | None = Field(default=None, alias="jsonTest")

    @field_validator("category", mode="before")
    @classmethod
    def lowercase_category(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    def to_spec(self, node_type: str) -> NodeTypeSpec:
        return NodeTypeSpec(
            node_type=node_type,
            category=self.category,
            handles=tuple(h.to_spec() for h in self.handles),
            transforms=self.transforms,
            view_output=self.view_output,
            json_test=self.json_test,
        )


class RegistryDocument(BaseModel):
    """Top-level shape of a node type registry file::

        node_types:
          createText:
            category: create
            handles:
              - {id: trigger, type: target, dataType: boolean}
              - {id: output, type: source, dataType: string}
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    node_types: dict[str, NodeTypeDeclaration] = Field(default_factory=dict, alias="nodeTypes")

    def to_specs(self) -> dict[str, NodeTypeSpec]:
        return {name: decl.to_spec(name) for name, decl in self.node_types.items()}
