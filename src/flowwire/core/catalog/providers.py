# src/flowwire/core/catalog/providers.py
"""Node type providers.

A provider answers one question: "what do you know about node type X?"
The catalog consults providers in order and takes the first HandlesFound.

Shipped providers, in default order:
    RegistryProvider          - declarations from a mapping or a YAML/JSON file
    PatternFallbackProvider   - hardcoded handle sets inferred from the type name
    UniversalDefaultProvider  - ``input: x`` target + ``output: x`` source
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog
import yaml

from flowwire.contracts.datatypes import ANY, BOOLEAN, STRING
from flowwire.contracts.enums import HandleDirection, NodeCategory
from flowwire.contracts.graph import HandleSpec
from flowwire.contracts.types import INPUT_HANDLE, OUTPUT_HANDLE, TRIGGER_HANDLE
from flowwire.core.catalog.models import NodeTypeSpec, RegistryDocument

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class HandlesFound:
    spec: NodeTypeSpec
    provider: str


@dataclass(frozen=True, slots=True)
class NotFound:
    node_type: str


type ProviderResult = HandlesFound | NotFound


@runtime_checkable
class NodeTypeProvider(Protocol):
    """Source of node type declarations.

    Implementations must be pure lookups: the catalog memoizes answers,
    so a provider is asked about a given node type at most once.
    """

    name: str

    def lookup(self, node_type: str) -> ProviderResult: ...

    def known_types(self) -> Iterable[str]:
        """Node types this provider can name up front (used for suggestions)."""
        ...


class RegistryProvider:
    """Serves node types declared in a registry mapping or file."""

    name = "registry"

    def __init__(self, specs: Mapping[str, NodeTypeSpec]) -> None:
        self._specs = dict(specs)

    @classmethod
    def from_file(cls, path: Path) -> RegistryProvider:
        """Load a registry from YAML (.yaml/.yml) or JSON (.json).

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the suffix is unsupported
            pydantic.ValidationError: If the document is malformed
        """
        return cls(load_node_registry(path))

    def lookup(self, node_type: str) -> ProviderResult:
        spec = self._specs.get(node_type)
        if spec is None:
            return NotFound(node_type)
        return HandlesFound(spec=spec, provider=self.name)

    def known_types(self) -> Iterable[str]:
        return tuple(self._specs)


def load_node_registry(path: Path) -> dict[str, NodeTypeSpec]:
    """Read and validate a node type registry file."""
    if not path.exists():
        raise FileNotFoundError(f"Node type registry not found: {path}")

    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        raw = yaml.safe_load(text)
    elif suffix == ".json":
        raw = json.loads(text)
    else:
        raise ValueError(f"Unsupported registry format '{suffix}' (expected .yaml, .yml or .json)")

    document = RegistryDocument.model_validate(raw or {})
    specs = document.to_specs()
    logger.debug("node_registry_loaded", path=str(path), node_types=len(specs))
    return specs


def _trigger_target() -> HandleSpec:
    return HandleSpec(id=TRIGGER_HANDLE, direction=HandleDirection.TARGET, declared_type=BOOLEAN)


class PatternFallbackProvider:
    """Hardcoded handle sets for well-known node types.

    Used when no registry declares a type. Matches on the exact type
    name; anything else is NotFound.
    """

    name = "pattern_fallback"

    _SPECS: Mapping[str, NodeTypeSpec] = {
        "createText": NodeTypeSpec(
            node_type="createText",
            category=NodeCategory.CREATE,
            handles=(
                _trigger_target(),
                HandleSpec(id=OUTPUT_HANDLE, direction=HandleDirection.SOURCE, declared_type=STRING),
            ),
        ),
        "viewOutput": NodeTypeSpec(
            node_type="viewOutput",
            category=NodeCategory.VIEW,
            handles=(HandleSpec(id=INPUT_HANDLE, direction=HandleDirection.TARGET, declared_type=ANY),),
            view_output=True,
        ),
    }

    def lookup(self, node_type: str) -> ProviderResult:
        spec = self._SPECS.get(node_type)
        if spec is None:
            return NotFound(node_type)
        return HandlesFound(spec=spec, provider=self.name)

    def known_types(self) -> Iterable[str]:
        return tuple(self._SPECS)


class UniversalDefaultProvider:
    """Last resort: every node type gets one ``any`` input and one ``any`` output."""

    name = "universal_default"

    def __init__(self, category: NodeCategory = NodeCategory.OTHER) -> None:
        self._category = category

    def lookup(self, node_type: str) -> ProviderResult:
        spec = NodeTypeSpec(
            node_type=node_type,
            category=self._category,
            handles=(
                HandleSpec(id=INPUT_HANDLE, direction=HandleDirection.TARGET, declared_type=ANY),
                HandleSpec(id=OUTPUT_HANDLE, direction=HandleDirection.SOURCE, declared_type=ANY),
            ),
        )
        return HandlesFound(spec=spec, provider=self.name)

    def known_types(self) -> Iterable[str]:
        return ()


def default_providers(registry_path: Path | None = None) -> list[NodeTypeProvider]:
    """Provider chain used when the host does not supply its own."""
    providers: list[NodeTypeProvider] = []
    if registry_path is not None:
        providers.append(RegistryProvider.from_file(registry_path))
    providers.append(PatternFallbackProvider())
    providers.append(UniversalDefaultProvider())
    return providers
