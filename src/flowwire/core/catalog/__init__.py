"""Node Type Catalog: handle/category metadata, providers, policy, readiness."""

from flowwire.core.catalog.catalog import NodeTypeCatalog, bootstrap_catalog
from flowwire.core.catalog.models import HandleDeclaration, NodeTypeDeclaration, NodeTypeSpec, RegistryDocument
from flowwire.core.catalog.policy import CategoryPolicy
from flowwire.core.catalog.providers import (
    HandlesFound,
    NodeTypeProvider,
    NotFound,
    PatternFallbackProvider,
    ProviderResult,
    RegistryProvider,
    UniversalDefaultProvider,
    default_providers,
    load_node_registry,
)
from flowwire.core.catalog.readiness import CatalogReadiness

__all__ = [
    "CatalogReadiness",
    "CategoryPolicy",
    "HandleDeclaration",
    "HandlesFound",
    "NodeTypeCatalog",
    "NodeTypeDeclaration",
    "NodeTypeProvider",
    "NodeTypeSpec",
    "NotFound",
    "PatternFallbackProvider",
    "ProviderResult",
    "RegistryDocument",
    "RegistryProvider",
    "UniversalDefaultProvider",
    "bootstrap_catalog",
    "default_providers",
    "load_node_registry",
]
