# src/flowwire/core/__init__.py
"""Core infrastructure: Catalog, Canonical, Configuration, Graph, Logging."""

from flowwire.core.canonical import (
    CANONICAL_VERSION,
    canonical_json,
    fingerprint,
    repr_hash,
    stable_hash,
)
from flowwire.core.catalog import (
    CatalogReadiness,
    CategoryPolicy,
    HandlesFound,
    NodeTypeCatalog,
    NodeTypeProvider,
    NodeTypeSpec,
    NotFound,
    PatternFallbackProvider,
    RegistryProvider,
    UniversalDefaultProvider,
    bootstrap_catalog,
    default_providers,
    load_node_registry,
)
from flowwire.core.config import (
    ActivationSettings,
    CategoryPolicySettings,
    CategoryRule,
    FlowwireSettings,
    LoggingSettings,
    ValidationSettings,
    load_settings,
)
from flowwire.core.graph import GraphSnapshot
from flowwire.core.logging import configure_logging, configure_logging_from_settings, get_logger

__all__ = [
    "CANONICAL_VERSION",
    "ActivationSettings",
    "CatalogReadiness",
    "CategoryPolicy",
    "CategoryPolicySettings",
    "CategoryRule",
    "FlowwireSettings",
    "GraphSnapshot",
    "HandlesFound",
    "LoggingSettings",
    "NodeTypeCatalog",
    "NodeTypeProvider",
    "NodeTypeSpec",
    "NotFound",
    "PatternFallbackProvider",
    "RegistryProvider",
    "UniversalDefaultProvider",
    "ValidationSettings",
    "bootstrap_catalog",
    "canonical_json",
    "configure_logging",
    "configure_logging_from_settings",
    "default_providers",
    "fingerprint",
    "get_logger",
    "load_node_registry",
    "load_settings",
    "repr_hash",
    "stable_hash",
]
