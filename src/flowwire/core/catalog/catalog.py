# src/flowwire/core/catalog/catalog.py
"""NodeTypeCatalog: read-mostly lookup of node type handles and categories.

One catalog object is built per host and passed by reference to the
validator, cleanup pass and activation evaluator. Lookups consult the
provider chain in order and memoize the first HandlesFound.
"""

from __future__ import annotations

import difflib
import threading
from collections.abc import Callable, Iterable, Sequence

import structlog

from flowwire.contracts.enums import HandleDirection, NodeCategory
from flowwire.contracts.errors import CatalogLoadCancelled, CatalogNotReadyError, NodeTypeNotFound
from flowwire.contracts.graph import Handle, HandleSpec, Node
from flowwire.contracts.types import HandleId, split_handle_id
from flowwire.core.catalog.models import NodeTypeSpec
from flowwire.core.catalog.policy import CategoryPolicy
from flowwire.core.catalog.providers import HandlesFound, NodeTypeProvider, default_providers
from flowwire.core.catalog.readiness import CatalogReadiness
from flowwire.core.config import FlowwireSettings

logger = structlog.get_logger(__name__)


class NodeTypeCatalog:
    """Node type metadata behind a readiness guard.

    A catalog constructed with providers is ready immediately. Use
    ``NodeTypeCatalog.pending()`` plus ``bootstrap_catalog()`` to fill it
    later, e.g. from a worker thread.

    Raises from lookups (never from the engine entry points, which
    convert them into results):
        CatalogNotReadyError: catalog still loading
        NodeTypeNotFound: no provider knows the node type
    """

    def __init__(
        self,
        providers: Iterable[NodeTypeProvider] | None = None,
        *,
        policy: CategoryPolicy | None = None,
    ) -> None:
        self._providers: tuple[NodeTypeProvider, ...] = ()
        self._policy = policy if policy is not None else CategoryPolicy()
        self._readiness = CatalogReadiness()
        self._resolved: dict[str, HandlesFound] = {}
        self._lock = threading.Lock()
        if providers is not None:
            self.install(providers)

    @classmethod
    def pending(cls, *, policy: CategoryPolicy | None = None) -> NodeTypeCatalog:
        """Catalog that reports not-ready until bootstrap_catalog() completes."""
        return cls(policy=policy)

    @classmethod
    def from_settings(cls, settings: FlowwireSettings) -> NodeTypeCatalog:
        """Ready catalog with the default provider chain and configured policy."""
        return cls(
            default_providers(settings.registry_path),
            policy=CategoryPolicy.from_settings(settings.categories),
        )

    @property
    def readiness(self) -> CatalogReadiness:
        return self._readiness

    @property
    def is_ready(self) -> bool:
        return self._readiness.is_ready

    @property
    def policy(self) -> CategoryPolicy:
        return self._policy

    @property
    def providers(self) -> tuple[NodeTypeProvider, ...]:
        return self._providers

    def install(self, providers: Iterable[NodeTypeProvider]) -> None:
        """Set the provider chain and mark the catalog ready.

        Raises:
            RuntimeError: If the catalog was already resolved
        """
        if self._readiness.is_resolved:
            raise RuntimeError("Node type catalog is already resolved")
        with self._lock:
            self._providers = tuple(providers)
            self._resolved.clear()
        self._readiness.mark_ready()
        logger.info("catalog_ready", providers=[p.name for p in self._providers])

    def resolve(self, node_type: str) -> HandlesFound:
        """Resolve a node type through the provider chain, keeping the provider name."""
        if not self.is_ready:
            raise CatalogNotReadyError()

        cached = self._resolved.get(node_type)
        if cached is not None:
            return cached

        for provider in self._providers:
            result = provider.lookup(node_type)
            if isinstance(result, HandlesFound):
                logger.debug("node_type_resolved", node_type=node_type, provider=result.provider)
                with self._lock:
                    return self._resolved.setdefault(node_type, result)

        raise NodeTypeNotFound(node_type, self._suggest(node_type))

    def lookup(self, node_type: str) -> NodeTypeSpec:
        return self.resolve(node_type).spec

    def get_handles(self, node_type: str) -> tuple[HandleSpec, ...]:
        return self.lookup(node_type).handles

    def get_category(self, node_type: str) -> NodeCategory:
        return self.lookup(node_type).category

    def get_handle(self, node_type: str, handle_id: HandleId, direction: HandleDirection) -> HandleSpec | None:
        """Declared handle, or None when the node type has no such handle.

        A ``__<codes>`` type suffix on ``handle_id`` is ignored.
        """
        bare, _ = split_handle_id(handle_id)
        return self.lookup(node_type).get_handle(bare, direction)

    def bind_handle(self, node: Node, handle_id: HandleId, direction: HandleDirection) -> Handle | None:
        spec = self.get_handle(node.type, handle_id, direction)
        return spec.bind(node.id) if spec is not None else None

    def category_of(self, node: Node) -> NodeCategory:
        """Node's category: catalog category unless the node itself carries one."""
        if node.category is not NodeCategory.OTHER:
            return node.category
        return self.get_category(node.type)

    def known_types(self) -> list[str]:
        seen: dict[str, None] = {}
        for provider in self._providers:
            for node_type in provider.known_types():
                seen.setdefault(node_type, None)
        return list(seen)

    def _suggest(self, node_type: str) -> list[str]:
        return difflib.get_close_matches(node_type, self.known_types(), n=3, cutoff=0.6)


def bootstrap_catalog(
    catalog: NodeTypeCatalog,
    loaders: Sequence[Callable[[], NodeTypeProvider]],
    *,
    cancelled: threading.Event | None = None,
) -> NodeTypeCatalog:
    """Build providers one at a time and install them into a pending catalog.

    The cancellation flag is checked before each loader runs. On
    cancellation CatalogLoadCancelled is set on the readiness future and
    raised; a loader error is set on the future and re-raised. Safe to
    submit to an executor.
    """
    providers: list[NodeTypeProvider] = []
    for loader in loaders:
        _raise_if_cancelled(catalog, cancelled, len(providers))
        try:
            providers.append(loader())
        except Exception as exc:
            catalog.readiness.fail(exc)
            logger.error("catalog_bootstrap_failed", completed_providers=len(providers), exc_info=True)
            raise

    _raise_if_cancelled(catalog, cancelled, len(providers))
    catalog.install(providers)
    return catalog


def _raise_if_cancelled(catalog: NodeTypeCatalog, cancelled: threading.Event | None, completed: int) -> None:
    if cancelled is None or not cancelled.is_set():
        return
    error = CatalogLoadCancelled(completed_providers=completed)
    catalog.readiness.fail(error)
    logger.info("catalog_bootstrap_cancelled", completed_providers=completed)
    raise error
