"""Tests for catalog readiness and bootstrap."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from flowwire.contracts import CatalogLoadCancelled
from flowwire.core.catalog import (
    CatalogReadiness,
    NodeTypeCatalog,
    NodeTypeProvider,
    PatternFallbackProvider,
    UniversalDefaultProvider,
    bootstrap_catalog,
)


class TestCatalogReadiness:
    def test_starts_unresolved(self) -> None:
        readiness = CatalogReadiness()
        assert not readiness.is_ready
        assert not readiness.is_resolved
        assert readiness.wait(timeout=0) is False

    def test_mark_ready_is_single_shot(self) -> None:
        readiness = CatalogReadiness()

        assert readiness.mark_ready() is True
        assert readiness.mark_ready() is False
        assert readiness.fail(RuntimeError("late")) is False
        assert readiness.is_ready
        assert readiness.wait() is True

    def test_failure_is_not_ready(self) -> None:
        readiness = CatalogReadiness()
        readiness.fail(RuntimeError("boom"))

        assert readiness.is_resolved
        assert not readiness.is_ready
        with pytest.raises(RuntimeError, match="boom"):
            readiness.wait(timeout=0)

    def test_cancelled_future(self) -> None:
        readiness = CatalogReadiness()
        readiness.future.cancel()

        assert not readiness.is_ready
        assert readiness.wait(timeout=0) is False

    def test_done_callback(self) -> None:
        readiness = CatalogReadiness()
        seen: list[bool] = []
        readiness.add_done_callback(lambda f: seen.append(f.done()))

        readiness.mark_ready()

        assert seen == [True]


class TestBootstrapCatalog:
    def test_installs_providers_in_loader_order(self, pending_catalog: NodeTypeCatalog) -> None:
        bootstrap_catalog(pending_catalog, [PatternFallbackProvider, UniversalDefaultProvider])

        assert pending_catalog.is_ready
        assert [p.name for p in pending_catalog.providers] == ["pattern_fallback", "universal_default"]

    def test_on_worker_thread(self, pending_catalog: NodeTypeCatalog) -> None:
        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(bootstrap_catalog, pending_catalog, [PatternFallbackProvider])
            assert pending_catalog.readiness.wait(timeout=5)
            assert future.result() is pending_catalog

    def test_cancelled_before_first_loader(self, pending_catalog: NodeTypeCatalog) -> None:
        cancelled = threading.Event()
        cancelled.set()
        calls: list[str] = []

        def loader() -> NodeTypeProvider:
            calls.append("called")
            return PatternFallbackProvider()

        with pytest.raises(CatalogLoadCancelled) as exc_info:
            bootstrap_catalog(pending_catalog, [loader], cancelled=cancelled)

        assert calls == []
        assert exc_info.value.completed_providers == 0
        assert not pending_catalog.is_ready
        with pytest.raises(CatalogLoadCancelled):
            pending_catalog.readiness.wait(timeout=0)

    def test_cancelled_between_loaders(self, pending_catalog: NodeTypeCatalog) -> None:
        cancelled = threading.Event()

        def first() -> NodeTypeProvider:
            cancelled.set()
            return PatternFallbackProvider()

        with pytest.raises(CatalogLoadCancelled) as exc_info:
            bootstrap_catalog(pending_catalog, [first, UniversalDefaultProvider], cancelled=cancelled)

        assert exc_info.value.completed_providers == 1
        assert not pending_catalog.is_ready

    def test_loader_failure_propagates(self, pending_catalog: NodeTypeCatalog, captured_logs: list) -> None:
        def broken() -> NodeTypeProvider:
            raise OSError("registry unreadable")

        with pytest.raises(OSError, match="registry unreadable"):
            bootstrap_catalog(pending_catalog, [broken])

        assert pending_catalog.readiness.is_resolved
        assert not pending_catalog.is_ready
        assert any(e["event"] == "catalog_bootstrap_failed" for e in captured_logs)
