# src/flowwire/core/catalog/readiness.py
"""Readiness guard for the node type catalog.

The catalog is filled once, possibly on a worker thread. Readers check
``is_ready`` without blocking; hosts that need to wait call ``wait()``.
The guard is single-shot: once resolved (ready, failed or cancelled) it
never changes again.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import CancelledError, Future
from concurrent.futures import TimeoutError as FutureTimeoutError


class CatalogReadiness:
    """Single-shot readiness flag backed by a ``concurrent.futures.Future``."""

    def __init__(self) -> None:
        self._future: Future[None] = Future()

    @property
    def future(self) -> Future[None]:
        return self._future

    @property
    def is_ready(self) -> bool:
        """True only after a successful load."""
        if not self._future.done() or self._future.cancelled():
            return False
        return self._future.exception(timeout=0) is None

    @property
    def is_resolved(self) -> bool:
        return self._future.done()

    def mark_ready(self) -> bool:
        """Resolve successfully. Returns False if already resolved."""
        if self._future.done():
            return False
        self._future.set_result(None)
        return True

    def fail(self, error: BaseException) -> bool:
        """Resolve with an error. Returns False if already resolved."""
        if self._future.done():
            return False
        self._future.set_exception(error)
        return True

    def wait(self, timeout: float | None = None) -> bool:
        """Block until resolved.

        Returns:
            True when ready, False on timeout

        Raises:
            The bootstrap's error (e.g. CatalogLoadCancelled) if loading failed
        """
        try:
            self._future.result(timeout=timeout)
        except FutureTimeoutError:
            return False
        except CancelledError:
            return False
        return True

    def add_done_callback(self, callback: Callable[[Future[None]], object]) -> None:
        self._future.add_done_callback(callback)
