# src/flowwire/engine/cache.py
"""Memoization of activation records.

A record is reusable while the node's own data and the slice of topology
feeding it are unchanged, so the key is
``(node_id, data_fingerprint, topology_fingerprint)``. Fingerprints come
from GraphSnapshot (RFC 8785 canonical hashes).
"""

from __future__ import annotations

from collections import OrderedDict

from flowwire.contracts.graph import ActivationRecord
from flowwire.contracts.types import NodeID

type CacheKey = tuple[NodeID, str, str]


class ActivationCache:
    """Bounded LRU of activation records.

    maxsize=0 disables caching entirely (every get() misses).
    Not thread-safe; the evaluator is single-threaded.
    """

    def __init__(self, maxsize: int = 1024) -> None:
        if maxsize < 0:
            raise ValueError(f"maxsize must be >= 0, got {maxsize}")
        self._maxsize = maxsize
        self._entries: OrderedDict[CacheKey, ActivationRecord] = OrderedDict()
        self.hits = 0
        self.misses = 0

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: CacheKey) -> ActivationRecord | None:
        record = self._entries.get(key)
        if record is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return record

    def put(self, key: CacheKey, record: ActivationRecord) -> None:
        if self._maxsize == 0:
            return
        self._entries[key] = record
        self._entries.move_to_end(key)
        while len(self._entries) > self._maxsize:
            self._entries.popitem(last=False)

    def invalidate(self, node_id: NodeID) -> int:
        """Drop every entry for one node. Returns the number dropped."""
        stale = [key for key in self._entries if key[0] == node_id]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0
