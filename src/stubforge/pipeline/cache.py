"""In-memory cache of generation results, keyed by structural fingerprint.

Two units whose flattened surfaces, strategy, strictness and generation
settings are structurally equal share a fingerprint, so the second one
skips naming, model building and rendering.

Design:
- Bounded by max_entries; the oldest entry is evicted first (FIFO)
- No TTL, no disk
- Only successful results are stored
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

import structlog

from stubforge.config.models import CacheConfig
from stubforge.pipeline.models import GenerationResult

log = structlog.get_logger(__name__)

_MAX_ENTRIES = 256


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    size: int = 0


class GenerationCache:
    """Thread-safe fingerprint -> result store."""

    def __init__(self, max_entries: int = _MAX_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._store: dict[str, GenerationResult] = {}
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._stats = CacheStats()

    @classmethod
    def from_config(cls, config: CacheConfig) -> GenerationCache:
        return cls(max_entries=config.max_entries)

    def get(self, fingerprint: str) -> GenerationResult | None:
        with self._lock:
            result = self._store.get(fingerprint)
            if result is None:
                self._stats.misses += 1
            else:
                self._stats.hits += 1
            return result

    def put(self, fingerprint: str, result: GenerationResult) -> None:
        if not result.ok:
            return
        with self._lock:
            if fingerprint not in self._store and len(self._store) >= self._max_entries:
                oldest = next(iter(self._store))
                self._store.pop(oldest)
                self._stats.evictions += 1
                log.debug("generation_cache_evict", fingerprint=oldest[:12])
            self._store[fingerprint] = result

    def __contains__(self, fingerprint: str) -> bool:
        with self._lock:
            return fingerprint in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._stats.hits,
                misses=self._stats.misses,
                evictions=self._stats.evictions,
                size=len(self._store),
            )

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._stats = CacheStats()
