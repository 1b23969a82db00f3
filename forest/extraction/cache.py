"""Parse cache for tree-sitter trees.

Avoids reparsing a file whose content has not changed when a caller passes
one cache to several backends or analyses the same sources repeatedly. A
one-shot project run sizes the cache to its worker count.
"""

from __future__ import annotations

import hashlib
import threading
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from forest.parsing.tree_sitter_wrapper import ParsedSource, RustParser


class ParseCache:
    """Parsed-source cache keyed by (file_path, content_hash).

    Uses LRU eviction with a TTL. Thread safety: a threading.Lock guards the
    table so worker threads can share one cache.
    """

    def __init__(self, max_entries: int = 500, ttl_seconds: int = 300):
        self._cache: dict[str, tuple[ParsedSource, float]] = {}
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _make_key(self, content: str, file_path: str) -> str:
        content_hash = hashlib.md5(content.encode("utf-8", errors="replace")).hexdigest()
        return f"{file_path}:{content_hash}"

    def get(self, content: str, file_path: str) -> ParsedSource | None:
        """Cached parse if present and not expired."""
        key = self._make_key(content, file_path)
        with self._lock:
            if key in self._cache:
                parsed, timestamp = self._cache[key]
                if time.time() - timestamp < self._ttl_seconds:
                    self._hits += 1
                    # Refresh position for LRU ordering
                    self._cache[key] = (parsed, time.time())
                    return parsed
                del self._cache[key]
            self._misses += 1
            return None

    def put(self, content: str, file_path: str, parsed: ParsedSource) -> None:
        key = self._make_key(content, file_path)
        with self._lock:
            self._cache[key] = (parsed, time.time())
            self._evict_if_needed()

    def get_or_parse(
        self, content: str, file_path: str, parser: RustParser | None = None
    ) -> ParsedSource:
        """Return the cached parse or parse now and remember the result.

        Raises:
            ParseError: If the grammar is unavailable.
        """
        cached = self.get(content, file_path)
        if cached is not None:
            return cached

        if parser is None:
            from forest.parsing.tree_sitter_wrapper import RustParser

            parser = RustParser()
        parsed = parser.parse(content, file_path)
        self.put(content, file_path, parsed)
        return parsed

    def _evict_if_needed(self) -> None:
        """Evict least recently used entries. Must be called with the lock held."""
        if len(self._cache) <= self._max_entries:
            return
        sorted_keys = sorted(self._cache, key=lambda k: self._cache[k][1])
        for key in sorted_keys[: len(self._cache) - self._max_entries]:
            del self._cache[key]

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def stats(self) -> dict[str, float]:
        """Cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "entries": len(self._cache),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / max(total, 1) * 100, 1),
            }
