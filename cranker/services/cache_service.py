"""
Cache Service - Content-addressed fixture cache

Maps build request digests to items built while loading fixtures. Entries are
never evicted; the cache lives as long as its factory or until reset.
"""

from typing import Any, Dict, Iterator, List

from cranker.services.base_service import BaseService


class DigestCache(BaseService):
    """In-memory digest -> item store with hit/miss accounting."""

    def _initialize(self) -> None:
        self.entries: Dict[str, Any] = {}
        self.metrics = {
            'hits': 0,
            'misses': 0,
            'sets': 0,
        }

    def get(self, digest: str, default: Any = None) -> Any:
        """Get a cached item.

        Args:
            digest: Build request digest
            default: Value returned when the digest is not cached

        Returns:
            Cached item or default
        """
        if digest in self.entries:
            self.metrics['hits'] += 1
            return self.entries[digest]

        self.metrics['misses'] += 1
        return default

    def store(self, digest: str, item: Any) -> Any:
        """Store an item unless the digest is already cached.

        Returns:
            The item cached under the digest after the call
        """
        if digest not in self.entries:
            self.entries[digest] = item
            self.metrics['sets'] += 1
            self.log_debug(f"Cached fixture {digest[:12]}", digest=digest)
        return self.entries[digest]

    def exists(self, digest: str) -> bool:
        return digest in self.entries

    def values(self) -> List[Any]:
        return list(self.entries.values())

    def clear(self) -> None:
        """Clear all cache entries."""
        self._initialize()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary containing hit/miss counters and entry count
        """
        total_requests = self.metrics['hits'] + self.metrics['misses']
        hit_ratio = (self.metrics['hits'] / total_requests * 100) if total_requests > 0 else 0

        return {
            **self.metrics,
            'hit_ratio': hit_ratio,
            'entry_count': len(self.entries),
        }

    def __contains__(self, digest: str) -> bool:
        return digest in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"DigestCache(entries={len(self.entries)})"

