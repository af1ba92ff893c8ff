"""
contrib_graph/storage/scan_cache.py - In-memory scan cache.

Maps username -> repository limit -> scan result. Lives as long as the
ScanCache instance (normally the process); there is no eviction, no TTL and no
invalidation. Construct one per process and hand it to every UserScanService
that should share results.

The pipeline runs on a single event loop, so no lock is needed: two scans of
the same key racing each other both fetch, and the later store overwrites an
equivalent value.
"""

import logging
from typing import Any, Optional

from contrib_graph.models import Repository

logger = logging.getLogger(__name__)

ScanResult = list[Repository]


class ScanCache:
    """Nested dict keyed by (username, limit_repositories)."""

    def __init__(self) -> None:
        self._entries: dict[str, dict[int, ScanResult]] = {}
        self.hits = 0
        self.misses = 0

    def get(self, username: str, limit_repositories: int) -> Optional[ScanResult]:
        result = self._entries.get(username, {}).get(limit_repositories)
        if result is None:
            self.misses += 1
            return None
        self.hits += 1
        logger.debug("Scan cache hit: %s (limit=%d)", username, limit_repositories)
        # Callers get their own list; the Repository objects are frozen.
        return list(result)

    def set(self, username: str, limit_repositories: int, result: ScanResult) -> None:
        self._entries.setdefault(username, {})[limit_repositories] = list(result)

    def __contains__(self, key: tuple[str, int]) -> bool:
        username, limit_repositories = key
        return limit_repositories in self._entries.get(username, {})

    def __len__(self) -> int:
        return sum(len(by_limit) for by_limit in self._entries.values())

    def keys(self) -> list[tuple[str, int]]:
        return [
            (username, limit)
            for username, by_limit in self._entries.items()
            for limit in by_limit
        ]

    def stats(self) -> dict[str, Any]:
        """Return entry count, distinct users and hit/miss counters."""
        return {
            "entries": len(self),
            "users": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
        }
