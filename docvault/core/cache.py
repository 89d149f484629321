"""
Document Content Store
In-memory TTL cache of extracted document text used by the Q&A endpoint
"""

import asyncio
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from docvault.core.config import settings
from docvault.core.logging import get_logger

logger = get_logger(__name__)


class DocumentContentStore:
    """
    In-memory content cache with TTL expiry and LRU eviction

    Entries are keyed by document id (string form). Each entry holds the
    document title, the extracted text and a metadata dict.
    """

    def __init__(
        self,
        ttl: int = 3600,
        max_entries: int = 500,
    ):
        """
        Initialize the content store

        Args:
            ttl: Time to live in seconds for each entry
            max_entries: Maximum number of cached documents
        """
        self.ttl = ttl
        self.max_entries = max_entries
        self._cache: "OrderedDict[str, tuple[Dict[str, Any], datetime]]" = OrderedDict()
        self._lock = asyncio.Lock()
        logger.info(
            f"DocumentContentStore initialized (ttl={ttl}s, max_entries={max_entries})"
        )

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get a cached entry

        Args:
            key: Document id

        Returns:
            Cached entry or None if not found/expired
        """
        async with self._lock:
            if key not in self._cache:
                return None

            value, expiry = self._cache[key]

            if datetime.now(timezone.utc) > expiry:
                del self._cache[key]
                logger.debug(f"Content cache expired: {key}")
                return None

            self._cache.move_to_end(key)
            return value

    async def set(
        self,
        key: str,
        value: Dict[str, Any],
        ttl: Optional[int] = None,
    ) -> None:
        """
        Store an entry, evicting the least recently used one when full

        Args:
            key: Document id
            value: Entry with title, content and metadata
            ttl: Optional per-entry TTL override in seconds
        """
        async with self._lock:
            expiry = datetime.now(timezone.utc) + timedelta(seconds=ttl or self.ttl)
            self._cache[key] = (value, expiry)
            self._cache.move_to_end(key)

            while len(self._cache) > self.max_entries:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Content cache evicted: {evicted}")

    async def invalidate(self, key: str) -> bool:
        """
        Drop the entry for a document

        Returns:
            True if an entry was removed
        """
        async with self._lock:
            if key in self._cache:
                del self._cache[key]
                logger.debug(f"Content cache invalidated: {key}")
                return True
            return False

    async def clear(self) -> int:
        """Clear all entries and return how many were removed"""
        async with self._lock:
            count = len(self._cache)
            self._cache.clear()
            logger.info(f"Content cache cleared: {count} entries")
            return count

    async def get_stats(self) -> Dict[str, Any]:
        async with self._lock:
            now = datetime.now(timezone.utc)
            active_count = sum(1 for _, expiry in self._cache.values() if now <= expiry)
            return {
                "total_entries": len(self._cache),
                "active_entries": active_count,
                "expired_entries": len(self._cache) - active_count,
                "max_entries": self.max_entries,
            }


# Global singleton instance
_content_store: Optional[DocumentContentStore] = None


def get_content_store() -> DocumentContentStore:
    """Get or create the global content store (dependency injection)"""
    global _content_store
    if _content_store is None:
        _content_store = DocumentContentStore(
            ttl=settings.QA_CACHE_TTL_SECONDS,
            max_entries=settings.QA_CACHE_MAX_ENTRIES,
        )
    return _content_store
