"""
In-memory cache partition backend for the offline gateway.
Holds named partitions of request -> response records behind a single lock.
"""

import time
import threading
import logging
from typing import Dict, Any, Optional, List
from collections import OrderedDict

logger = logging.getLogger(__name__)


class CacheEntry:
    """Represents a single stored response with metadata."""

    def __init__(self, key: str, record: Dict[str, Any]):
        self.key = key
        self.record = record
        self.created_at = time.time()
        self.last_accessed = self.created_at
        self.access_count = 0
        self.size = len(record.get('body') or b'')

    def access(self):
        """Mark the entry as accessed."""
        self.last_accessed = time.time()
        self.access_count += 1

    def get_age(self) -> float:
        """Get the age of the cache entry in seconds."""
        return time.time() - self.created_at


class CacheManager:
    """Named cache partitions kept in process memory.

    Partitions are returned in creation order, matching how the platform
    searches caches when no partition is named.
    """

    def __init__(self):
        self.caches: "OrderedDict[str, OrderedDict[str, CacheEntry]]" = OrderedDict()
        self.lock = threading.RLock()

    def open_cache(self, cache_name: str):
        """Create a partition if it does not exist yet."""
        with self.lock:
            if cache_name not in self.caches:
                self.caches[cache_name] = OrderedDict()
                logger.info(f"Created cache partition: {cache_name}")

    def has_cache(self, cache_name: str) -> bool:
        with self.lock:
            return cache_name in self.caches

    def delete_cache(self, cache_name: str) -> bool:
        """Delete a whole partition."""
        with self.lock:
            if cache_name in self.caches:
                del self.caches[cache_name]
                return True
            return False

    def cache_names(self) -> List[str]:
        with self.lock:
            return list(self.caches.keys())

    def get_entry(self, cache_name: str, key: str) -> Optional[Dict[str, Any]]:
        """Get a stored record from a partition."""
        with self.lock:
            cache = self.caches.get(cache_name)
            if cache is None or key not in cache:
                return None

            entry = cache[key]
            entry.access()
            return dict(entry.record)

    def put_entry(self, cache_name: str, key: str, record: Dict[str, Any]):
        """Store a record, replacing any previous one under the same key."""
        with self.lock:
            self.open_cache(cache_name)
            cache = self.caches[cache_name]
            cache.pop(key, None)
            cache[key] = CacheEntry(key, dict(record))

    def delete_entry(self, cache_name: str, key: str) -> bool:
        with self.lock:
            cache = self.caches.get(cache_name)
            if cache is not None and key in cache:
                del cache[key]
                return True
            return False

    def entry_keys(self, cache_name: str) -> List[str]:
        with self.lock:
            return list(self.caches.get(cache_name, {}).keys())

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self.lock:
            stats = {
                'backend': 'memory',
                'total_caches': len(self.caches),
                'caches': {}
            }

            total_entries = 0
            total_bytes = 0

            for cache_name, cache in self.caches.items():
                size = sum(entry.size for entry in cache.values())
                stats['caches'][cache_name] = {
                    'entries': len(cache),
                    'size_bytes': size,
                    'hits': sum(entry.access_count for entry in cache.values()),
                    'oldest_entry_age': round(max((e.get_age() for e in cache.values()), default=0.0), 2),
                }
                total_entries += len(cache)
                total_bytes += size

            stats['total_entries'] = total_entries
            stats['total_size_mb'] = round(total_bytes / (1024 * 1024), 2)

            return stats
