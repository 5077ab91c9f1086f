"""
Cache Store: named, versioned partitions of GET request -> response pairs.

The storage backend is either ``utils.cache_manager.CacheManager`` (memory)
or ``database.Database`` (SQLite); both expose the same partition methods.
"""

import logging
from typing import List, Optional, Sequence, Union

from offline.errors import InstallError, NetworkError
from offline.http import Request, Response

logger = logging.getLogger(__name__)

RequestLike = Union[Request, str]


class CacheStorage:
    """All partitions known to the controller."""

    def __init__(self, backend, settings):
        self.backend = backend
        self.settings = settings

    def request_key(self, request: RequestLike) -> str:
        if isinstance(request, str):
            return f"GET {self.settings.resolve(request)}"
        if request.method != 'GET':
            raise ValueError(f"Request method {request.method!r} cannot be cached")
        return f"GET {self.settings.resolve(request.url)}"

    def open(self, cache_name: str) -> 'CachePartition':
        self.backend.open_cache(cache_name)
        return CachePartition(self, cache_name)

    def has(self, cache_name: str) -> bool:
        return self.backend.has_cache(cache_name)

    def delete(self, cache_name: str) -> bool:
        return self.backend.delete_cache(cache_name)

    def keys(self) -> List[str]:
        return self.backend.cache_names()

    def match(self, request: RequestLike) -> Optional[Response]:
        """Search every partition, oldest first, for a stored response."""
        try:
            key = self.request_key(request)
        except ValueError:
            return None

        for cache_name in self.backend.cache_names():
            record = self.backend.get_entry(cache_name, key)
            if record is not None:
                return Response.from_record(record)
        return None

    def get_stats(self):
        return self.backend.get_stats()


class CachePartition:
    """A single named partition."""

    def __init__(self, storage: CacheStorage, name: str):
        self.storage = storage
        self.name = name

    def match(self, request: RequestLike) -> Optional[Response]:
        try:
            key = self.storage.request_key(request)
        except ValueError:
            return None
        record = self.storage.backend.get_entry(self.name, key)
        return Response.from_record(record) if record is not None else None

    def put(self, request: RequestLike, response: Response):
        """Store ``response``, consuming its body. Pass a clone."""
        key = self.storage.request_key(request)
        record = response.to_record()
        if not record['url']:
            record['url'] = key.split(' ', 1)[1]
        self.storage.backend.put_entry(self.name, key, record)

    def add_all(self, urls: Sequence[str], network):
        """Fetch every URL and store them all, or store nothing.

        Raises:
            InstallError: if any fetch fails or returns a non-ok status
        """
        fetched = []
        for url in urls:
            request = Request(self.storage.settings.resolve(url))
            try:
                response = network.fetch(request)
            except NetworkError as e:
                raise InstallError(f"Failed to fetch {url}: {e.reason or e}") from e
            if not response.ok:
                raise InstallError(f"Failed to fetch {url}: HTTP {response.status}")
            fetched.append((request, response))

        for request, response in fetched:
            self.put(request, response)

    def delete(self, request: RequestLike) -> bool:
        return self.storage.backend.delete_entry(self.name, self.storage.request_key(request))

    def keys(self) -> List[str]:
        """URLs stored in this partition."""
        return [key.split(' ', 1)[1] for key in self.storage.backend.entry_keys(self.name)]
