"""
Immutable settings shared by every controller handler.
"""

from dataclasses import dataclass
from typing import Tuple
from urllib.parse import urljoin


@dataclass(frozen=True)
class WorkerSettings:
    """Settings frozen from the application config at startup."""

    origin_url: str
    app_name: str
    cache_version: str
    cache_prefix: str
    legacy_cache_prefix: str
    api_prefix: str
    offline_page: str
    static_extensions: Tuple[str, ...]
    static_assets: Tuple[str, ...]
    client_timeout: int
    cacheable_api_routes: Tuple[str, ...]
    periodic_refresh_urls: Tuple[str, ...]

    @classmethod
    def from_config(cls, config) -> 'WorkerSettings':
        return cls(
            origin_url=config.ORIGIN_URL.rstrip('/') + '/',
            app_name=config.APP_NAME,
            cache_version=config.CACHE_VERSION,
            cache_prefix=config.CACHE_PREFIX,
            legacy_cache_prefix=config.LEGACY_CACHE_PREFIX,
            api_prefix=config.API_PREFIX,
            offline_page=config.OFFLINE_PAGE,
            static_extensions=tuple(ext.lower() for ext in config.STATIC_EXTENSIONS),
            static_assets=tuple(config.STATIC_ASSETS),
            client_timeout=config.CLIENT_TIMEOUT,
            cacheable_api_routes=tuple(config.CACHEABLE_API_ROUTES),
            periodic_refresh_urls=tuple(config.PERIODIC_REFRESH_URLS),
        )

    @property
    def static_cache_name(self) -> str:
        return f"{self.cache_prefix}-static-{self.cache_version}"

    @property
    def dynamic_cache_name(self) -> str:
        return f"{self.cache_prefix}-dynamic-{self.cache_version}"

    @property
    def legacy_cache_name(self) -> str:
        """Umbrella partition name, also reported as the worker version."""
        return f"{self.legacy_cache_prefix}-{self.cache_version}"

    @property
    def current_cache_names(self) -> Tuple[str, str, str]:
        return (self.static_cache_name, self.dynamic_cache_name, self.legacy_cache_name)

    def resolve(self, url: str) -> str:
        """Resolve a site-relative URL against the origin."""
        return urljoin(self.origin_url, url)
