"""
Strategy Dispatcher: the four fetch strategies and the category table.

Every strategy is total: network failures are turned into cached or
synthesized responses and never escape to the caller.
"""

import logging
from typing import Callable, Dict, Optional

from offline.classifier import RequestCategory
from offline.errors import NetworkError
from offline.http import (
    Request,
    Response,
    offline_html_response,
    offline_json_response,
    offline_text_response,
)

logger = logging.getLogger(__name__)


def cache_response(context, cache_name: str, request: Request, response: Response):
    """Store a clone of ``response``; failures are logged and never propagate."""
    try:
        copy = response.clone()
        context.caches.open(cache_name).put(request, copy)
    except Exception as e:
        logger.error(f"Failed to cache {request.url} in {cache_name}: {e}")


def first_match(context, *candidates) -> Optional[Response]:
    """Return the first cached response among ``candidates``."""
    for candidate in candidates:
        cached = context.caches.match(candidate)
        if cached is not None:
            return cached
    return None


def is_cacheable_api_route(request: Request, settings) -> bool:
    path = request.path
    return any(
        path == route or path.startswith(route.rstrip('/') + '/')
        for route in settings.cacheable_api_routes
    )


def cache_first(request: Request, context) -> Response:
    """Static assets: cache, then network (stored on success), then offline fallback."""
    cached = context.caches.match(request)
    if cached is not None:
        return cached

    try:
        response = context.network.fetch(request)
    except NetworkError as e:
        logger.warning(f"Static asset fetch failed: {e}")
        fallback = context.caches.match(context.settings.offline_page)
        return fallback if fallback is not None else offline_text_response(status=200)

    if response.ok:
        cache_response(context, context.settings.static_cache_name, request, response)
    return response


def network_first_api(request: Request, context) -> Response:
    """API calls: network, storing allow-listed ok answers; cache or 503 envelope offline."""
    try:
        response = context.network.fetch(request)
    except NetworkError as e:
        logger.info(f"API network failed, trying cache: {e}")
        cached = context.caches.match(request)
        return cached if cached is not None else offline_json_response()

    if response.ok and is_cacheable_api_route(request, context.settings):
        cache_response(context, context.settings.dynamic_cache_name, request, response)
    return response


def network_first_navigation(request: Request, context) -> Response:
    """Pages: network, then exact cache, then ``/``, then the offline page, then inline HTML."""
    try:
        response = context.network.fetch(request)
        if response.ok:
            cache_response(context, context.settings.dynamic_cache_name, request, response)
            return response
        logger.info(f"Navigation to {request.url} returned {response.status}, falling back to cache")
    except NetworkError as e:
        logger.info(f"Navigation network failed, trying cache: {e}")

    fallback = first_match(context, request, '/', context.settings.offline_page)
    if fallback is not None:
        return fallback
    return offline_html_response(context.settings.app_name)


def network_first_other(request: Request, context) -> Response:
    """Everything else: network with best-effort caching, cache or bare 503 offline."""
    try:
        response = context.network.fetch(request)
    except NetworkError:
        cached = context.caches.match(request)
        return cached if cached is not None else offline_text_response(status=503)

    if response.ok:
        cache_response(context, context.settings.dynamic_cache_name, request, response)
    return response


STRATEGIES: Dict[RequestCategory, Callable[[Request, object], Response]] = {
    RequestCategory.STATIC_ASSET: cache_first,
    RequestCategory.API: network_first_api,
    RequestCategory.NAVIGATION: network_first_navigation,
    RequestCategory.OTHER: network_first_other,
}
