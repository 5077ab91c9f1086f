"""
Request Classifier: decides which fetch strategy handles a request.
"""

from enum import Enum

from offline.http import NAVIGATE, Request


class RequestCategory(str, Enum):
    STATIC_ASSET = 'static-asset'
    API = 'api'
    NAVIGATION = 'navigation'
    OTHER = 'other'


def should_intercept(request: Request) -> bool:
    """Only http(s) GET requests are handled; everything else goes straight to the network."""
    if request.method != 'GET':
        return False
    return request.scheme in ('http', 'https')


def is_static_asset(request: Request, settings) -> bool:
    path = request.path.lower()
    _, dot, extension = path.rpartition('.')
    if not dot or '/' in extension:
        return False
    return extension in settings.static_extensions


def is_api_request(request: Request, settings) -> bool:
    return request.path.startswith(settings.api_prefix)


def is_navigation_request(request: Request) -> bool:
    return request.mode == NAVIGATE


def classify(request: Request, settings) -> RequestCategory:
    """Checks run in priority order: static asset, API, navigation."""
    if is_static_asset(request, settings):
        return RequestCategory.STATIC_ASSET
    if is_api_request(request, settings):
        return RequestCategory.API
    if is_navigation_request(request):
        return RequestCategory.NAVIGATION
    return RequestCategory.OTHER
