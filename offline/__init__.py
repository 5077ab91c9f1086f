"""
Offline cache controller for the Haven Word Church site.

Intercepts site requests, answers them from versioned cache partitions or
the network, replays queued form submissions and routes push notifications.
"""

from .controller import OfflineCacheController, build_controller
from .events import EventKind
from .http import Request, Response

__all__ = [
    'OfflineCacheController',
    'build_controller',
    'EventKind',
    'Request',
    'Response'
]
