"""
Offline Cache Controller.

Platform events are routed through a single dispatch table; each handler is
a function of (event, context) and the context is built once at startup.
"""

import logging
from typing import Any, Callable, Dict, Optional

from offline.cache_store import CacheStorage
from offline.classifier import classify, should_intercept
from offline.context import WorkerContext
from offline.events import (
    EventKind,
    FetchEvent,
    MessageEvent,
    NotificationClickEvent,
    PeriodicSyncEvent,
    PushEvent,
    SyncEvent,
)
from offline.lifecycle import Registration, handle_activate, handle_install, register, restore, skip_waiting
from offline.http import Response
from offline.network import NetworkClient
from offline.notifications import ClientRegistry, NotificationCenter, handle_notification_click, handle_push
from offline.refresh import handle_periodic_sync
from offline.settings import WorkerSettings
from offline.strategies import STRATEGIES
from offline.sync_queue import SYNC_TARGETS, handle_sync

logger = logging.getLogger(__name__)


def handle_fetch(event: FetchEvent, context) -> Optional[Response]:
    """Classify and answer a request. ``None`` means: not intercepted, go to the network."""
    request = event.request
    if not should_intercept(request):
        return None

    category = classify(request, context.settings)
    logger.debug(f"{request.method} {request.url} classified as {category.value}")
    return STRATEGIES[category](request, context)


def handle_message(event: MessageEvent, context) -> Optional[Dict[str, Any]]:
    logger.info(f"Message received: {event.data}")
    data = event.data if isinstance(event.data, dict) else {}
    message_type = data.get('type')

    if message_type == 'SKIP_WAITING':
        if skip_waiting(context):
            handle_activate(None, context)
        return {'state': context.registration.state.value}

    if message_type == 'GET_VERSION':
        reply = {'version': context.settings.legacy_cache_name}
        if event.ports:
            event.ports[0].post_message(reply)
        return reply

    logger.warning(f"Ignoring unknown message type {message_type!r}")
    return None


EVENT_HANDLERS: Dict[EventKind, Callable[[Any, WorkerContext], Any]] = {
    EventKind.INSTALL: handle_install,
    EventKind.ACTIVATE: handle_activate,
    EventKind.FETCH: handle_fetch,
    EventKind.SYNC: handle_sync,
    EventKind.PERIODIC_SYNC: handle_periodic_sync,
    EventKind.PUSH: handle_push,
    EventKind.NOTIFICATION_CLICK: handle_notification_click,
    EventKind.MESSAGE: handle_message,
}


class OfflineCacheController:
    """Entry point used by the gateway and the background tasks."""

    def __init__(self, context: WorkerContext):
        self.context = context

    @property
    def settings(self) -> WorkerSettings:
        return self.context.settings

    @property
    def registration(self) -> Registration:
        return self.context.registration

    def dispatch(self, kind: EventKind, event) -> Any:
        handler = EVENT_HANDLERS[EventKind(kind)]
        return handler(event, self.context)

    def register(self) -> bool:
        """Install and activate the current version."""
        return register(self.context)

    def restore(self) -> bool:
        """Reactivate from partitions persisted by an earlier run."""
        return restore(self.context)

    def fetch(self, request) -> Optional[Response]:
        # Only an activated worker receives fetch events
        if not self.registration.is_active:
            return None
        return self.dispatch(EventKind.FETCH, FetchEvent(request))

    def sync(self, tag: str) -> Dict[str, Any]:
        return self.dispatch(EventKind.SYNC, SyncEvent(tag))

    def sync_pending(self) -> Dict[str, Dict[str, Any]]:
        """Fire a sync event for every tag that has queued submissions."""
        counts = self.context.submissions.count_submissions()
        reports = {}
        for tag, target in SYNC_TARGETS.items():
            if counts.get(target.kind):
                reports[tag] = self.sync(tag)
        return reports

    def periodic_sync(self, tag: str) -> Dict[str, Any]:
        return self.dispatch(EventKind.PERIODIC_SYNC, PeriodicSyncEvent(tag))

    def push(self, data: Optional[bytes]):
        return self.dispatch(EventKind.PUSH, PushEvent(data))

    def notification_click(self, notification_id: str, action: str = ''):
        return self.dispatch(EventKind.NOTIFICATION_CLICK, NotificationClickEvent(notification_id, action))

    def post_message(self, data, ports=None):
        return self.dispatch(EventKind.MESSAGE, MessageEvent(data, list(ports or [])))

    def get_status(self) -> Dict[str, Any]:
        return {
            'registration': self.registration.to_dict(),
            'caches': self.context.caches.get_stats(),
            'pending_submissions': self.context.submissions.count_submissions(),
            'clients': len(self.context.clients.match_all()),
            'notifications': len(self.context.notifications.active()),
        }


def build_controller(config, cache_backend, submissions, network=None) -> OfflineCacheController:
    """Build the controller and its context from the application config."""
    settings = WorkerSettings.from_config(config)
    if network is None:
        network = NetworkClient(settings, timeout=config.NETWORK_TIMEOUT)

    context = WorkerContext(
        settings=settings,
        caches=CacheStorage(cache_backend, settings),
        network=network,
        submissions=submissions,
        notifications=NotificationCenter(),
        clients=ClientRegistry(settings),
        registration=Registration(settings.legacy_cache_name),
    )
    return OfflineCacheController(context)
