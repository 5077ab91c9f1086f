"""
Push/Notification Bridge.

Push payloads become displayed notifications; clicks are routed back to an
open page client (focused if one already shows the target URL, otherwise a
new one is opened).
"""

import copy
import json
import logging
import threading
import time
import uuid
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS = {
    'icon': '/havenword.jpeg',
    'badge': '/favicon-32x32.png',
    'vibrate': [100, 50, 100],
    'data': {
        'url': '/'
    },
    'actions': [
        {
            'action': 'open',
            'title': 'Open App',
            'icon': '/icons/open-192.png'
        },
        {
            'action': 'close',
            'title': 'Close',
            'icon': '/icons/close-192.png'
        }
    ]
}


class Notification:
    """A notification shown to the user."""

    def __init__(self, title: str, options: Dict[str, Any]):
        self.id = uuid.uuid4().hex
        self.title = title
        self.body = options.get('body', '')
        self.data = options.get('data') or {}
        self.actions = options.get('actions') or []
        self.options = options
        self.shown_at = time.time()
        self.closed = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'body': self.body,
            'data': self.data,
            'actions': self.actions,
            'icon': self.options.get('icon'),
            'badge': self.options.get('badge'),
            'vibrate': self.options.get('vibrate'),
            'shown_at': self.shown_at,
            'closed': self.closed,
        }


class NotificationCenter:
    """Displayed notifications, polled by pages."""

    def __init__(self):
        self._notifications: Dict[str, Notification] = {}
        self._lock = threading.Lock()

    def show(self, title: str, options: Dict[str, Any]) -> Notification:
        notification = Notification(title, options)
        with self._lock:
            self._notifications[notification.id] = notification
        logger.info(f"Showing notification {notification.id}: {notification.body}")
        return notification

    def get(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            return self._notifications.get(notification_id)

    def close(self, notification_id: str) -> bool:
        """Dismiss a notification; closed notifications are forgotten."""
        with self._lock:
            notification = self._notifications.pop(notification_id, None)
        if notification is None:
            return False
        notification.closed = True
        return True

    def active(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications.values())


class WindowClient:
    """An open page."""

    def __init__(self, url: str):
        self.id = uuid.uuid4().hex
        self.url = url
        self.focused = False
        self.controller: Optional[str] = None
        self.last_seen = time.time()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'url': self.url,
            'focused': self.focused,
            'controller': self.controller,
            'last_seen': self.last_seen,
        }


class ClientRegistry:
    """Open page clients keyed by id.

    Pages refresh themselves by registering again; a page not seen for
    ``settings.client_timeout`` seconds is treated as closed and dropped.
    """

    def __init__(self, settings):
        self.settings = settings
        self._clients: Dict[str, WindowClient] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float):
        cutoff = now - self.settings.client_timeout
        stale = [client_id for client_id, client in self._clients.items() if client.last_seen < cutoff]
        for client_id in stale:
            del self._clients[client_id]
        if stale:
            logger.info(f"Dropped {len(stale)} stale clients")

    def register(self, url: str, client_id: Optional[str] = None) -> WindowClient:
        """Register a page, or update the URL of an already known one."""
        with self._lock:
            self._prune(time.time())
            client = self._clients.get(client_id) if client_id else None
            if client is None:
                client = WindowClient(self.settings.resolve(url))
                self._clients[client.id] = client
            else:
                client.url = self.settings.resolve(url)
            client.last_seen = time.time()
            return client

    def unregister(self, client_id: str) -> bool:
        with self._lock:
            return self._clients.pop(client_id, None) is not None

    def match_all(self) -> List[WindowClient]:
        with self._lock:
            self._prune(time.time())
            return list(self._clients.values())

    def has_controlled_clients(self) -> bool:
        with self._lock:
            return any(client.controller for client in self._clients.values())

    def focus(self, client: WindowClient) -> WindowClient:
        with self._lock:
            for other in self._clients.values():
                other.focused = other is client
        return client

    def open_window(self, url: str) -> WindowClient:
        client = self.register(url)
        logger.info(f"Opened new client {client.id} at {client.url}")
        return self.focus(client)

    def claim(self, version: str) -> int:
        """Put every open client under the given controller version."""
        with self._lock:
            for client in self._clients.values():
                client.controller = version
            return len(self._clients)


def parse_push_payload(data: Optional[bytes]) -> Dict[str, Any]:
    """Read ``body``/``url`` overrides from a push payload; never raises."""
    if not data:
        return {}
    try:
        payload = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning(f"Ignoring malformed push payload: {e}")
        return {}
    if not isinstance(payload, dict):
        logger.warning("Ignoring push payload that is not a JSON object")
        return {}
    return {key: payload[key] for key in ('body', 'url')
            if isinstance(payload.get(key), str) and payload[key]}


def handle_push(event, context) -> Notification:
    """Display a notification for an incoming push message."""
    logger.info("Push notification received")

    options = copy.deepcopy(DEFAULT_OPTIONS)
    options['body'] = f"You have a new message from {context.settings.app_name}"

    payload = parse_push_payload(event.data)
    options['body'] = payload.get('body', options['body'])
    options['data']['url'] = payload.get('url', options['data']['url'])

    return context.notifications.show(context.settings.app_name, options)


def handle_notification_click(event, context) -> Optional[WindowClient]:
    """Close the notification and bring the user to its URL."""
    logger.info("Notification clicked")

    notification = context.notifications.get(event.notification_id)
    if notification is None:
        logger.warning(f"Click for unknown notification {event.notification_id}")
        return None
    context.notifications.close(notification.id)

    if event.action == 'close':
        return None

    target = context.settings.resolve(notification.data.get('url') or '/')
    for client in context.clients.match_all():
        if client.url == target:
            return context.clients.focus(client)

    return context.clients.open_window(target)
