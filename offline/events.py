"""
Platform events delivered to the controller.

Each event kind maps to one handler in ``offline.controller.EVENT_HANDLERS``.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from offline.http import Request


class EventKind(str, Enum):
    INSTALL = 'install'
    ACTIVATE = 'activate'
    FETCH = 'fetch'
    SYNC = 'sync'
    PERIODIC_SYNC = 'periodicsync'
    PUSH = 'push'
    NOTIFICATION_CLICK = 'notificationclick'
    MESSAGE = 'message'


class MessagePort:
    """Reply channel handed to a message event; collects posted messages."""

    def __init__(self):
        self.messages: List[Any] = []
        self._lock = threading.Lock()

    def post_message(self, message: Any):
        with self._lock:
            self.messages.append(message)


@dataclass
class InstallEvent:
    pass


@dataclass
class ActivateEvent:
    pass


@dataclass
class FetchEvent:
    request: Request


@dataclass
class SyncEvent:
    tag: str


@dataclass
class PeriodicSyncEvent:
    tag: str


@dataclass
class PushEvent:
    data: Optional[bytes] = None


@dataclass
class NotificationClickEvent:
    notification_id: str
    action: str = ''


@dataclass
class MessageEvent:
    data: Optional[Dict[str, Any]]
    ports: List[MessagePort] = field(default_factory=list)
