"""
The shared context handed by reference to every controller handler.
"""

from dataclasses import dataclass

from offline.cache_store import CacheStorage
from offline.lifecycle import Registration
from offline.notifications import ClientRegistry, NotificationCenter
from offline.settings import WorkerSettings


@dataclass
class WorkerContext:
    """Everything a handler may touch.

    ``network`` needs ``fetch(request)`` and ``probe()``; ``submissions``
    needs ``enqueue_submission``, ``get_submissions``, ``remove_submission``
    and ``count_submissions`` (``database.Database`` provides them).
    """

    settings: WorkerSettings
    caches: CacheStorage
    network: object
    submissions: object
    notifications: NotificationCenter
    clients: ClientRegistry
    registration: Registration
