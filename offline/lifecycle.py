"""
Lifecycle Manager: install, activate and version migration.

Partition names carry the cache version, so a version bump installs into
fresh partitions and the next activation deletes the old ones. An install
that runs while a version is already activated is an update: it is tracked
in ``Registration.installing`` and the active version keeps answering
fetches until the update activates. A failed update never takes the active
version down.
"""

import logging
import threading
import time
from enum import Enum
from typing import Any, Dict, Optional

from offline.errors import InstallError

logger = logging.getLogger(__name__)


class WorkerState(str, Enum):
    PARSED = 'parsed'
    INSTALLING = 'installing'
    INSTALLED = 'installed'  # waiting
    ACTIVATING = 'activating'
    ACTIVATED = 'activated'
    REDUNDANT = 'redundant'


class Registration:
    """Mutable lifecycle state for the running controller."""

    def __init__(self, version: str):
        self.version = version
        self.state = WorkerState.PARSED
        # State of an update install running beside the activated version
        self.installing: Optional[WorkerState] = None
        self.skip_waiting_requested = False
        self.update_available = False
        self.installed_at: Optional[float] = None
        self.activated_at: Optional[float] = None
        self.last_error: Optional[str] = None
        self.lock = threading.RLock()

    @property
    def is_active(self) -> bool:
        return self.state == WorkerState.ACTIVATED

    @property
    def is_waiting(self) -> bool:
        """True when a fresh install or an update is ready to activate."""
        with self.lock:
            return WorkerState.INSTALLED in (self.state, self.installing)

    def transition(self, state: WorkerState):
        with self.lock:
            logger.info(f"Worker {self.version}: {self.state.value} -> {state.value}")
            self.state = state

    def track_install(self, state: WorkerState):
        """Move the install in progress: the update slot when active, else the main state."""
        with self.lock:
            if self.is_active:
                previous = self.installing.value if self.installing else 'none'
                logger.info(f"Worker {self.version} update: {previous} -> {state.value}")
                self.installing = state
            else:
                self.transition(state)

    def to_dict(self) -> Dict[str, Any]:
        with self.lock:
            return {
                'version': self.version,
                'state': self.state.value,
                'installing': self.installing.value if self.installing else None,
                'skip_waiting': self.skip_waiting_requested,
                'update_available': self.update_available,
                'installed_at': self.installed_at,
                'activated_at': self.activated_at,
                'last_error': self.last_error,
            }


def handle_install(event, context):
    """Pre-warm the static partition with the critical asset manifest.

    Raises:
        InstallError: if any manifest asset cannot be fetched
    """
    registration = context.registration
    settings = context.settings
    registration.track_install(WorkerState.INSTALLING)

    # A previous version still holding partitions means this install is an update
    previous = [name for name in context.caches.keys() if name not in settings.current_cache_names]

    try:
        logger.info("Caching static assets")
        static_cache = context.caches.open(settings.static_cache_name)
        static_cache.add_all(settings.static_assets, context.network)
    except InstallError as e:
        with registration.lock:
            registration.last_error = str(e)
        registration.track_install(WorkerState.REDUNDANT)
        logger.error(f"Failed to cache static assets: {e}")
        raise

    logger.info(f"Static assets cached successfully ({len(settings.static_assets)} entries)")
    with registration.lock:
        registration.installed_at = time.time()
        registration.last_error = None
        registration.update_available = (bool(previous) or registration.is_active
                                         or context.clients.has_controlled_clients())
        registration.track_install(WorkerState.INSTALLED)
    skip_waiting(context)


def handle_activate(event, context):
    """Delete every partition outside the current version set, then claim clients."""
    registration = context.registration
    # An activated version keeps intercepting while its update takes over
    if not registration.is_active:
        registration.transition(WorkerState.ACTIVATING)

    keep = set(context.settings.current_cache_names)
    deleted = []
    for cache_name in context.caches.keys():
        if cache_name not in keep:
            logger.info(f"Deleting old cache: {cache_name}")
            context.caches.delete(cache_name)
            deleted.append(cache_name)

    with registration.lock:
        registration.activated_at = time.time()
        registration.skip_waiting_requested = False
        registration.installing = None
        registration.state = WorkerState.ACTIVATED

    claimed = context.clients.claim(registration.version)
    logger.info(f"Service worker activated; removed {len(deleted)} old caches, claimed {claimed} clients")
    return deleted


def skip_waiting(context) -> bool:
    """Request activation without waiting for existing clients to close.

    Returns True when an install is waiting and therefore ready to activate.
    """
    registration = context.registration
    with registration.lock:
        registration.skip_waiting_requested = True
        return registration.is_waiting


def restore(context) -> bool:
    """Activate from partitions an earlier process already installed.

    The static partition must hold every manifest asset; nothing is fetched.
    """
    registration = context.registration
    settings = context.settings
    if registration.is_active:
        return True
    if not context.caches.has(settings.static_cache_name):
        return False

    static_cache = context.caches.open(settings.static_cache_name)
    stored = set(static_cache.keys())
    missing = [url for url in settings.static_assets if settings.resolve(url) not in stored]
    if missing:
        logger.info(f"Cannot restore worker {registration.version}: {len(missing)} assets missing")
        return False

    logger.info(f"Restoring worker {registration.version} from stored partitions")
    with registration.lock:
        registration.state = WorkerState.INSTALLED
    handle_activate(None, context)
    return True


def register(context) -> bool:
    """Run install and, when allowed, activate.

    Returns True once the freshly installed version is activated. A failed
    update returns False while the previously activated version stays active.
    """
    try:
        handle_install(None, context)
    except InstallError:
        return False

    with context.registration.lock:
        ready = (context.registration.skip_waiting_requested
                 or not context.clients.has_controlled_clients())
    if ready:
        handle_activate(None, context)
    return context.registration.is_active
