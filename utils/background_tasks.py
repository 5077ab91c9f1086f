"""
Background tasks for the Haven Word offline gateway.
Stands in for the platform schedulers: connectivity-triggered sync replay,
periodic content refresh and install retries.
"""

import time
import threading
import logging
from typing import Callable

logger = logging.getLogger(__name__)


class TaskManager:
    """Manages background tasks with scheduling and monitoring."""

    def __init__(self):
        self.tasks = {}
        self.running = False
        self.thread = None
        self.lock = threading.Lock()

    def add_task(self, name: str, task_func: Callable, interval_seconds: int = 300,
                 run_immediately: bool = False):
        """Add a new background task."""
        with self.lock:
            self.tasks[name] = {
                'func': task_func,
                'interval': interval_seconds,
                'last_run': None,
                'next_run': time.time() + (0 if run_immediately else interval_seconds),
                'in_progress': False,
                'runs': 0,
                'errors': 0,
                'last_error': None
            }
            logger.info(f"Added task: {name} (interval: {interval_seconds}s)")

    def start_all(self):
        """Start all background tasks."""
        with self.lock:
            if self.running:
                logger.warning("Task manager already running")
                return

            self.running = True
            self.thread = threading.Thread(target=self._run_scheduler, daemon=True)
            self.thread.start()
            logger.info("Task manager started")

    def stop_all(self):
        """Stop all background tasks."""
        with self.lock:
            self.running = False
            thread = self.thread
        if thread:
            thread.join(timeout=5)
        logger.info("Task manager stopped")

    def _run_scheduler(self):
        """Main scheduler loop."""
        while self.running:
            try:
                current_time = time.time()

                with self.lock:
                    for name, task_info in self.tasks.items():
                        if task_info['in_progress'] or current_time < task_info['next_run']:
                            continue
                        task_info['in_progress'] = True
                        # Run task in separate thread to avoid blocking
                        threading.Thread(
                            target=self._run_task,
                            args=(name, task_info),
                            daemon=True
                        ).start()

                time.sleep(1)

            except Exception as e:
                logger.error(f"Error in scheduler loop: {e}")
                time.sleep(5)

    def _run_task(self, name: str, task_info: dict):
        """Run a single task with error handling."""
        start_time = time.time()
        try:
            task_info['func']()

            with self.lock:
                task_info['runs'] += 1
                task_info['last_error'] = None

            logger.debug(f"Task {name} completed in {time.time() - start_time:.2f}s")

        except Exception as e:
            logger.error(f"Error running task {name}: {e}")

            with self.lock:
                task_info['errors'] += 1
                task_info['last_error'] = str(e)

        finally:
            with self.lock:
                task_info['last_run'] = time.time()
                task_info['next_run'] = time.time() + task_info['interval']
                task_info['in_progress'] = False

    def run_task(self, name: str):
        """Run a task synchronously, outside the schedule."""
        with self.lock:
            task_info = self.tasks[name]
            task_info['in_progress'] = True
        self._run_task(name, task_info)

    def get_status(self) -> dict:
        """Get status of all tasks."""
        with self.lock:
            status = {
                'running': self.running,
                'tasks': {}
            }

            for name, task_info in self.tasks.items():
                status['tasks'][name] = {
                    'interval': task_info['interval'],
                    'last_run': task_info['last_run'],
                    'next_run': task_info['next_run'],
                    'runs': task_info['runs'],
                    'errors': task_info['errors'],
                    'last_error': task_info['last_error']
                }

            return status


def create_connectivity_monitor(controller) -> Callable:
    """
    Create a connectivity check that replays queued submissions.

    Sync events are dispatched only on an offline -> online transition,
    and on the first successful probe after startup.

    Args:
        controller: OfflineCacheController instance

    Returns:
        Check function
    """
    state = {'online': None}

    def check_connectivity():
        online = controller.context.network.probe()
        was_online = state['online']
        state['online'] = online

        if online and not was_online:
            logger.info("Connectivity restored, replaying queued submissions")
            reports = controller.sync_pending()
            for tag, report in reports.items():
                logger.info(f"Sync {tag}: {report['synced']}/{report['total']} submitted, {report['failed']} failed")
        elif not online and was_online:
            logger.warning("Origin unreachable, serving from cache")

    return check_connectivity


def create_content_refresher(controller) -> Callable:
    """Create the periodic update-content refresher."""
    from offline.refresh import UPDATE_CONTENT_TAG

    def refresh_content():
        if not controller.registration.is_active:
            return
        result = controller.periodic_sync(UPDATE_CONTENT_TAG)
        logger.info(f"Content refresh: {len(result['updated'])} updated, {len(result['failed'])} failed")

    return refresh_content


def create_install_retry(controller) -> Callable:
    """Create a task that retries registration until the worker is activated."""
    def retry_install():
        if controller.registration.is_active:
            return
        logger.info("Worker not active, retrying install")
        if not controller.register():
            raise RuntimeError(controller.registration.last_error or 'install failed')

    return retry_install


def setup_background_tasks(controller, config) -> TaskManager:
    """
    Set up background tasks for the application.

    Args:
        controller: OfflineCacheController instance
        config: Application config class

    Returns:
        TaskManager instance
    """
    task_manager = TaskManager()

    task_manager.add_task('connectivity_check', create_connectivity_monitor(controller),
                          config.CONNECTIVITY_CHECK_INTERVAL, run_immediately=True)
    task_manager.add_task('content_refresh', create_content_refresher(controller),
                          config.CONTENT_REFRESH_INTERVAL)
    task_manager.add_task('worker_install', create_install_retry(controller),
                          config.INSTALL_RETRY_INTERVAL)

    return task_manager
