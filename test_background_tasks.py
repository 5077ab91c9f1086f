"""
Tests for the scheduler stand-ins: connectivity replay, refresh and install retry.
"""

import pytest

from conftest import serve_static_assets
from config import TestingConfig
from offline.sync_queue import enqueue, pending
from utils.background_tasks import (
    TaskManager,
    create_connectivity_monitor,
    create_content_refresher,
    create_install_retry,
    setup_background_tasks,
)


def test_connectivity_restored_replays_queued_submissions(controller, network):
    network.respond('/api/contact', '{}', status=201, method='POST')
    check = create_connectivity_monitor(controller)

    network.offline = True
    check()
    enqueue(controller.context, 'contact-form', {'name': 'Ruth'})
    check()
    assert len(pending(controller.context, 'contact-form')) == 1

    network.offline = False
    check()
    assert pending(controller.context, 'contact-form') == []


def test_connectivity_check_does_not_replay_while_staying_online(controller, network):
    check = create_connectivity_monitor(controller)
    check()

    network.respond('/api/contact', '{}', method='POST')
    enqueue(controller.context, 'contact-form', {'name': 'Ruth'})
    check()
    assert len(pending(controller.context, 'contact-form')) == 1


def test_content_refresher_waits_for_activation(controller, network):
    refresh = create_content_refresher(controller)
    refresh()
    assert network.calls == []

    serve_static_assets(network)
    controller.register()
    network.calls.clear()
    refresh()
    assert network.fetched('/api/sermons/latest')


def test_install_retry_raises_until_install_succeeds(controller, network):
    retry = create_install_retry(controller)
    with pytest.raises(RuntimeError):
        retry()

    serve_static_assets(network)
    retry()
    assert controller.registration.is_active


def test_task_manager_records_runs_and_errors():
    manager = TaskManager()
    calls = []

    def failing():
        raise ValueError('origin down')

    manager.add_task('ok', lambda: calls.append(1), interval_seconds=60)
    manager.add_task('broken', failing, interval_seconds=60)
    manager.run_task('ok')
    manager.run_task('broken')

    status = manager.get_status()
    assert calls == [1]
    assert status['tasks']['ok']['runs'] == 1
    assert status['tasks']['broken']['errors'] == 1
    assert status['tasks']['broken']['last_error'] == 'origin down'
    assert status['tasks']['broken']['last_run'] is not None


def test_setup_registers_all_tasks(controller):
    manager = setup_background_tasks(controller, TestingConfig)
    assert set(manager.get_status()['tasks']) == {'connectivity_check', 'content_refresh', 'worker_install'}
    assert manager.get_status()['running'] is False
