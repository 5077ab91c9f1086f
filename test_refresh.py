"""
Tests for the update-content periodic refresh.
"""

from offline.refresh import UPDATE_CONTENT_TAG


def test_refresh_recaches_latest_listings(active_controller, network):
    network.respond('/api/events/upcoming', '[{"id": 3}]')
    network.respond('/api/sermons/latest', '[{"id": 9}]')
    network.fail('/api/blog/recent')

    result = active_controller.periodic_sync(UPDATE_CONTENT_TAG)

    assert result['updated'] == ['/api/events/upcoming', '/api/sermons/latest']
    assert result['failed'] == ['/api/blog/recent']

    dynamic = active_controller.context.caches.open(active_controller.settings.dynamic_cache_name)
    assert dynamic.match('/api/sermons/latest').json() == [{'id': 9}]
    assert dynamic.match('/api/blog/recent') is None


def test_refresh_skips_error_responses(active_controller, network):
    network.respond('/api/events/upcoming', 'oops', status=500)

    result = active_controller.periodic_sync(UPDATE_CONTENT_TAG)

    assert '/api/events/upcoming' in result['failed']
    dynamic = active_controller.context.caches.open(active_controller.settings.dynamic_cache_name)
    assert dynamic.keys() == []


def test_unknown_periodic_tag_does_nothing(active_controller, network):
    assert active_controller.periodic_sync('weekly-digest') == {'updated': [], 'failed': []}
    assert network.calls == []
