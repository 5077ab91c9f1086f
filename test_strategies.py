"""
Tests for the fetch strategies behind each request category.
"""

import json

from conftest import ORIGIN, serve_static_assets
from offline.events import EventKind, FetchEvent
from offline.http import Request
from utils.cache_manager import CacheManager


def dynamic_keys(controller):
    return controller.context.caches.open(controller.settings.dynamic_cache_name).keys()


# Static assets: cache-first

def test_static_asset_is_served_from_cache_after_first_fetch(active_controller, network, get_request):
    network.respond('/images/pastor.png', b'PNGDATA', headers={'Content-Type': 'image/png'})

    first = active_controller.fetch(get_request('/images/pastor.png'))
    assert first.read() == b'PNGDATA'
    assert network.fetched('/images/pastor.png')

    network.calls.clear()
    network.offline = True
    second = active_controller.fetch(get_request('/images/pastor.png'))
    assert second.read() == b'PNGDATA'
    assert network.calls == []


def test_static_asset_precached_at_install_needs_no_network(active_controller, network, get_request):
    response = active_controller.fetch(get_request('/static/js/bundle.js'))
    assert response.text() == 'asset /static/js/bundle.js'
    assert network.calls == []


def test_static_asset_error_response_is_not_cached(active_controller, network, get_request):
    network.respond('/images/missing.png', 'gone', status=404)

    response = active_controller.fetch(get_request('/images/missing.png'))
    assert response.status == 404
    static = active_controller.context.caches.open(active_controller.settings.static_cache_name)
    assert static.match('/images/missing.png') is None


def test_static_asset_offline_uses_offline_page_when_cached(active_controller, network, get_request):
    static = active_controller.context.caches.open(active_controller.settings.static_cache_name)
    network.respond('/offline.html', '<p>offline page</p>', headers={'Content-Type': 'text/html'})
    static.add_all(['/offline.html'], network)
    network.offline = True

    response = active_controller.fetch(get_request('/images/new.png'))
    assert response.text() == '<p>offline page</p>'


def test_static_asset_offline_without_fallback_returns_minimal_response(active_controller, network, get_request):
    network.offline = True
    response = active_controller.fetch(get_request('/images/new.png'))
    assert response.text() == 'Offline'


def test_cache_write_failure_still_returns_response(make_controller, network, get_request):
    class BrokenWrites(CacheManager):
        def put_entry(self, cache_name, key, record):
            if key.endswith('/images/a.png'):
                raise RuntimeError('disk full')
            super().put_entry(cache_name, key, record)

    controller = make_controller(backend=BrokenWrites())
    serve_static_assets(network)
    assert controller.register()

    network.respond('/images/a.png', b'A')
    response = controller.fetch(get_request('/images/a.png'))
    assert response.status == 200
    assert response.read() == b'A'


# API: network-first with cache fallback

def test_allow_listed_api_response_is_cached_and_served_offline(active_controller, network, get_request):
    network.respond('/api/events', json.dumps([{'id': 1}]), headers={'Content-Type': 'application/json'})

    response = active_controller.fetch(get_request('/api/events', mode='cors'))
    assert response.json() == [{'id': 1}]
    assert f'{ORIGIN}/api/events' in dynamic_keys(active_controller)

    network.offline = True
    cached = active_controller.fetch(get_request('/api/events', mode='cors'))
    assert cached.status == 200
    assert cached.json() == [{'id': 1}]


def test_allow_list_covers_sub_paths_and_query_strings(active_controller, network, get_request):
    network.respond('/api/sermons/42', '{}')
    network.respond('/api/blog?page=2', '{}')

    active_controller.fetch(get_request('/api/sermons/42', mode='cors'))
    active_controller.fetch(get_request('/api/blog?page=2', mode='cors'))

    keys = dynamic_keys(active_controller)
    assert f'{ORIGIN}/api/sermons/42' in keys
    assert f'{ORIGIN}/api/blog?page=2' in keys


def test_non_allow_listed_api_response_is_never_cached(active_controller, network, get_request):
    network.respond('/api/users/profile', '{"name": "Grace"}')
    network.respond('/api/eventsarchive', '{}')

    assert active_controller.fetch(get_request('/api/users/profile', mode='cors')).status == 200
    assert active_controller.fetch(get_request('/api/eventsarchive', mode='cors')).status == 200

    assert dynamic_keys(active_controller) == []


def test_api_server_error_is_returned_unmodified_and_not_cached(active_controller, network, get_request):
    network.respond('/api/events', '{"error": "boom"}', status=500)

    response = active_controller.fetch(get_request('/api/events', mode='cors'))
    assert response.status == 500
    assert response.json() == {'error': 'boom'}
    assert dynamic_keys(active_controller) == []


def test_api_offline_without_cache_returns_json_envelope(active_controller, network, get_request):
    network.offline = True

    response = active_controller.fetch(get_request('/api/ministries', mode='cors'))
    assert response.status == 503
    assert response.headers['content-type'] == 'application/json'
    assert response.json() == {'error': 'Offline', 'message': 'This content is not available offline'}


# Navigation: network-first with page fallback chain

def test_successful_navigation_is_cached(active_controller, network, get_request):
    network.respond('/sermons', '<h1>Sermons</h1>', headers={'Content-Type': 'text/html'})

    response = active_controller.fetch(get_request('/sermons', mode='navigate'))
    assert response.text() == '<h1>Sermons</h1>'
    assert f'{ORIGIN}/sermons' in dynamic_keys(active_controller)

    network.offline = True
    again = active_controller.fetch(get_request('/sermons', mode='navigate'))
    assert again.text() == '<h1>Sermons</h1>'


def test_navigation_falls_back_to_cached_root(active_controller, network, get_request):
    network.offline = True
    response = active_controller.fetch(get_request('/events', mode='navigate'))
    assert response.text() == 'asset /'


def test_navigation_error_status_is_treated_as_failure(active_controller, network, get_request):
    network.respond('/about', 'maintenance', status=502)
    response = active_controller.fetch(get_request('/about', mode='navigate'))
    assert response.text() == 'asset /'
    assert f'{ORIGIN}/about' not in dynamic_keys(active_controller)


def test_navigation_uses_offline_page_when_root_missing(active_controller, network, get_request):
    static = active_controller.context.caches.open(active_controller.settings.static_cache_name)
    static.delete('/')
    network.respond('/offline.html', 'designed offline page')
    static.add_all(['/offline.html'], network)
    network.offline = True

    response = active_controller.fetch(get_request('/sermons', mode='navigate'))
    assert response.text() == 'designed offline page'


def test_navigation_with_nothing_cached_returns_inline_offline_html(active_controller, network, get_request):
    static = active_controller.context.caches.open(active_controller.settings.static_cache_name)
    static.delete('/')
    network.offline = True

    response = active_controller.fetch(get_request('/sermons', mode='navigate'))
    assert response.status == 200
    assert response.headers['Content-Type'].startswith('text/html')
    body = response.text()
    assert "You're Offline" in body
    assert 'window.location.reload()' in body
    assert 'Haven Word Church' in body


# Other requests: network-first best effort

def test_other_requests_are_cached_when_ok(active_controller, network, get_request):
    network.respond('/feed.xml', '<rss/>')
    assert active_controller.fetch(get_request('/feed.xml', mode='cors')).text() == '<rss/>'

    network.offline = True
    assert active_controller.fetch(get_request('/feed.xml', mode='cors')).text() == '<rss/>'


def test_other_requests_offline_without_cache_return_503(active_controller, network, get_request):
    network.offline = True
    response = active_controller.fetch(get_request('/feed.xml', mode='cors'))
    assert response.status == 503
    assert response.text() == 'Offline'


# Interception rules

def test_non_get_requests_are_not_intercepted(active_controller, network):
    request = Request(f'{ORIGIN}/api/contact', method='POST', mode='cors', body=b'{}')
    assert active_controller.dispatch(EventKind.FETCH, FetchEvent(request)) is None
    assert network.calls == []


def test_inactive_controller_does_not_intercept(controller, network, get_request):
    network.respond('/images/a.png', b'A')
    assert controller.fetch(get_request('/images/a.png')) is None
    assert network.calls == []


def test_returned_response_body_is_unread(active_controller, network, get_request):
    network.respond('/api/events', '[]')
    response = active_controller.fetch(get_request('/api/events', mode='cors'))
    assert response.body_used is False
