"""
Shared fixtures: an in-process fake origin and ready-made controllers.
"""

import pytest

from config import TestingConfig
from database import Database
from offline import build_controller
from offline.errors import NetworkError
from offline.http import Request, Response
from utils.cache_manager import CacheManager

ORIGIN = 'http://origin.test'


class FakeNetwork:
    """Answers fetches from a route table instead of the wire."""

    def __init__(self, origin=ORIGIN):
        self.origin = origin.rstrip('/')
        self.routes = {}
        self.failing = set()
        self.offline = False
        self.calls = []

    def url(self, path):
        return path if path.startswith('http') else f"{self.origin}{path}"

    def respond(self, path, body='', status=200, headers=None, method='GET'):
        """Register a canned response, or a callable taking the request."""
        if headers is None:
            headers = {'Content-Type': 'text/plain'}
        self.routes[(method, self.url(path))] = (body, status, headers)

    def fail(self, path):
        self.failing.add(self.url(path))

    def fetch(self, request):
        self.calls.append((request.method, request.url))
        if self.offline or request.url in self.failing:
            raise NetworkError(request.url, 'connection refused')

        route = self.routes.get((request.method, request.url))
        if route is None:
            return Response('Not Found', 404, {'Content-Type': 'text/plain'}, request.url)

        body, status, headers = route
        if callable(body):
            return body(request)
        return Response(body, status, headers, request.url)

    def probe(self):
        return not self.offline

    def fetched(self, path, method='GET'):
        return (method, self.url(path)) in self.calls


def serve_static_assets(network, config=TestingConfig):
    for asset in config.STATIC_ASSETS:
        network.respond(asset, f"asset {asset}")


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
def database(tmp_path):
    return Database(str(tmp_path / 'offline.db'))


@pytest.fixture
def make_controller(network, database):
    """Build a controller; backend and config can be swapped per test."""
    def factory(config=TestingConfig, backend=None, net=None):
        return build_controller(config, backend if backend is not None else CacheManager(),
                                database, net or network)
    return factory


@pytest.fixture
def controller(make_controller):
    return make_controller()


@pytest.fixture
def active_controller(controller, network):
    """A controller that has installed and activated against the fake origin."""
    serve_static_assets(network)
    assert controller.register()
    network.calls.clear()
    return controller


@pytest.fixture
def get_request():
    def factory(path, mode='no-cors'):
        return Request(f"{ORIGIN}{path}", 'GET', mode)
    return factory
