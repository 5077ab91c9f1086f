"""
Tests for the requests-backed network client and the response model.
"""

from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from config import TestingConfig
from offline.errors import BodyUsedError, NetworkError
from offline.http import Request, Response
from offline.network import NetworkClient
from offline.settings import WorkerSettings

SETTINGS = WorkerSettings.from_config(TestingConfig)


def upstream_response(status=200, body=b'ok', headers=None):
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {'Content-Type': 'text/plain'})
    return response


def test_fetch_resolves_relative_urls_and_strips_transport_headers():
    session = MagicMock()
    session.request.return_value = upstream_response(
        headers={'Content-Type': 'text/html', 'Transfer-Encoding': 'chunked', 'Connection': 'close'})
    client = NetworkClient(SETTINGS, timeout=5, session=session)

    response = client.fetch(Request('/sermons', headers={'Host': 'gateway.local', 'Accept': 'text/html'}))

    args, kwargs = session.request.call_args
    assert args == ('GET', 'http://origin.test/sermons')
    assert kwargs['headers'] == {'Accept': 'text/html'}
    assert kwargs['timeout'] == 5
    assert response.status == 200
    assert response.url == 'http://origin.test/sermons'
    assert dict(response.headers) == {'Content-Type': 'text/html'}


def test_error_status_is_a_response_not_an_exception():
    session = MagicMock()
    session.request.return_value = upstream_response(status=500, body=b'boom')
    client = NetworkClient(SETTINGS, session=session)

    response = client.fetch(Request('http://origin.test/api/events'))
    assert response.status == 500
    assert not response.ok
    assert response.read() == b'boom'


@pytest.mark.parametrize('error', [
    requests.ConnectionError('refused'),
    requests.Timeout('slow'),
    requests.exceptions.SSLError('bad cert'),
])
def test_transport_errors_become_network_errors(error):
    session = MagicMock()
    session.request.side_effect = error
    client = NetworkClient(SETTINGS, session=session)

    with pytest.raises(NetworkError) as excinfo:
        client.fetch(Request('/api/events'))
    assert excinfo.value.url == 'http://origin.test/api/events'


def test_probe():
    session = MagicMock()
    client = NetworkClient(SETTINGS, session=session)
    assert client.probe() is True

    session.head.side_effect = requests.ConnectionError('down')
    assert client.probe() is False


def test_response_body_can_only_be_read_once():
    response = Response('hello', url='http://origin.test/')
    copy = response.clone()

    assert response.text() == 'hello'
    with pytest.raises(BodyUsedError):
        response.read()
    with pytest.raises(BodyUsedError):
        response.clone()
    assert copy.text() == 'hello'


def test_ok_range():
    assert Response(status=200).ok
    assert Response(status=299).ok
    assert not Response(status=304).ok
    assert not Response(status=199).ok
