"""
Tests for request classification and interception rules.
"""

import pytest

from config import TestingConfig
from offline.classifier import RequestCategory, classify, should_intercept
from offline.http import Request
from offline.settings import WorkerSettings

SETTINGS = WorkerSettings.from_config(TestingConfig)


@pytest.mark.parametrize('path', [
    '/static/js/bundle.js',
    '/static/css/main.css',
    '/havenword.jpeg',
    '/fonts/inter.woff2',
    '/favicon.ico',
    '/images/Logo.PNG',
])
def test_static_extensions_are_static_assets(path):
    request = Request(f'http://origin.test{path}')
    assert classify(request, SETTINGS) == RequestCategory.STATIC_ASSET


def test_api_prefix_is_api():
    request = Request('http://origin.test/api/events?page=2', mode='cors')
    assert classify(request, SETTINGS) == RequestCategory.API


def test_static_extension_wins_over_api_prefix():
    request = Request('http://origin.test/api/exports/report.css')
    assert classify(request, SETTINGS) == RequestCategory.STATIC_ASSET


def test_navigate_mode_is_navigation():
    request = Request('http://origin.test/sermons', mode='navigate')
    assert classify(request, SETTINGS) == RequestCategory.NAVIGATION


def test_api_request_in_navigate_mode_is_still_api():
    request = Request('http://origin.test/api/sermons', mode='navigate')
    assert classify(request, SETTINGS) == RequestCategory.API


def test_everything_else_is_other():
    request = Request('http://origin.test/sitemap.xml.gz/feed', mode='cors')
    assert classify(request, SETTINGS) == RequestCategory.OTHER


def test_dot_in_directory_name_is_not_an_extension():
    request = Request('http://origin.test/v1.js/about', mode='cors')
    assert classify(request, SETTINGS) == RequestCategory.OTHER


def test_only_http_get_requests_are_intercepted():
    assert should_intercept(Request('http://origin.test/'))
    assert should_intercept(Request('https://origin.test/'))
    assert not should_intercept(Request('http://origin.test/api/contact', method='POST'))
    assert not should_intercept(Request('chrome-extension://abc/script.js'))
