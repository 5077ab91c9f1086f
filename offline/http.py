"""
Request and response objects passed between the gateway, the strategies and
the cache store, plus the synthesized offline responses.
"""

import json
from typing import Any, Dict, Optional, Union
from urllib.parse import urlsplit

from requests.structures import CaseInsensitiveDict

from offline.errors import BodyUsedError

NAVIGATE = 'navigate'
CORS = 'cors'
NO_CORS = 'no-cors'
SAME_ORIGIN = 'same-origin'

OFFLINE_JSON_BODY = {
    'error': 'Offline',
    'message': 'This content is not available offline',
}


class Request:
    """An intercepted HTTP request."""

    def __init__(self, url: str, method: str = 'GET', mode: str = NO_CORS,
                 headers: Optional[Dict[str, str]] = None,
                 body: Optional[bytes] = None):
        self.url = url
        self.method = method.upper()
        self.mode = mode
        self.headers = CaseInsensitiveDict(headers or {})
        self.body = body

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or '/'

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme

    def __repr__(self):
        return f"<Request {self.method} {self.url} mode={self.mode}>"


class Response:
    """
    A response whose body can be consumed exactly once.

    Anything that needs the body twice (store it in a cache *and* hand it
    back to the page) must call ``clone()`` before the first read.
    """

    def __init__(self, body: Union[bytes, str] = b'', status: int = 200,
                 headers: Optional[Dict[str, str]] = None, url: str = ''):
        if isinstance(body, str):
            body = body.encode('utf-8')
        self._body = body
        self.status = status
        self.headers = CaseInsensitiveDict(headers or {})
        self.url = url
        self.body_used = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status <= 299

    def clone(self) -> 'Response':
        if self.body_used:
            raise BodyUsedError(f"Cannot clone {self.url or 'response'}: body already used")
        return Response(self._body, self.status, dict(self.headers), self.url)

    def read(self) -> bytes:
        if self.body_used:
            raise BodyUsedError(f"Body of {self.url or 'response'} already used")
        self.body_used = True
        return self._body

    def text(self) -> str:
        return self.read().decode('utf-8', errors='replace')

    def json(self) -> Any:
        return json.loads(self.read())

    def to_record(self) -> Dict[str, Any]:
        """Consume the body into a storable record."""
        return {
            'url': self.url,
            'status': self.status,
            'headers': dict(self.headers),
            'body': self.read(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'Response':
        return cls(record['body'], record['status'], record['headers'], record['url'])

    def __repr__(self):
        return f"<Response {self.status} {self.url}>"


def offline_json_response() -> Response:
    """The envelope API callers get when neither network nor cache can answer."""
    return Response(
        json.dumps(OFFLINE_JSON_BODY),
        status=503,
        headers={'Content-Type': 'application/json'},
    )


def offline_text_response(status: int = 503) -> Response:
    return Response('Offline', status=status, headers={'Content-Type': 'text/plain'})


def offline_html_response(app_name: str) -> Response:
    """Inline page served to navigations when nothing usable is cached."""
    return Response(
        OFFLINE_HTML_TEMPLATE.replace('{app_name}', app_name),
        status=200,
        headers={'Content-Type': 'text/html; charset=utf-8'},
    )


OFFLINE_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <title>{app_name} - Offline</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <style>
    body {
      font-family: Arial, sans-serif;
      text-align: center;
      padding: 50px;
      background: linear-gradient(135deg, #3b82f6 0%, #8b5cf6 100%);
      color: white;
      margin: 0;
      min-height: 100vh;
      display: flex;
      align-items: center;
      justify-content: center;
    }
    .container {
      background: rgba(255, 255, 255, 0.1);
      padding: 40px;
      border-radius: 20px;
    }
    h1 { margin-bottom: 20px; }
    p { margin-bottom: 20px; opacity: 0.9; }
    button {
      background: white;
      color: #3b82f6;
      border: none;
      padding: 12px 24px;
      border-radius: 8px;
      font-weight: bold;
      cursor: pointer;
    }
  </style>
</head>
<body>
  <div class="container">
    <h1>{app_name}</h1>
    <h2>You're Offline</h2>
    <p>It looks like you're not connected to the internet. Some content may not be available.</p>
    <p>Please check your connection and try again.</p>
    <button onclick="window.location.reload()">Try Again</button>
  </div>
</body>
</html>
"""
