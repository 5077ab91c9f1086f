"""
Network access for the controller, backed by a requests session.
"""

import logging
from typing import Optional

import requests

from offline.errors import NetworkError
from offline.http import Request, Response

logger = logging.getLogger(__name__)

# Hop-by-hop and transport headers that must not be replayed upstream or stored
HOP_BY_HOP_HEADERS = {
    'connection', 'keep-alive', 'proxy-authenticate', 'proxy-authorization',
    'te', 'trailers', 'transfer-encoding', 'upgrade', 'host', 'content-length',
    'content-encoding',
}


class NetworkClient:
    """Performs fetches against the origin server."""

    def __init__(self, settings, timeout: Optional[float] = 30,
                 session: Optional[requests.Session] = None):
        self.settings = settings
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, request: Request) -> Response:
        """
        Send a request and return whatever the server answered.

        Non-2xx answers are returned as responses; only a failure to get any
        answer at all raises.

        Raises:
            NetworkError: connection, DNS, TLS or timeout failure
        """
        url = self.settings.resolve(request.url)
        headers = {
            key: value for key, value in request.headers.items()
            if key.lower() not in HOP_BY_HOP_HEADERS
        }

        try:
            upstream = self.session.request(
                request.method,
                url,
                headers=headers,
                data=request.body,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            logger.debug(f"Fetch {request.method} {url} failed: {e}")
            raise NetworkError(url, str(e)) from e

        response_headers = {
            key: value for key, value in upstream.headers.items()
            if key.lower() not in HOP_BY_HOP_HEADERS
        }
        return Response(upstream.content, upstream.status_code, response_headers, url)

    def probe(self) -> bool:
        """Check whether the origin answers at all."""
        try:
            self.session.head(self.settings.origin_url, timeout=self.timeout)
            return True
        except requests.RequestException as e:
            logger.debug(f"Connectivity probe failed: {e}")
            return False
