"""
Proxy routes.
Every request not handled by another blueprint is forwarded to the origin
through the offline cache controller.
"""

import logging
from flask import Blueprint, Response as FlaskResponse, current_app, jsonify, request

from offline.errors import NetworkError
from offline.http import NAVIGATE, NO_CORS, Request
from offline.network import HOP_BY_HOP_HEADERS
from offline.sync_queue import enqueue, tag_for_endpoint

proxy_bp = Blueprint('proxy', __name__)
logger = logging.getLogger(__name__)

ALL_METHODS = ['GET', 'HEAD', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']


def build_request(settings) -> Request:
    """Translate the incoming Flask request into a controller request."""
    target = request.path
    if request.query_string:
        target = f"{target}?{request.query_string.decode('latin-1')}"

    mode = request.headers.get('Sec-Fetch-Mode')
    if not mode:
        accepts_html = request.accept_mimetypes.best == 'text/html'
        mode = NAVIGATE if request.method == 'GET' and accepts_html else NO_CORS

    headers = {
        key: value for key, value in request.headers.items()
        if key.lower() not in HOP_BY_HOP_HEADERS
    }
    body = request.get_data() if request.method not in ('GET', 'HEAD') else None
    return Request(settings.resolve(target), request.method, mode, headers, body)


def to_flask_response(response) -> FlaskResponse:
    headers = [
        (key, value) for key, value in response.headers.items()
        if key.lower() not in HOP_BY_HOP_HEADERS
    ]
    return FlaskResponse(response.read(), status=response.status, headers=headers)


def bad_gateway(url: str):
    return jsonify({
        'error': 'Bad Gateway',
        'message': f'Could not reach {url}'
    }), 502


def pass_through(controller, outgoing: Request):
    """Send a request the controller did not intercept straight to the network."""
    try:
        return to_flask_response(controller.context.network.fetch(outgoing))
    except NetworkError as e:
        logger.warning(f"Pass-through {outgoing.method} {outgoing.url} failed: {e}")

    # A form post that failed offline is kept for background sync
    tag = tag_for_endpoint(request.path)
    if outgoing.method == 'POST' and tag:
        payload = request.get_json(silent=True)
        if payload is None and request.form:
            payload = request.form.to_dict()
        if isinstance(payload, dict):
            submission = enqueue(controller.context, tag, payload)
            return jsonify({'queued': True, 'tag': tag, 'id': submission['id']}), 202

    return bad_gateway(outgoing.url)


@proxy_bp.route('/', defaults={'path': ''}, methods=ALL_METHODS)
@proxy_bp.route('/<path:path>', methods=ALL_METHODS)
def proxy(path):
    """Answer a site request through the controller."""
    controller = current_app.config['OFFLINE_CONTROLLER']
    outgoing = build_request(controller.settings)

    response = controller.fetch(outgoing)
    if response is None:
        return pass_through(controller, outgoing)
    return to_flask_response(response)
