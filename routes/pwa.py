"""
PWA routes for the Haven Word offline gateway.
Serves the web app manifest and the designed offline page.
"""

from flask import Blueprint, current_app, jsonify

from extensions import cache
from offline.http import offline_html_response
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Create blueprint
pwa_bp = Blueprint('pwa', __name__)


def build_manifest(config) -> dict:
    """Build the web app manifest from config."""
    return {
        'name': config['PWA_NAME'],
        'short_name': config['PWA_SHORT_NAME'],
        'description': config['PWA_DESCRIPTION'],
        'start_url': '/',
        'display': 'standalone',
        'theme_color': config['PWA_THEME_COLOR'],
        'background_color': config['PWA_BACKGROUND_COLOR'],
        'icons': [
            {'src': '/logo512.png', 'sizes': '512x512', 'type': 'image/png'},
            {'src': '/apple-touch-icon.png', 'sizes': '180x180', 'type': 'image/png'},
        ],
    }


@pwa_bp.route('/manifest.json')
@cache.cached(timeout=3600)
def manifest():
    """Serve the PWA manifest"""
    response = jsonify(build_manifest(current_app.config))
    response.mimetype = 'application/manifest+json'
    return response


@pwa_bp.route('/offline.html')
def offline():
    """Serve the offline page"""
    page = offline_html_response(current_app.config['APP_NAME'])
    return page.read(), page.status, {'Content-Type': page.headers['Content-Type']}
