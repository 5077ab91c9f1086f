"""
Route modules for the Haven Word offline gateway.
"""

from .proxy import proxy_bp
from .pwa import pwa_bp
from .worker import worker_bp

__all__ = [
    'proxy_bp',
    'pwa_bp',
    'worker_bp'
]
