"""
Flask extension instances, bound to the app in app_factory.create_app.
"""

from flask_caching import Cache
from flask_cors import CORS

cache = Cache()
cors = CORS()
