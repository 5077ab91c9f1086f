#!/usr/bin/env python3
"""
Production WSGI entry point for the Haven Word offline gateway.
"""

import os

# Set production environment
os.environ['FLASK_ENV'] = 'production'

from app_factory import create_app
from config import ProductionConfig

# Create the application
app = create_app(ProductionConfig)

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=ProductionConfig.PORT)
