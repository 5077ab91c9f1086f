"""
Configuration module for the Haven Word offline gateway.
Centralizes all configuration settings and environment variables.
"""

import os
from dotenv import load_dotenv
from typing import Optional

# Load environment variables
load_dotenv()


class Config:
    """Application configuration class."""

    # Flask Configuration
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_ENV') == 'development'
    TESTING = False
    PORT = int(os.getenv('PORT', 8090))

    # Upstream church site the gateway sits in front of
    ORIGIN_URL = os.getenv('ORIGIN_URL', 'http://localhost:5000')
    APP_NAME = os.getenv('APP_NAME', 'Haven Word Church')
    NETWORK_TIMEOUT = float(os.getenv('NETWORK_TIMEOUT', 30))
    # Seconds without a check-in before a page client is dropped
    CLIENT_TIMEOUT = int(os.getenv('CLIENT_TIMEOUT', 1800))

    # Cache partitions - bump CACHE_VERSION to roll every partition
    CACHE_VERSION = os.getenv('CACHE_VERSION', 'v1.0.0')
    CACHE_PREFIX = os.getenv('CACHE_PREFIX', 'haven-word')
    LEGACY_CACHE_PREFIX = os.getenv('LEGACY_CACHE_PREFIX', 'haven-word-church')
    CACHE_BACKEND = os.getenv('CACHE_BACKEND', 'sqlite')

    # Database Configuration
    DATABASE_PATH = os.getenv('DATABASE_PATH', 'data/offline_gateway.db')

    # Background task intervals (seconds)
    CONNECTIVITY_CHECK_INTERVAL = int(os.getenv('CONNECTIVITY_CHECK_INTERVAL', 30))
    CONTENT_REFRESH_INTERVAL = int(os.getenv('CONTENT_REFRESH_INTERVAL', 3600))
    INSTALL_RETRY_INTERVAL = int(os.getenv('INSTALL_RETRY_INTERVAL', 300))
    START_BACKGROUND_TASKS = True
    INSTALL_ON_STARTUP = True

    # Flask-Caching Configuration
    CACHE_TYPE = 'SimpleCache'
    CACHE_DEFAULT_TIMEOUT = 300  # 5 minutes default
    CACHE_KEY_PREFIX = 'haven_offline_'

    # PWA Configuration
    PWA_NAME = "Haven Word Church"
    PWA_SHORT_NAME = "Haven Word"
    PWA_DESCRIPTION = "Sermons, events and ministry news from Haven Word Church"
    PWA_THEME_COLOR = "#003DA5"
    PWA_BACKGROUND_COLOR = "#FFFFFF"

    # Request classification
    API_PREFIX = '/api/'
    STATIC_EXTENSIONS = (
        'js', 'css', 'png', 'jpg', 'jpeg', 'gif', 'svg', 'webp', 'ico',
        'woff', 'woff2', 'ttf', 'eot',
    )
    OFFLINE_PAGE = '/offline.html'

    # Critical assets pre-cached at install
    STATIC_ASSETS = [
        '/',
        '/static/js/bundle.js',
        '/static/css/main.css',
        '/manifest.json',
        '/favicon.ico',
        '/havenword.jpeg',
        '/logo512.png',
        '/apple-touch-icon.png',
    ]

    # API listings that may be stored in the dynamic partition
    CACHEABLE_API_ROUTES = [
        '/api/events',
        '/api/sermons',
        '/api/blog',
        '/api/ministries',
    ]

    # Refreshed by the update-content periodic sync
    PERIODIC_REFRESH_URLS = [
        '/api/events/upcoming',
        '/api/sermons/latest',
        '/api/blog/recent',
    ]

    @classmethod
    def validate(cls) -> list[str]:
        """Validate required configuration values."""
        errors = []

        if not cls.ORIGIN_URL:
            errors.append("ORIGIN_URL is required")

        if cls.CACHE_BACKEND not in ('sqlite', 'memory'):
            errors.append(f"CACHE_BACKEND must be 'sqlite' or 'memory', got {cls.CACHE_BACKEND!r}")

        return errors

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production mode."""
        return not cls.DEBUG and not cls.TESTING


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    PORT = 5001  # Development port
    CONNECTIVITY_CHECK_INTERVAL = 10


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    PORT = 8090

    @classmethod
    def validate(cls) -> list[str]:
        """Additional validation for production."""
        errors = super().validate()

        # Only warn about SECRET_KEY in production, don't fail
        if cls.SECRET_KEY == 'dev-secret-key-change-in-production':
            print("Warning: SECRET_KEY is using default value - consider setting a secure key in production")

        return errors


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    ORIGIN_URL = 'http://origin.test'
    CACHE_BACKEND = 'memory'
    CACHE_TYPE = 'NullCache'
    START_BACKGROUND_TASKS = False
    INSTALL_ON_STARTUP = False


# Configuration mapping
config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig  # Default to production
}


def get_config(config_name: Optional[str] = None) -> Config:
    """Get configuration based on environment."""
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'default')

    return config_map.get(config_name, config_map['default'])
