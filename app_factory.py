"""
Flask Application Factory
Creates and configures the offline gateway with all necessary components.
"""

import logging
from flask import Flask

from config import Config
from database import init_database
from extensions import cache, cors
from offline import build_controller
from utils.background_tasks import setup_background_tasks
from utils.cache_manager import CacheManager
from utils.logging_config import setup_logging
from routes.proxy import proxy_bp
from routes.pwa import pwa_bp
from routes.worker import worker_bp

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    """Create and configure the Flask application."""
    if not logging.getLogger().handlers:
        setup_logging(log_file='logs/offline_gateway.log' if config_class.is_production() else None)

    for error in config_class.validate():
        logger.error(f"Configuration error: {error}")

    # Flask's static route would shadow proxied /static/ assets
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    logger.info("Initializing services...")

    cors.init_app(app)
    cache.init_app(app)

    services = initialize_services(app, config_class)
    app.config['OFFLINE_CONTROLLER'] = services['controller']
    app.config['TASK_MANAGER'] = services['task_manager']

    register_blueprints(app)

    configure_background_tasks(app, services)

    logger.info("Application created successfully")
    return app


def initialize_services(app, config_class):
    """Initialize all application services."""
    services = {}

    try:
        database = init_database(config_class.DATABASE_PATH)
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    if config_class.CACHE_BACKEND == 'memory':
        cache_backend = CacheManager()
    else:
        cache_backend = database
    logger.info(f"Using {config_class.CACHE_BACKEND} cache backend")

    services['controller'] = build_controller(config_class, cache_backend, database)
    services['task_manager'] = setup_background_tasks(services['controller'], config_class)
    logger.info("Offline cache controller initialized")

    return services


def register_blueprints(app):
    """Register Flask blueprints."""
    app.register_blueprint(pwa_bp, url_prefix='/_pwa')
    app.register_blueprint(worker_bp, url_prefix='/_worker')
    # Catch-all, registered last
    app.register_blueprint(proxy_bp)
    logger.info("Blueprints registered")


def configure_background_tasks(app, services):
    """Install the worker and start background tasks."""
    controller = services['controller']

    # Partitions persisted by an earlier run serve fetches even while the origin is down
    try:
        if controller.restore():
            logger.info(f"Worker {controller.registration.version} restored from stored caches")
    except Exception as e:
        logger.error(f"Could not restore worker from stored caches: {e}")

    if app.config.get('INSTALL_ON_STARTUP'):
        try:
            if controller.register():
                logger.info(f"Worker {controller.registration.version} activated")
            elif controller.registration.is_active:
                logger.warning("Update install failed; the stored version stays active")
            else:
                logger.warning("Initial install failed; the worker_install task will retry")
        except Exception as e:
            logger.error(f"Unexpected error during initial install: {e}")

    if app.config.get('START_BACKGROUND_TASKS'):
        services['task_manager'].start_all()
        logger.info("Background tasks started")
