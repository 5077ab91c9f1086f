"""
Logging configuration for the Haven Word offline gateway.
Provides consistent logging setup across the application.
"""

import logging
import logging.handlers
import os
from typing import Optional
from config import get_config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = 'logs/offline_gateway.log'


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        name: Logger name (the root logger when omitted, so that every
            module logger created with ``logging.getLogger(__name__)``
            inherits the handlers)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path

    Returns:
        Configured logger instance
    """
    config = get_config()

    # Determine log level
    if level is None:
        level = 'DEBUG' if config.DEBUG else 'INFO'
    numeric_level = getattr(logging, level.upper())

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = __name__) -> logging.Logger:
    """
    Get a logger instance, configuring the root logger on first use.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if not logging.getLogger().handlers:
        config = get_config()
        log_file = LOG_FILE if config.is_production() else None
        setup_logging(log_file=log_file)

    return logging.getLogger(name)
