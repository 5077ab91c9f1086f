"""
Utility modules for the Haven Word offline gateway.
"""

from .logging_config import get_logger, setup_logging
from .background_tasks import TaskManager, setup_background_tasks
from .cache_manager import CacheManager

__all__ = [
    'get_logger',
    'setup_logging',
    'TaskManager',
    'setup_background_tasks',
    'CacheManager'
]
