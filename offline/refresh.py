"""
Periodic background refresh of frequently changing API listings.
"""

import logging
from typing import Any, Dict

from offline.errors import NetworkError
from offline.http import Request

logger = logging.getLogger(__name__)

UPDATE_CONTENT_TAG = 'update-content'


def update_cached_content(context) -> Dict[str, Any]:
    """Refetch each refresh URL into the dynamic partition; one failure never stops the rest."""
    result = {'updated': [], 'failed': []}
    cache = context.caches.open(context.settings.dynamic_cache_name)

    for url in context.settings.periodic_refresh_urls:
        request = Request(context.settings.resolve(url), mode='cors')
        try:
            response = context.network.fetch(request)
            if not response.ok:
                logger.warning(f"Skipped refreshing {url}: HTTP {response.status}")
                result['failed'].append(url)
                continue
            cache.put(request, response)
            result['updated'].append(url)
            logger.info(f"Updated cached content: {url}")
        except NetworkError as e:
            logger.error(f"Failed to update cached content {url}: {e}")
            result['failed'].append(url)
        except Exception as e:
            logger.error(f"Failed to store refreshed content {url}: {e}")
            result['failed'].append(url)

    return result


def handle_periodic_sync(event, context) -> Dict[str, Any]:
    logger.info(f"Periodic sync: {event.tag}")
    if event.tag != UPDATE_CONTENT_TAG:
        logger.warning(f"Ignoring periodic sync with unknown tag {event.tag}")
        return {'updated': [], 'failed': []}
    return update_cached_content(context)
