"""
Background Sync Queue.

Form submissions that could not be sent are kept in the durable store and
replayed against the API when a sync event for their tag arrives. Retry
timing belongs to whoever redelivers the sync event.
"""

import json
import logging
import threading
from collections import namedtuple
from typing import Any, Dict, List, Optional

from offline.errors import NetworkError
from offline.http import Request

logger = logging.getLogger(__name__)

SyncTarget = namedtuple('SyncTarget', ['kind', 'endpoint'])

SYNC_TARGETS = {
    'contact-form': SyncTarget('contact', '/api/contact'),
    'prayer-request': SyncTarget('prayer-request', '/api/prayer-requests'),
    'rsvp-form': SyncTarget('rsvp', '/api/events/rsvp'),
}

# One replay at a time per tag, so a submission is never posted twice
REPLAY_LOCKS = {tag: threading.Lock() for tag in SYNC_TARGETS}


def tag_for_endpoint(path: str) -> Optional[str]:
    """The sync tag whose submissions are posted to ``path``, if any."""
    for tag, target in SYNC_TARGETS.items():
        if target.endpoint == path.rstrip('/'):
            return tag
    return None


def enqueue(context, tag: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Queue a submission for later replay under ``tag``."""
    target = SYNC_TARGETS.get(tag)
    if target is None:
        raise ValueError(f"Unknown sync tag: {tag}")
    return context.submissions.enqueue_submission(target.kind, payload)


def pending(context, tag: str) -> List[Dict[str, Any]]:
    target = SYNC_TARGETS.get(tag)
    if target is None:
        raise ValueError(f"Unknown sync tag: {tag}")
    return context.submissions.get_submissions(target.kind)


def replay_submission(context, target: SyncTarget, submission: Dict[str, Any]) -> bool:
    """POST one submission. Returns True only for an ok response."""
    request = Request(
        context.settings.resolve(target.endpoint),
        method='POST',
        mode='cors',
        headers={'Content-Type': 'application/json'},
        body=json.dumps(submission['payload']).encode('utf-8'),
    )

    try:
        response = context.network.fetch(request)
    except NetworkError as e:
        logger.error(f"Failed to sync {target.kind} submission {submission['id']}: {e}")
        return False

    if not response.ok:
        logger.error(f"Failed to sync {target.kind} submission {submission['id']}: HTTP {response.status}")
        return False
    return True


def handle_sync(event, context) -> Dict[str, Any]:
    """Replay every queued submission for the event's tag."""
    logger.info(f"Background sync: {event.tag}")

    report = {'tag': event.tag, 'total': 0, 'synced': 0, 'failed': 0}
    target = SYNC_TARGETS.get(event.tag)
    if target is None:
        logger.warning(f"Ignoring sync event with unknown tag {event.tag}")
        return report

    with REPLAY_LOCKS[event.tag]:
        return replay_all(context, target, report)


def replay_all(context, target: SyncTarget, report: Dict[str, Any]) -> Dict[str, Any]:
    try:
        submissions = context.submissions.get_submissions(target.kind)
    except Exception as e:
        logger.error(f"{target.kind} sync failed: could not read offline store: {e}")
        report['error'] = str(e)
        return report

    report['total'] = len(submissions)
    for submission in submissions:
        if not replay_submission(context, target, submission):
            report['failed'] += 1
            continue

        try:
            context.submissions.remove_submission(submission['id'])
        except Exception as e:
            # Delivered but still queued; the next sync event will post it again
            logger.error(f"Could not remove synced submission {submission['id']}: {e}")
        report['synced'] += 1
        logger.info(f"{target.kind} submission {submission['id']} synced successfully")

    return report
