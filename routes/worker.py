"""
Worker control routes.
Delivers platform events (messages, sync, push, notification clicks) to the
offline cache controller and exposes its status.
"""

import logging
from flask import Blueprint, jsonify, current_app, request

from offline.events import MessagePort
from offline.sync_queue import SYNC_TARGETS, enqueue, pending

worker_bp = Blueprint('worker', __name__)
logger = logging.getLogger(__name__)


def get_controller():
    return current_app.config['OFFLINE_CONTROLLER']


@worker_bp.route('/status', methods=['GET'])
def get_status():
    """Get registration state, cache stats and background task status."""
    try:
        status = get_controller().get_status()
        task_manager = current_app.config.get('TASK_MANAGER')
        status['tasks'] = task_manager.get_status() if task_manager else {}
        return jsonify(status)
    except Exception as e:
        logger.error(f"Error getting worker status: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@worker_bp.route('/install', methods=['POST'])
def install():
    """Run install and activate for the configured version."""
    controller = get_controller()
    activated = controller.register()
    status_code = 200 if activated else 503
    return jsonify(controller.registration.to_dict()), status_code


@worker_bp.route('/message', methods=['POST'])
def post_message():
    """Deliver a message; replies posted on the reply port are returned."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'JSON object required'}), 400

    port = MessagePort()
    result = get_controller().post_message(data, ports=[port])
    return jsonify({'result': result, 'replies': port.messages})


@worker_bp.route('/sync/<tag>', methods=['POST'])
def sync(tag):
    """Fire a background sync event for a tag."""
    if tag not in SYNC_TARGETS:
        return jsonify({'error': f'Unknown sync tag: {tag}'}), 404
    return jsonify(get_controller().sync(tag))


@worker_bp.route('/periodic-sync/<tag>', methods=['POST'])
def periodic_sync(tag):
    """Fire a periodic sync event for a tag."""
    return jsonify(get_controller().periodic_sync(tag))


@worker_bp.route('/queue/<tag>', methods=['GET', 'POST'])
def queue(tag):
    """List or add offline form submissions for a sync tag."""
    if tag not in SYNC_TARGETS:
        return jsonify({'error': f'Unknown sync tag: {tag}'}), 404

    context = get_controller().context
    try:
        if request.method == 'POST':
            payload = request.get_json(silent=True)
            if not isinstance(payload, dict):
                return jsonify({'error': 'JSON object required'}), 400
            return jsonify(enqueue(context, tag, payload)), 201

        return jsonify({'tag': tag, 'submissions': pending(context, tag)})

    except Exception as e:
        logger.error(f"Error handling {tag} queue: {e}")
        return jsonify({'error': 'Internal server error'}), 500


@worker_bp.route('/push', methods=['POST'])
def push():
    """Deliver a push message; the raw body is the payload."""
    notification = get_controller().push(request.get_data() or None)
    return jsonify(notification.to_dict()), 201


@worker_bp.route('/notifications', methods=['GET'])
def notifications():
    """List notifications that are still displayed."""
    active = get_controller().context.notifications.active()
    return jsonify({'notifications': [n.to_dict() for n in active]})


@worker_bp.route('/notifications/<notification_id>/click', methods=['POST'])
def notification_click(notification_id):
    """Route a notification click to a page client."""
    data = request.get_json(silent=True) or {}
    controller = get_controller()
    if controller.context.notifications.get(notification_id) is None:
        return jsonify({'error': 'Notification not found'}), 404

    client = controller.notification_click(notification_id, data.get('action', ''))
    return jsonify({'client': client.to_dict() if client else None})


@worker_bp.route('/clients', methods=['GET', 'POST'])
def clients():
    """List open page clients, or register/refresh one."""
    registry = get_controller().context.clients
    if request.method == 'POST':
        data = request.get_json(silent=True) or {}
        if not data.get('url'):
            return jsonify({'error': 'url is required'}), 400
        client = registry.register(data['url'], client_id=data.get('id'))
        return jsonify(client.to_dict()), 201

    return jsonify({'clients': [client.to_dict() for client in registry.match_all()]})


@worker_bp.route('/clients/<client_id>', methods=['DELETE'])
def unregister_client(client_id):
    """Forget a page client that has closed."""
    if not get_controller().context.clients.unregister(client_id):
        return jsonify({'error': 'Client not found'}), 404
    return jsonify({'unregistered': client_id})
