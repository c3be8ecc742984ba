from flask import Blueprint, request, jsonify, g
from extensions import db, cache_get, cache_set
from middleware.auth import require_session
from services.notifications import NotificationService
from utils.pagination import paginate

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('/', methods=['GET'])
@require_session()
def get_notifications():
    """Get notifications for the current user, newest first"""
    user_id = g.acting.user_id
    service = NotificationService(db.session)

    unread_only = request.args.get('unread_only', 'false').lower() == 'true'
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', 10, type=int)

    cache_key = f"notifications:{user_id}:{'unread' if unread_only else 'all'}:{page}:{per_page}"
    cached_data = cache_get(cache_key)
    if cached_data:
        return jsonify({**cached_data, 'cached': True}), 200

    result = paginate(service.query_for(user_id, unread_only=unread_only), page=page, per_page=per_page)
    data = {
        'notifications': [n.to_dict() for n in result['items']],
        'pagination': result['pagination'],
        'unread_count': service.unread_count(user_id)
    }

    # Cache for 30 seconds
    cache_set(cache_key, data, expire=30)

    return jsonify({**data, 'cached': False}), 200


@notifications_bp.route('/unread-count', methods=['GET'])
@require_session()
def get_unread_count():
    user_id = g.acting.user_id

    cache_key = f"notifications:unread_count:{user_id}"
    cached_count = cache_get(cache_key)
    if cached_count is not None:
        return jsonify({'unread_count': cached_count, 'cached': True}), 200

    unread_count = NotificationService(db.session).unread_count(user_id)

    # Cache for 10 seconds
    cache_set(cache_key, unread_count, expire=10)

    return jsonify({'unread_count': unread_count, 'cached': False}), 200


@notifications_bp.route('/<int:notification_id>/read', methods=['PUT'])
@require_session()
def mark_as_read(notification_id):
    notification = NotificationService(db.session).mark_read(g.acting.user_id, notification_id)

    return jsonify({
        'message': 'Notification marked as read',
        'notification': notification.to_dict()
    }), 200


@notifications_bp.route('/mark-all-read', methods=['PUT'])
@require_session()
def mark_all_as_read():
    updated = NotificationService(db.session).mark_all_read(g.acting.user_id)
    return jsonify({'message': 'All notifications marked as read', 'updated': updated}), 200
