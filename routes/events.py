from flask import Blueprint, request, jsonify
from extensions import db
from middleware.auth import require_session
from services.events import EventService, DEFAULT_EVENT_LIMIT

events_bp = Blueprint('events', __name__)


@events_bp.route('/', methods=['GET'])
@require_session()
def upcoming_events():
    """Upcoming campus events, soonest first"""
    limit = request.args.get('limit', DEFAULT_EVENT_LIMIT, type=int)
    events = EventService(db.session).upcoming_events(limit=limit)

    return jsonify({'events': [e.to_dict() for e in events], 'total': len(events)}), 200
