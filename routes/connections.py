from flask import Blueprint, request, jsonify, g
from extensions import db
from middleware.auth import require_session
from services.connections import ConnectionService
from services.notifications import get_notifier

connections_bp = Blueprint('connections', __name__)


def _service():
    return ConnectionService(db.session, get_notifier())


@connections_bp.route('/', methods=['POST'])
@require_session()
def request_connection():
    data = request.get_json(silent=True) or {}
    connection = _service().request_connection(g.acting, data.get('receiver_id'))

    return jsonify({
        'message': 'Connection request sent',
        'connection': connection.to_dict()
    }), 201


@connections_bp.route('/', methods=['GET'])
@require_session()
def list_connections():
    status = request.args.get('status')
    connections = _service().list_connections(g.acting, status=status)

    return jsonify({
        'connections': [c.to_dict(viewer_id=g.acting.user_id) for c in connections],
        'total': len(connections)
    }), 200


@connections_bp.route('/pending', methods=['GET'])
@require_session()
def pending_requests():
    connections = _service().pending_requests(g.acting)

    return jsonify({
        'requests': [c.to_dict(viewer_id=g.acting.user_id) for c in connections],
        'total': len(connections)
    }), 200


@connections_bp.route('/<int:connection_id>', methods=['PUT'])
@require_session()
def respond_to_connection(connection_id):
    data = request.get_json(silent=True) or {}
    connection = _service().respond_to_connection(g.acting, connection_id, data.get('response'))

    return jsonify({
        'message': f'Connection {connection.status}',
        'connection': connection.to_dict(viewer_id=g.acting.user_id)
    }), 200
