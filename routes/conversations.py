from flask import Blueprint, Response, request, jsonify, current_app, g, stream_with_context
from extensions import db
from middleware.auth import require_session
from services.conversations import ConversationService
from services.messages import MessageService
from services.realtime import get_message_feed, format_sse

conversations_bp = Blueprint('conversations', __name__)


def _message_service():
    return MessageService(
        db.session,
        feed=get_message_feed(),
        max_length=current_app.config.get('MESSAGE_MAX_LENGTH', 5000)
    )


@conversations_bp.route('/', methods=['POST'])
@require_session()
def start_conversation():
    """Open the conversation with a connection, creating it on first use"""
    data = request.get_json(silent=True) or {}
    conversation, created = ConversationService(db.session).find_or_create(g.acting, data.get('user_id'))

    return jsonify({
        'conversation': conversation.to_dict(),
        'created': created
    }), 201 if created else 200


@conversations_bp.route('/', methods=['GET'])
@require_session()
def list_conversations():
    conversations = ConversationService(db.session).list_conversations(g.acting)
    return jsonify({'conversations': conversations, 'total': len(conversations)}), 200


@conversations_bp.route('/unread-count', methods=['GET'])
@require_session()
def unread_count():
    return jsonify({'unread_count': _message_service().unread_count(g.acting)}), 200


@conversations_bp.route('/<int:conversation_id>/messages', methods=['GET'])
@require_session()
def list_messages(conversation_id):
    after_id = request.args.get('after_id', type=int)
    messages = _message_service().list_messages(g.acting, conversation_id, after_id=after_id)

    return jsonify({'messages': [m.to_dict() for m in messages]}), 200


@conversations_bp.route('/<int:conversation_id>/messages', methods=['POST'])
@require_session()
def send_message(conversation_id):
    data = request.get_json(silent=True) or {}
    message = _message_service().send_message(g.acting, conversation_id, data.get('content'))

    return jsonify({'message': message.to_dict()}), 201


@conversations_bp.route('/<int:conversation_id>/read', methods=['PUT'])
@require_session()
def mark_read(conversation_id):
    updated = _message_service().mark_read(g.acting, conversation_id)
    return jsonify({'marked_read': updated}), 200


@conversations_bp.route('/<int:conversation_id>/stream', methods=['GET'])
@require_session()
def stream_messages(conversation_id):
    """Server-Sent Events: ledger backlog after Last-Event-ID, then live messages"""
    service = _message_service()
    service.conversations.get_conversation(g.acting, conversation_id)

    last_event_id = request.headers.get('Last-Event-ID') or request.args.get('after_id')
    after_id = int(last_event_id) if last_event_id and str(last_event_id).isdigit() else None

    feed = get_message_feed()
    pubsub = feed.subscribe(conversation_id)
    try:
        backlog = [m.to_dict() for m in service.list_messages(g.acting, conversation_id, after_id=after_id)]
    except Exception:
        pubsub.close()
        raise

    def generate():
        for payload in feed.stream(conversation_id, backlog=backlog, pubsub=pubsub):
            yield format_sse(payload)

    return Response(
        stream_with_context(generate()),
        mimetype='text/event-stream',
        headers={'Cache-Control': 'no-cache', 'X-Accel-Buffering': 'no'}
    )
