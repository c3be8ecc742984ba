from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from models.connection import pair_key
from models.conversation import Conversation, Message
from models.profile import Profile
from services.connections import ConnectionService
from services.identity import IdentityResolver
from utils.errors import ValidationError, AuthorizationError, NotFoundError
import logging

logger = logging.getLogger(__name__)


class ConversationService:
    """One conversation per unordered pair of identities"""

    def __init__(self, session, connections=None):
        self.session = session
        self.connections = connections or ConnectionService(session)

    def _lookup(self, key):
        return self.session.query(Conversation).filter_by(pair_key=key).first()

    def find_or_create(self, acting, other_id):
        """Return ``(conversation, created)`` for the acting identity and ``other_id``.

        The unique ``pair_key`` column makes this atomic: when a concurrent
        caller inserts the same pair first, our insert fails, we roll back
        and hand back the row that won.
        """
        IdentityResolver.require_profile(acting)
        other_id = str(other_id or '').strip()

        if not other_id:
            raise ValidationError('user_id is required')
        if other_id == acting.user_id:
            raise ValidationError('You cannot start a conversation with yourself')
        if not self.session.get(Profile, other_id):
            raise NotFoundError('User not found')
        if not self.connections.are_connected(acting.user_id, other_id):
            raise AuthorizationError('You can only message your connections')

        key = pair_key(acting.user_id, other_id)
        existing = self._lookup(key)
        if existing:
            return existing, False

        conversation = Conversation(participant_1=acting.user_id, participant_2=other_id)
        self.session.add(conversation)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            existing = self._lookup(key)
            if existing is None:
                raise
            logger.info(f"Conversation for {key} created concurrently, reusing {existing.id}")
            return existing, False

        logger.info(f"Conversation {conversation.id} created for {key}")
        return conversation, True

    def get_conversation(self, acting, conversation_id):
        conversation = self.session.get(Conversation, conversation_id)
        if not conversation:
            raise NotFoundError('Conversation not found')
        if not conversation.has_participant(acting.user_id):
            raise AuthorizationError('You are not a participant in this conversation')
        return conversation

    def last_message(self, conversation_id):
        return self.session.query(Message).filter_by(
            conversation_id=conversation_id
        ).order_by(Message.sent_at.desc(), Message.id.desc()).first()

    def unread_in(self, conversation_id, reader_id):
        return self.session.query(Message).filter(
            Message.conversation_id == conversation_id,
            Message.sender_id != reader_id
        ).filter_by(is_read=False).count()

    def list_conversations(self, acting):
        user_id = acting.user_id
        conversations = self.session.query(Conversation).filter(
            or_(Conversation.participant_1 == user_id, Conversation.participant_2 == user_id)
        ).order_by(Conversation.updated_at.desc(), Conversation.id.desc()).all()

        results = []
        for conversation in conversations:
            other = self.session.get(Profile, conversation.other_participant(user_id))
            last = self.last_message(conversation.id)

            data = conversation.to_dict()
            data['other_user'] = other.to_summary() if other else None
            data['last_message'] = last.to_preview() if last else None
            data['unread_count'] = self.unread_in(conversation.id, user_id)
            results.append(data)

        return results
