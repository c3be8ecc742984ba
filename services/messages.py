from sqlalchemy import func, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from models.conversation import Conversation, Message
from services.conversations import ConversationService
from utils.errors import ValidationError
from utils.timeutil import utcnow
import logging

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 5000


class MessageService:
    """Append-only message ledger, one ordered sequence per conversation"""

    def __init__(self, session, feed=None, max_length=DEFAULT_MAX_LENGTH, conversations=None):
        self.session = session
        self.feed = feed
        self.max_length = max_length
        self.conversations = conversations or ConversationService(session)

    def _next_sent_at(self, conversation_id):
        # Clamp to the latest timestamp so sent_at never goes backwards within a conversation
        sent_at = utcnow()
        latest = self.session.query(func.max(Message.sent_at)).filter(
            Message.conversation_id == conversation_id
        ).scalar()
        if latest is not None and sent_at < latest:
            sent_at = latest
        return sent_at

    def send_message(self, acting, conversation_id, content):
        text = (content or '').strip() if isinstance(content, str) else ''
        if not text:
            raise ValidationError('Message content is required')
        if len(text) > self.max_length:
            raise ValidationError(f'Message must be at most {self.max_length} characters')

        conversation = self.conversations.get_conversation(acting, conversation_id)

        sent_at = self._next_sent_at(conversation.id)
        message = Message(
            conversation_id=conversation.id,
            sender_id=acting.user_id,
            content=text,
            sent_at=sent_at,
            is_read=False
        )
        self.session.add(message)
        if conversation.updated_at is None or conversation.updated_at < sent_at:
            conversation.updated_at = sent_at

        # Message insert and updated_at bump commit together
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

        logger.info(f"Message {message.id} sent in conversation {conversation.id} by {acting.user_id}")

        if self.feed is not None:
            self.feed.publish(message)

        return message

    def list_messages(self, acting, conversation_id, after_id=None):
        conversation = self.conversations.get_conversation(acting, conversation_id)
        query = self.session.query(Message).filter_by(conversation_id=conversation.id)

        if after_id is not None:
            anchor = self.session.query(Message).filter_by(id=after_id, conversation_id=conversation.id).first()
            if anchor is not None:
                query = query.filter(or_(
                    Message.sent_at > anchor.sent_at,
                    and_(Message.sent_at == anchor.sent_at, Message.id > anchor.id)
                ))

        return query.order_by(Message.sent_at.asc(), Message.id.asc()).all()

    def mark_read(self, acting, conversation_id):
        """Mark the other participant's messages as read; returns how many flipped"""
        conversation = self.conversations.get_conversation(acting, conversation_id)
        updated = self.session.query(Message).filter(
            Message.conversation_id == conversation.id,
            Message.sender_id != acting.user_id
        ).filter_by(is_read=False).update({'is_read': True}, synchronize_session='fetch')
        self.session.commit()

        if updated:
            logger.info(f"{updated} messages marked read in conversation {conversation.id} by {acting.user_id}")
        return updated

    def unread_count(self, acting):
        user_id = acting.user_id
        return self.session.query(Message).join(
            Conversation, Message.conversation_id == Conversation.id
        ).filter(
            or_(Conversation.participant_1 == user_id, Conversation.participant_2 == user_id),
            Message.sender_id != user_id,
            Message.is_read.is_(False)
        ).count()
