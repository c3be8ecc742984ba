"""
Test the message ledger
"""
import pytest
from datetime import datetime, timedelta
from models.conversation import Conversation, Message
from services import messages as messages_module
from services.conversations import ConversationService
from services.messages import MessageService
from utils.errors import ValidationError, AuthorizationError, NotFoundError


class RecordingFeed:
    def __init__(self):
        self.published = []

    def publish(self, message):
        self.published.append(message.id)
        return True


@pytest.fixture
def conversation(make_profile, connect, session, acting_for):
    make_profile('u1', 'Ada')
    make_profile('u2', 'Grace')
    make_profile('u3', 'Linus')
    connect('u1', 'u2')
    conversation, _ = ConversationService(session).find_or_create(acting_for('u1'), 'u2')
    return conversation


@pytest.fixture
def feed():
    return RecordingFeed()


@pytest.fixture
def service(session, feed):
    return MessageService(session, feed=feed, max_length=200)


class TestSendMessage:

    def test_send_inserts_and_bumps_conversation(self, conversation, service, feed, session, acting_for):
        before = conversation.updated_at

        message = service.send_message(acting_for('u1'), conversation.id, '  Hello Grace  ')

        assert message.content == 'Hello Grace'
        assert message.is_read is False
        assert message.sender_id == 'u1'
        assert conversation.updated_at == message.sent_at
        assert conversation.updated_at >= before
        assert feed.published == [message.id]

    @pytest.mark.parametrize('content', ['', '   ', '\n\t', None])
    def test_empty_content_is_rejected_without_writes(self, conversation, service, feed, session,
                                                     acting_for, content):
        before = conversation.updated_at

        with pytest.raises(ValidationError):
            service.send_message(acting_for('u1'), conversation.id, content)

        assert session.query(Message).count() == 0
        session.expire_all()
        assert session.get(Conversation, conversation.id).updated_at == before
        assert feed.published == []

    def test_too_long_content_is_rejected(self, conversation, service, acting_for):
        with pytest.raises(ValidationError):
            service.send_message(acting_for('u1'), conversation.id, 'x' * 201)

    def test_sender_must_be_participant(self, conversation, service, session, acting_for):
        with pytest.raises(AuthorizationError):
            service.send_message(acting_for('u3'), conversation.id, 'let me in')
        assert session.query(Message).count() == 0

    def test_unknown_conversation(self, conversation, service, acting_for):
        with pytest.raises(NotFoundError):
            service.send_message(acting_for('u1'), 9999, 'hello?')

    def test_publish_failure_keeps_the_message(self, conversation, session, acting_for):
        class BrokenFeed:
            def publish(self, message):
                return False

        message = MessageService(session, feed=BrokenFeed()).send_message(acting_for('u1'), conversation.id, 'hi')
        assert session.get(Message, message.id) is not None

    def test_sent_at_never_goes_backwards(self, conversation, service, acting_for, monkeypatch):
        first = service.send_message(acting_for('u1'), conversation.id, 'first')

        # Clock skew: the next timestamp would land before the first message
        skewed = first.sent_at - timedelta(minutes=5)
        monkeypatch.setattr(messages_module, 'utcnow', lambda: skewed)
        second = service.send_message(acting_for('u2'), conversation.id, 'second')

        assert second.sent_at >= first.sent_at
        assert conversation.updated_at >= first.sent_at


class TestListMessages:

    def test_ordered_by_sent_at_then_id(self, conversation, service, acting_for, monkeypatch):
        fixed = datetime(2026, 3, 1, 12, 0, 0)
        monkeypatch.setattr(messages_module, 'utcnow', lambda: fixed)

        sent = [service.send_message(acting_for('u1' if i % 2 else 'u2'), conversation.id, f'm{i}')
                for i in range(5)]

        listed = service.list_messages(acting_for('u1'), conversation.id)
        assert [m.id for m in listed] == [m.id for m in sent]
        assert all(a.sent_at <= b.sent_at for a, b in zip(listed, listed[1:]))

    def test_after_id_replays_only_newer(self, conversation, service, acting_for):
        sent = [service.send_message(acting_for('u1'), conversation.id, f'm{i}') for i in range(4)]

        replay = service.list_messages(acting_for('u2'), conversation.id, after_id=sent[1].id)
        assert [m.content for m in replay] == ['m2', 'm3']

    def test_non_participant_cannot_read(self, conversation, service, acting_for):
        with pytest.raises(AuthorizationError):
            service.list_messages(acting_for('u3'), conversation.id)


class TestMarkRead:

    def test_marks_only_other_participants_messages(self, conversation, service, session, acting_for):
        mine = service.send_message(acting_for('u1'), conversation.id, 'from ada')
        theirs = [service.send_message(acting_for('u2'), conversation.id, f'from grace {i}') for i in range(2)]

        assert service.mark_read(acting_for('u1'), conversation.id) == 2

        session.expire_all()
        assert session.get(Message, mine.id).is_read is False
        assert all(session.get(Message, m.id).is_read for m in theirs)

    def test_idempotent(self, conversation, service, session, acting_for):
        service.send_message(acting_for('u2'), conversation.id, 'ping')
        service.send_message(acting_for('u1'), conversation.id, 'pong')

        service.mark_read(acting_for('u1'), conversation.id)
        session.expire_all()
        state_once = [(m.id, m.is_read) for m in session.query(Message).order_by(Message.id).all()]

        assert service.mark_read(acting_for('u1'), conversation.id) == 0
        session.expire_all()
        state_twice = [(m.id, m.is_read) for m in session.query(Message).order_by(Message.id).all()]

        assert state_once == state_twice

    def test_unread_count_across_conversations(self, conversation, service, make_profile, connect,
                                               session, acting_for):
        make_profile('u4', 'Barbara')
        connect('u4', 'u1')
        other, _ = ConversationService(session).find_or_create(acting_for('u4'), 'u1')

        service.send_message(acting_for('u2'), conversation.id, 'one')
        service.send_message(acting_for('u4'), other.id, 'two')
        service.send_message(acting_for('u1'), other.id, 'mine')

        assert service.unread_count(acting_for('u1')) == 2
        service.mark_read(acting_for('u1'), conversation.id)
        assert service.unread_count(acting_for('u1')) == 1
