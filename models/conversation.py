from extensions import db
from models.connection import pair_key
from utils.timeutil import utcnow, isoformat


class Conversation(db.Model):
    __tablename__ = 'conversations'
    __table_args__ = (
        db.UniqueConstraint('pair_key', name='uq_conversation_pair'),
    )

    id = db.Column(db.Integer, primary_key=True)
    participant_1 = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    participant_2 = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    pair_key = db.Column(db.String(140), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    # Bumped on every new message, never moves backwards
    updated_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    messages = db.relationship('Message', backref='conversation', lazy='dynamic', cascade='all, delete-orphan')

    def __init__(self, participant_1, participant_2):
        self.participant_1 = participant_1
        self.participant_2 = participant_2
        self.pair_key = pair_key(participant_1, participant_2)

    def has_participant(self, user_id):
        return user_id in (self.participant_1, self.participant_2)

    def other_participant(self, user_id):
        return self.participant_2 if self.participant_1 == user_id else self.participant_1

    def to_dict(self):
        return {
            'id': self.id,
            'participant_1': self.participant_1,
            'participant_2': self.participant_2,
            'created_at': isoformat(self.created_at),
            'updated_at': isoformat(self.updated_at)
        }

    def __repr__(self):
        return f'<Conversation {self.id}: {self.pair_key}>'


class Message(db.Model):
    __tablename__ = 'messages'
    __table_args__ = (
        db.Index('idx_message_conversation_sent', 'conversation_id', 'sent_at', 'id'),
    )

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(db.Integer, db.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    sender_id = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    sent_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    is_read = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'conversation_id': self.conversation_id,
            'sender_id': self.sender_id,
            'content': self.content,
            'sent_at': isoformat(self.sent_at),
            'is_read': self.is_read
        }

    def to_preview(self):
        return {
            'content': self.content,
            'sent_at': isoformat(self.sent_at),
            'sender_id': self.sender_id
        }

    def __repr__(self):
        return f'<Message {self.id} in {self.conversation_id}>'
