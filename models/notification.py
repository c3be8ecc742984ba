from extensions import db
from utils.timeutil import utcnow, isoformat


class Notification(db.Model):
    __tablename__ = 'notifications'
    __table_args__ = (
        db.Index('idx_notification_user_created', 'user_id', 'created_at'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)

    # Notification details
    type = db.Column(db.String(50), nullable=False)  # 'connection_request', 'connection_accepted', 'job_application'
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)

    # Related entities
    related_type = db.Column(db.String(50))  # 'connection', 'job'
    related_id = db.Column(db.String(64))

    # Metadata
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    read_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'type': self.type,
            'title': self.title,
            'message': self.message,
            'related_type': self.related_type,
            'related_id': self.related_id,
            'is_read': self.is_read,
            'created_at': isoformat(self.created_at),
            'read_at': isoformat(self.read_at)
        }

    def __repr__(self):
        return f'<Notification {self.id}: {self.title}>'
