from extensions import db
from utils.timeutil import utcnow, isoformat

PENDING = 'pending'
ACCEPTED = 'accepted'
DECLINED = 'declined'
CONNECTION_STATUSES = (PENDING, ACCEPTED, DECLINED)


def pair_key(a, b):
    """Canonical key for an unordered pair of identities."""
    low, high = sorted((str(a), str(b)))
    return f'{low}:{high}'


class Connection(db.Model):
    __tablename__ = 'connections'
    __table_args__ = (
        db.UniqueConstraint('pair_key', name='uq_connection_pair'),
    )

    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    receiver_id = db.Column(db.String(64), db.ForeignKey('profiles.id'), nullable=False, index=True)
    pair_key = db.Column(db.String(140), nullable=False)
    status = db.Column(db.String(20), default=PENDING, nullable=False)  # pending, accepted, declined
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    responded_at = db.Column(db.DateTime)

    requester = db.relationship('Profile', foreign_keys=[requester_id])
    receiver = db.relationship('Profile', foreign_keys=[receiver_id])

    def __init__(self, requester_id, receiver_id, status=PENDING):
        self.requester_id = requester_id
        self.receiver_id = receiver_id
        self.pair_key = pair_key(requester_id, receiver_id)
        self.status = status

    def other_party(self, user_id):
        return self.receiver_id if self.requester_id == user_id else self.requester_id

    def to_dict(self, viewer_id=None):
        data = {
            'id': self.id,
            'requester_id': self.requester_id,
            'receiver_id': self.receiver_id,
            'status': self.status,
            'created_at': isoformat(self.created_at),
            'responded_at': isoformat(self.responded_at)
        }
        if viewer_id:
            other = self.receiver if self.other_party(viewer_id) == self.receiver_id else self.requester
            data['other_user'] = other.to_summary() if other else None
        return data

    def __repr__(self):
        return f'<Connection {self.requester_id}->{self.receiver_id} {self.status}>'
