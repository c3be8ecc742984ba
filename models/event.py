from extensions import db
from utils.timeutil import utcnow, isoformat


class Event(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    event_type = db.Column(db.String(50))  # Career Fair, Workshop, Networking, Info Session
    description = db.Column(db.Text)
    location = db.Column(db.String(200))
    event_date = db.Column(db.DateTime, index=True)
    max_attendees = db.Column(db.Integer)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'event_type': self.event_type,
            'description': self.description,
            'location': self.location,
            'event_date': isoformat(self.event_date),
            'max_attendees': self.max_attendees,
            'created_at': isoformat(self.created_at)
        }

    def __repr__(self):
        return f'<Event {self.id}: {self.title}>'
