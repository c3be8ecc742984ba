from models.event import Event
from utils.timeutil import utcnow

DEFAULT_EVENT_LIMIT = 6
MAX_EVENT_LIMIT = 50


class EventService:
    """Campus events shown on the dashboard"""

    def __init__(self, session):
        self.session = session

    def upcoming_events(self, limit=DEFAULT_EVENT_LIMIT, now=None):
        """Events that have not started yet, soonest first. Undated events are left out."""
        limit = max(1, min(limit or DEFAULT_EVENT_LIMIT, MAX_EVENT_LIMIT))
        now = now or utcnow()

        return self.session.query(Event).filter(
            Event.event_date.isnot(None),
            Event.event_date >= now
        ).order_by(Event.event_date.asc(), Event.id.asc()).limit(limit).all()
