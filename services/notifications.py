"""
Notification fan-out

Notifications are derived, best-effort side effects of a primary write.
Each kind is a frozen dataclass carrying its own payload; the dispatcher
turns an event into a ``Notification`` row off the request path and logs
(never raises) delivery failures.
"""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import ClassVar, Union
from flask import current_app
from extensions import db, cache_delete, cache_delete_pattern
from models.notification import Notification
from utils.errors import NotFoundError
from utils.timeutil import utcnow
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionRequested:
    type: ClassVar[str] = 'connection_request'
    related_type: ClassVar[str] = 'connection'

    recipient_id: str
    connection_id: int
    requester_id: str
    requester_name: str

    @property
    def related_id(self):
        return str(self.connection_id)

    def title(self):
        return 'New Connection Request'

    def message(self):
        return f'{self.requester_name} wants to connect with you'


@dataclass(frozen=True)
class ConnectionAccepted:
    type: ClassVar[str] = 'connection_accepted'
    related_type: ClassVar[str] = 'connection'

    recipient_id: str
    connection_id: int
    receiver_id: str
    receiver_name: str

    @property
    def related_id(self):
        return str(self.connection_id)

    def title(self):
        return 'Connection Accepted'

    def message(self):
        return f'{self.receiver_name} accepted your connection request'


@dataclass(frozen=True)
class JobApplicationReceived:
    type: ClassVar[str] = 'job_application'
    related_type: ClassVar[str] = 'job'

    recipient_id: str
    job_id: int
    job_title: str
    application_id: int
    applicant_id: str
    applicant_name: str

    @property
    def related_id(self):
        return str(self.job_id)

    def title(self):
        return 'New Job Application'

    def message(self):
        return f'{self.applicant_name} applied for {self.job_title}'


NotificationEvent = Union[ConnectionRequested, ConnectionAccepted, JobApplicationReceived]

NOTIFICATION_KINDS = {
    kind.type: kind for kind in (ConnectionRequested, ConnectionAccepted, JobApplicationReceived)
}


def invalidate_notification_cache(user_id):
    cache_delete_pattern(f"notifications:{user_id}:*")
    cache_delete(f"notifications:unread_count:{user_id}")


class NotificationDispatcher:
    """Fire-and-forget delivery of notification events."""

    def __init__(self):
        self.app = None
        self._executor = None

    def init_app(self, app):
        self.app = app
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
        if app.config.get('NOTIFICATIONS_ASYNC', True):
            self._executor = ThreadPoolExecutor(
                max_workers=app.config.get('NOTIFICATION_WORKERS', 4),
                thread_name_prefix='notifications'
            )
        app.extensions['notifier'] = self

    @property
    def is_async(self):
        return self._executor is not None

    def dispatch(self, event: NotificationEvent):
        """Schedule delivery; returns a Future in async mode, else the row (or None)."""
        if self._executor is not None:
            return self._executor.submit(self._deliver_in_context, event)
        return self.deliver(event)

    def _deliver_in_context(self, event):
        with self.app.app_context():
            return self.deliver(event)

    def _build(self, event):
        return Notification(
            user_id=event.recipient_id,
            type=event.type,
            title=event.title(),
            message=event.message(),
            related_type=event.related_type,
            related_id=event.related_id
        )

    def deliver(self, event, session=None):
        session = session or db.session
        try:
            notification = self._build(event)
            session.add(notification)
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Failed to deliver {event.type} notification to {event.recipient_id}: {e}")
            return None

        invalidate_notification_cache(event.recipient_id)
        logger.info(f"Notification {event.type} created for user {event.recipient_id}")
        return notification

    def shutdown(self, wait=True):
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None


notifier = NotificationDispatcher()


def get_notifier():
    return current_app.extensions['notifier']


class NotificationService:
    """Read side of the notification panel"""

    def __init__(self, session):
        self.session = session

    def query_for(self, user_id, unread_only=False):
        query = self.session.query(Notification).filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc())

    def unread_count(self, user_id):
        return self.session.query(Notification).filter_by(user_id=user_id, is_read=False).count()

    def mark_read(self, user_id, notification_id):
        notification = self.session.query(Notification).filter_by(id=notification_id, user_id=user_id).first()
        if not notification:
            raise NotFoundError('Notification not found')

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            self.session.commit()
            invalidate_notification_cache(user_id)

        return notification

    def mark_all_read(self, user_id):
        updated = self.session.query(Notification).filter_by(user_id=user_id, is_read=False).update({
            'is_read': True,
            'read_at': utcnow()
        }, synchronize_session='fetch')
        self.session.commit()
        invalidate_notification_cache(user_id)
        return updated
