from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from models.connection import Connection, pair_key, PENDING, ACCEPTED, DECLINED, CONNECTION_STATUSES
from models.profile import Profile
from services.identity import IdentityResolver
from services.notifications import ConnectionRequested, ConnectionAccepted
from utils.errors import ValidationError, AuthorizationError, NotFoundError, ConflictError
from utils.timeutil import utcnow
import logging

logger = logging.getLogger(__name__)

# Row status -> status shown to either party
STATUS_VIEW = {
    ACCEPTED: 'connected',
    PENDING: 'pending',
    DECLINED: 'declined',
}


def compute_status(current_id, other_id, connections):
    """Connection status between two identities, seen from either side.

    Scans rows touching ``current_id`` for the one that also touches
    ``other_id``. Returns 'none' when no such row exists.
    """
    wanted = {current_id, other_id}
    for connection in connections:
        if {connection.requester_id, connection.receiver_id} == wanted:
            return STATUS_VIEW.get(connection.status, 'none')
    return 'none'


class ConnectionService:

    def __init__(self, session, notifier=None):
        self.session = session
        self.notifier = notifier

    def connections_for(self, user_id, status=None):
        query = self.session.query(Connection).filter(
            or_(Connection.requester_id == user_id, Connection.receiver_id == user_id)
        )
        if status:
            query = query.filter_by(status=status)
        return query.order_by(Connection.created_at.desc(), Connection.id.desc()).all()

    def find_between(self, a, b):
        return self.session.query(Connection).filter_by(pair_key=pair_key(a, b)).first()

    def are_connected(self, a, b):
        connection = self.find_between(a, b)
        return connection is not None and connection.status == ACCEPTED

    def request_connection(self, acting, receiver_id):
        IdentityResolver.require_profile(acting)
        receiver_id = str(receiver_id or '').strip()

        if not receiver_id:
            raise ValidationError('receiver_id is required')
        if receiver_id == acting.user_id:
            raise ValidationError('You cannot connect with yourself')
        if not self.session.get(Profile, receiver_id):
            raise NotFoundError('User not found')
        if self.find_between(acting.user_id, receiver_id):
            raise ConflictError('A connection already exists between these users')

        connection = Connection(requester_id=acting.user_id, receiver_id=receiver_id)
        self.session.add(connection)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise ConflictError('A connection already exists between these users')

        logger.info(f"Connection {connection.id} requested: {acting.user_id} -> {receiver_id}")

        if self.notifier:
            self.notifier.dispatch(ConnectionRequested(
                recipient_id=receiver_id,
                connection_id=connection.id,
                requester_id=acting.user_id,
                requester_name=acting.display_name
            ))

        return connection

    def respond_to_connection(self, acting, connection_id, response):
        if response not in (ACCEPTED, DECLINED):
            raise ValidationError("response must be 'accepted' or 'declined'")

        connection = self.session.get(Connection, connection_id)
        if not connection:
            raise NotFoundError('Connection not found')
        if connection.receiver_id != acting.user_id:
            raise AuthorizationError('Only the receiver can respond to a connection request')
        if connection.status != PENDING:
            raise ConflictError(f'Connection already {connection.status}')

        # Only a row that is still pending is written
        updated = self.session.query(Connection).filter_by(
            id=connection.id, status=PENDING
        ).update({'status': response, 'responded_at': utcnow()}, synchronize_session=False)
        if not updated:
            self.session.rollback()
            raise ConflictError(f'Connection already {connection.status}')
        self.session.commit()

        logger.info(f"Connection {connection.id} {response} by {acting.user_id}")

        if response == ACCEPTED and self.notifier:
            self.notifier.dispatch(ConnectionAccepted(
                recipient_id=connection.requester_id,
                connection_id=connection.id,
                receiver_id=acting.user_id,
                receiver_name=acting.display_name
            ))

        return connection

    def list_connections(self, acting, status=None):
        if status and status not in CONNECTION_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(CONNECTION_STATUSES)}")
        return self.connections_for(acting.user_id, status=status)

    def pending_requests(self, acting):
        """Requests waiting on the acting identity's response"""
        return self.session.query(Connection).filter_by(
            receiver_id=acting.user_id, status=PENDING
        ).order_by(Connection.created_at.desc(), Connection.id.desc()).all()
