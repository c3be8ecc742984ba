"""
Realtime message delivery over Redis pub/sub

Publishing is best-effort and happens after the ledger commit. Subscribers
receive at-least-once, possibly out of order; the ledger's (sent_at, id)
order stays authoritative. ``stream`` replays the ledger backlog before
live events and drops anything it has already yielded, so a client that
resubscribes with its last seen id never gets a message twice.
"""
from collections import OrderedDict
from flask import current_app
from extensions import get_redis
from utils.errors import DependencyError
import json
import logging

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = 'messages:conversation:'
DEDUP_HEADROOM = 1000


def channel_for(conversation_id):
    return f'{CHANNEL_PREFIX}{conversation_id}'


def format_sse(payload):
    """Render one message as a Server-Sent Events frame"""
    if payload is None:
        return ': keepalive\n\n'
    return f"id: {payload['id']}\nevent: message\ndata: {json.dumps(payload)}\n\n"


class MessageDeduplicator:
    """Remembers the most recent message ids seen by one consumer"""

    def __init__(self, max_size=1000):
        self.max_size = max_size
        self._seen = OrderedDict()

    def first_time(self, message_id):
        if message_id in self._seen:
            return False
        self._seen[message_id] = True
        if len(self._seen) > self.max_size:
            self._seen.popitem(last=False)
        return True


class MessageFeed:

    def __init__(self, client_getter=get_redis, enabled=True):
        self._client_getter = client_getter
        self.enabled = enabled

    def init_app(self, app):
        self.enabled = app.config.get('REALTIME_ENABLED', True)
        app.extensions['message_feed'] = self

    def _client(self):
        if not self.enabled:
            return None
        return self._client_getter()

    def publish(self, message):
        client = self._client()
        if client is None:
            return False
        try:
            client.publish(channel_for(message.conversation_id), json.dumps(message.to_dict()))
            return True
        except Exception as e:
            logger.error(f"Realtime publish failed for message {message.id}: {e}")
            return False

    def subscribe(self, conversation_id):
        client = self._client()
        if client is None:
            raise DependencyError('Realtime channel unavailable')
        pubsub = client.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe(channel_for(conversation_id))
        return pubsub

    def stream(self, conversation_id, backlog=(), pubsub=None, poll_timeout=15.0, max_idle_polls=None):
        """Yield message payloads (dicts), or None as a keepalive tick.

        Subscribe before reading the backlog so nothing falls into the gap;
        the deduplicator absorbs the overlap.
        """
        backlog = list(backlog)
        # Remember every replayed id so a live redelivery of an old message is dropped
        seen = MessageDeduplicator(max_size=len(backlog) + DEDUP_HEADROOM)
        pubsub = pubsub or self.subscribe(conversation_id)
        idle_polls = 0
        try:
            for payload in backlog:
                if seen.first_time(payload['id']):
                    yield payload

            while max_idle_polls is None or idle_polls < max_idle_polls:
                event = pubsub.get_message(timeout=poll_timeout)
                if not event or event.get('type') != 'message':
                    idle_polls += 1
                    yield None
                    continue

                try:
                    payload = json.loads(event['data'])
                except (TypeError, ValueError):
                    logger.warning(f"Dropping malformed realtime payload on {channel_for(conversation_id)}")
                    continue

                if payload.get('conversation_id') != conversation_id:
                    continue
                if seen.first_time(payload['id']):
                    yield payload
        finally:
            pubsub.close()


message_feed = MessageFeed()


def get_message_feed():
    return current_app.extensions['message_feed']
