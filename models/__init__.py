from models.profile import Profile, UserInterest
from models.connection import Connection
from models.conversation import Conversation, Message
from models.notification import Notification
from models.job import JobPost, JobApplication
from models.event import Event

__all__ = ['Profile', 'UserInterest', 'Connection', 'Conversation', 'Message',
           'Notification', 'JobPost', 'JobApplication', 'Event']
