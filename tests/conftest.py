"""
Pytest configuration and fixtures
"""
import pytest
from flask_jwt_extended import create_access_token
from app import create_app
from config import Config
from extensions import db
from models.connection import Connection, ACCEPTED
from models.profile import Profile
from services.identity import IdentityResolver


class TestConfig(Config):
    """Test configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}  # Override pool settings for SQLite
    JWT_SECRET_KEY = 'test-secret-key-for-testing-only-0123456789'
    JWT_DECODE_AUDIENCE = None
    REDIS_ENABLED = False
    REALTIME_ENABLED = False
    NOTIFICATIONS_ASYNC = False
    LOG_FILE = ''
    DEBUG = False


@pytest.fixture
def app():
    """Create application for testing, one fresh in-memory database per test"""
    app = create_app(TestConfig)

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def notifier(app):
    return app.extensions['notifier']


@pytest.fixture
def make_profile(session):
    """Factory for complete student profiles"""
    def _make(user_id, full_name=None, **overrides):
        profile = Profile(
            id=user_id,
            email=overrides.pop('email', f'{user_id}@university.edu'),
            full_name=full_name or f'Student {user_id}',
            major=overrides.pop('major', 'Computer Science'),
            graduation_year=overrides.pop('graduation_year', 2026),
            is_profile_complete=True,
            **overrides
        )
        session.add(profile)
        session.commit()
        return profile
    return _make


@pytest.fixture
def acting_for(session):
    def _acting(user_id, email=None):
        return IdentityResolver(session).resolve(user_id, email=email)
    return _acting


@pytest.fixture
def connect(session):
    """Create an accepted connection between two existing profiles"""
    def _connect(a, b):
        connection = Connection(requester_id=a, receiver_id=b, status=ACCEPTED)
        session.add(connection)
        session.commit()
        return connection
    return _connect


@pytest.fixture
def auth_headers_for(app):
    """Bearer headers shaped like a Supabase access token for ``user_id``"""
    def _headers(user_id, email=None):
        token = create_access_token(
            identity=user_id,
            additional_claims={'email': email or f'{user_id}@university.edu'}
        )
        return {
            'Authorization': f'Bearer {token}',
            'Content-Type': 'application/json'
        }
    return _headers
