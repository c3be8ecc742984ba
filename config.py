import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///pickaside.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Connection pool settings (ignored by SQLite)
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,  # Recycle connections after 1 hour
        'pool_pre_ping': True,  # Verify connections before using
    }

    # Redis Configuration (cache + realtime channel)
    REDIS_ENABLED = os.getenv('REDIS_ENABLED', 'True').lower() == 'true'
    REDIS_HOST = os.getenv('REDIS_HOST', 'redis')
    REDIS_PORT = int(os.getenv('REDIS_PORT', 6379))
    REDIS_DB = int(os.getenv('REDIS_DB', 0))
    CACHE_TTL = 300  # 5 minutes default cache
    REALTIME_ENABLED = os.getenv('REALTIME_ENABLED', 'True').lower() == 'true'

    # JWT - access tokens are issued by Supabase Auth, so the secret is the
    # project's JWT secret and the identity claim is the auth user id
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'your-secret-key-change-in-production')
    JWT_TOKEN_LOCATION = ['headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'
    JWT_IDENTITY_CLAIM = 'sub'
    JWT_DECODE_AUDIENCE = os.getenv('JWT_DECODE_AUDIENCE') or None

    # Supabase
    SUPABASE_URL = os.getenv('SUPABASE_URL', '')
    SUPABASE_ANON_KEY = os.getenv('SUPABASE_ANON_KEY', '')

    # Notifications are delivered off the request path
    NOTIFICATIONS_ASYNC = os.getenv('NOTIFICATIONS_ASYNC', 'True').lower() == 'true'
    NOTIFICATION_WORKERS = int(os.getenv('NOTIFICATION_WORKERS', 4))

    # Messaging / directory limits
    MESSAGE_MAX_LENGTH = int(os.getenv('MESSAGE_MAX_LENGTH', 5000))
    PEOPLE_PAGE_LIMIT = int(os.getenv('PEOPLE_PAGE_LIMIT', 20))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '')


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': 10,
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'max_overflow': 20,
        'pool_timeout': 30,
    }


config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
}


def get_config(name=None):
    return config_by_name.get(name or os.getenv('APP_ENV', 'development'), DevelopmentConfig)
