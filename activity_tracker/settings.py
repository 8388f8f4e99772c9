"""Configuration classes, selected by name in the application factory."""
import os
from dotenv import load_dotenv

load_dotenv()


def _default_backend():
    # Fall back to the in-memory demo store when no database is configured
    if os.environ.get('STORAGE_BACKEND'):
        return os.environ['STORAGE_BACKEND']
    return 'sql' if os.environ.get('DATABASE_URL') else 'memory'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev_key_please_change')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///activity_tracker.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STORAGE_BACKEND = _default_backend()
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', 'true').lower() == 'true'

    # Bearer tokens
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', 'your-secret-key')
    JWT_EXPIRES_SECONDS = int(os.environ.get('JWT_EXPIRES_SECONDS', 7 * 24 * 3600))
    API_KEY = os.environ.get('API_KEY')  # optional X-API-Key check

    # Uploads
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join('uploads', 'activities'))
    MAX_UPLOAD_FILES = 5
    MAX_FILE_SIZE = 10 * 1024 * 1024
    MAX_CONTENT_LENGTH = MAX_UPLOAD_FILES * MAX_FILE_SIZE + 1024 * 1024

    STUDENT_ID_PREFIX = os.environ.get('STUDENT_ID_PREFIX', 'CS')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    BABEL_DEFAULT_LOCALE = 'en'
    SUPPORTED_LOCALES = ['en', 'es']


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    SEED_DEMO_DATA = False


class DemoConfig(Config):
    STORAGE_BACKEND = 'memory'
    SEED_DEMO_DATA = True


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    STORAGE_BACKEND = 'sql'
    SEED_DEMO_DATA = False
    JWT_SECRET_KEY = 'test-jwt-secret-key-for-testing'
    API_KEY = None
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'demo': DemoConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}
