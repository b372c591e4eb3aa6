"""Testing configuration."""
from datetime import timedelta
from .base import BaseConfig

class TestingConfig(BaseConfig):
    """Testing configuration class."""

    # Basic Flask config
    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'

    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(hours=1)

    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'

    # Evidence uploads (tests point EVIDENCE_UPLOAD_FOLDER at a temporary directory)
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1MB for testing

    # Logging
    LOG_LEVEL = 'WARNING'
