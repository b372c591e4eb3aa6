"""Development configuration."""
import os
from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or 'sqlite:///checkin_dev.db'
    SQLALCHEMY_ECHO = True

    # Rate limiting stays in memory unless Redis is configured
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'

    LOG_LEVEL = 'DEBUG'
