"""Settings shared by every environment."""
import os
from datetime import timedelta

class BaseConfig:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL') or 'memory://'
    # Wrong entry codes per client address and session; valid check-ins are not counted
    CHECKIN_RATE_LIMIT = "20 per minute"
    CHECKIN_READ_RATE_LIMIT = "120 per minute"

    # Check-in protocol
    CHECKIN_DEFAULT_GEOFENCE_RADIUS_M = 100
    GEOLOCATION_TIMEOUT_SECONDS = 10
    ENTRY_CODE_LENGTH = 6
    PROTOCOL_PREFIX = 'FREQ'
    PUBLIC_CHECKIN_URL = os.environ.get('PUBLIC_CHECKIN_URL') or 'http://localhost:5173/presenca'

    # Evidence uploads (photos and signatures)
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB
    EVIDENCE_UPLOAD_FOLDER = os.environ.get('EVIDENCE_UPLOAD_FOLDER') or 'uploads/evidence'

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
