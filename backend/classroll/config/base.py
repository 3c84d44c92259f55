"""Settings shared by every environment."""
import os
from datetime import timedelta

class BaseConfig:
    """Base configuration."""

    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL', 'memory://')
    RATELIMIT_ENABLED = True

    # Attendance sessions
    SESSION_TOKEN_TTL_MINUTES = int(os.getenv('SESSION_TOKEN_TTL_MINUTES', 30))
    SESSION_TOKEN_MAX_TTL_MINUTES = int(os.getenv('SESSION_TOKEN_MAX_TTL_MINUTES', 240))
    QR_BOX_SIZE = 10
    QR_BORDER = 4

    # Activity suggestions
    SUGGESTIONS_PER_DAY = int(os.getenv('SUGGESTIONS_PER_DAY', 3))
    SCHOOL_DAY_START = '08:00'
    SCHOOL_DAY_END = '17:00'

    # Pagination
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
