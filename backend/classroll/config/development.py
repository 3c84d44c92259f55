"""Development configuration."""
import os

from .base import BaseConfig

class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL', 'sqlite:///classroll_dev.db')
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '').lower() == 'true'

    # Redis is optional in dev
    REDIS_URL = os.getenv('REDIS_URL')

    LOG_LEVEL = 'DEBUG'
