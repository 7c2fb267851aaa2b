"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os


def _optional_int(name: str, default):
    """Read an integer env var; empty string or 'none' disables the setting."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    if raw.strip().lower() in ('', 'none'):
        return None
    return int(raw)


class Config:
    """Base configuration class with common settings."""

    # Secret key for signing bearer credentials
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/facility_booking.db'
    DB_BUSY_TIMEOUT = float(os.environ.get('DB_BUSY_TIMEOUT', 10))  # seconds
    DB_MAX_RETRIES = int(os.environ.get('DB_MAX_RETRIES', 3))
    DB_RETRY_DELAY = float(os.environ.get('DB_RETRY_DELAY', 0.2))

    # Forms are submitted as JSON with bearer credentials, not cookies
    WTF_CSRF_ENABLED = False

    # Bearer credentials (seconds)
    AUTH_TOKEN_MAX_AGE = int(os.environ.get('AUTH_TOKEN_MAX_AGE', 8 * 3600))

    # Check-in tokens
    TOKEN_MINT_ATTEMPTS = 5

    # Check-in window relative to the slot, in minutes. None disables the check.
    CHECKIN_EARLY_WINDOW_MINUTES = _optional_int('CHECKIN_EARLY_WINDOW_MINUTES', None)
    CHECKIN_LATE_GRACE_MINUTES = _optional_int('CHECKIN_LATE_GRACE_MINUTES', 0)

    # Seeded staff account
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL') or 'admin@example.org'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'admin123'

    # Timezone
    TIMEZONE = os.environ.get('TIMEZONE') or 'UTC'

    # Application settings
    APP_NAME = 'Facility Booking'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")
        if not os.environ.get('ADMIN_PASSWORD'):
            raise ValueError("ADMIN_PASSWORD environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    DATABASE_PATH = os.environ.get('DATABASE_PATH', ':memory:')
    SECRET_KEY = 'test-secret-key'
    DB_RETRY_DELAY = 0.01
    CHECKIN_EARLY_WINDOW_MINUTES = None
    CHECKIN_LATE_GRACE_MINUTES = 0


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
