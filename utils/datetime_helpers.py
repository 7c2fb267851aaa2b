"""Timezone-aware date/time helpers for the booking service.

Timestamps are stored as naive 'YYYY-MM-DD HH:MM:SS' strings in the
configured timezone so SQLite can compare and group them as text.
"""

from datetime import datetime
from zoneinfo import ZoneInfo

from flask import current_app

DB_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'UTC')
    return ZoneInfo(tz_name)


def get_now() -> datetime:
    """Get current datetime in the configured timezone, without tzinfo."""
    return datetime.now(get_timezone()).replace(tzinfo=None, microsecond=0)


def to_db_timestamp(value: datetime) -> str:
    """Format a datetime for storage."""
    return value.strftime(DB_TIMESTAMP_FORMAT)


def parse_db_timestamp(value: str) -> datetime:
    """Parse a stored timestamp back into a naive datetime."""
    return datetime.strptime(value, DB_TIMESTAMP_FORMAT)
