"""
Input validation helper functions.
Provides validation for common input types.
"""

import re
from datetime import date, datetime

from utils.errors import ValidationError


def validate_email(email: str) -> bool:
    """
    Validate email format.

    Args:
        email: Email address to validate

    Returns:
        True if valid email format
    """
    if not email:
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


def validate_date_format(date_str: str) -> bool:
    """
    Validate date is in YYYY-MM-DD format.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid format
    """
    try:
        datetime.strptime(date_str, '%Y-%m-%d')
        return True
    except (ValueError, TypeError):
        return False


def parse_date_filter(value) -> date:
    """
    Parse an optional YYYY-MM-DD filter.

    Args:
        value: None, empty string, date, or YYYY-MM-DD string

    Returns:
        date or None when no filter was given

    Raises:
        ValidationError: If the string is not a valid date
    """
    if value is None or value == '':
        return None
    if isinstance(value, date):
        return value
    if not validate_date_format(value):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", field='date')
    return datetime.strptime(value, '%Y-%m-%d').date()


def require_id(value, field: str) -> int:
    """
    Coerce a resource identifier to a positive int.

    Args:
        value: Raw identifier (int or numeric string)
        field: Field name for the error message

    Returns:
        int identifier

    Raises:
        ValidationError: If the value is empty or not a positive integer
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f'{field} is required', field=field)
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f'{field} must be an integer', field=field)
    try:
        identifier = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer', field=field)
    if identifier <= 0:
        raise ValidationError(f'{field} must be positive', field=field)
    return identifier


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = text.strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
