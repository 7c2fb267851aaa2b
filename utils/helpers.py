"""
Miscellaneous utility helper functions.
Provides request parsing shared by the API blueprints.
"""

from flask import request

from utils.errors import ValidationError


def get_json_body() -> dict:
    """
    Get the request JSON object.

    Returns:
        Parsed body, or an empty dict when the request has no body

    Raises:
        ValidationError: If the body is present but not a JSON object
    """
    data = request.get_json(silent=True)
    if data is None:
        if request.get_data(cache=True):
            raise ValidationError('Request body must be valid JSON')
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def get_field(data: dict, *names, default=None):
    """
    Read the first present key among aliases.

    The web client sends camelCase keys (facilityId); scripts tend to
    send snake_case (facility_id). Both are accepted.
    """
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default
