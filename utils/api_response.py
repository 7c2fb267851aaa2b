"""
Standardized API response helpers.

Success bodies are the bare payload the web client reads (a resource or
a list of resources). Error bodies carry the text under ``message`` and a
stable ``code``:

    Success:  {"id": 7, "status": "PENDING", ...}  or  [{...}, {...}]
    Error:    {"message": "Slot 3 not found", "code": "NotFound", "resource": "slot"}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(booking_to_wire(booking), status=201)
    return api_error('Slot not found', status=404, code='NotFound')
"""

from flask import jsonify
from typing import Any


def api_success(data: Any = None, status: int = 200) -> tuple:
    """
    Build a success JSON response.

    Args:
        data: Dict or list returned as the response body.
        status: HTTP status code (default 200).

    Returns:
        Tuple of (Response, status_code)
    """
    return jsonify(data if data is not None else {}), status


def api_error(message: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build an error JSON response.

    Args:
        message: Error message shown to the user.
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields (e.g., code, field).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'message': message}

    # Merge extra fields for additional error context
    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status
