"""
Route decorators for authentication and authorization.
Provides role-based access control for routes.
"""

from functools import wraps
from flask_login import login_required, current_user

from utils.errors import ForbiddenError
from utils.messages import MESSAGES


def role_required(role: str):
    """
    Decorator to require a role for a route.

    Usage:
        @bp.route('/admin/bookings/pending')
        @login_required
        @role_required(ROLE_STAFF)
        def pending_bookings():
            ...

    Args:
        role: Role name required (e.g., 'STAFF')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if current_user.role != role:
                raise ForbiddenError(MESSAGES['permission_denied'], required_role=role)
            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required']
