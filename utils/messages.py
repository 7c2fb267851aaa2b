"""
Centralized UI messages.
All user-facing text in one place for consistency.
"""

MESSAGES = {
    # Auth
    'login_success': 'Welcome {name}',
    'registration_success': 'Account created',
    'invalid_credentials': 'Invalid email or password',
    'account_disabled': 'Your account has been disabled',
    'email_exists': 'An account with this email already exists',
    'authentication_required': 'Authentication required',

    # Errors
    'permission_denied': 'You do not have permission to perform this action',
    'not_found': 'Resource not found',
    'method_not_allowed': 'Method not allowed',
    'internal_error': 'Internal server error',
}
