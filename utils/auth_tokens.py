"""
Bearer credential issuing and verification.

Credentials are signed with the application SECRET_KEY and expire after
AUTH_TOKEN_MAX_AGE seconds. They only carry the user id; the role is
read from the database on every request.
"""

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

_SALT = 'auth-bearer'


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=_SALT)


def issue_auth_token(user_id: int) -> str:
    """Sign a bearer credential for the given user."""
    return _serializer().dumps({'uid': user_id})


def verify_auth_token(token: str):
    """
    Verify a bearer credential.

    Args:
        token: Credential string from the Authorization header

    Returns:
        User id, or None if the credential is invalid or expired
    """
    if not token:
        return None
    try:
        payload = _serializer().loads(token, max_age=current_app.config['AUTH_TOKEN_MAX_AGE'])
    except SignatureExpired:
        current_app.logger.debug('Expired bearer credential')
        return None
    except BadSignature:
        return None
    return payload.get('uid')
