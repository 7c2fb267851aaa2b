"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask import request
from flask_login import LoginManager

# Initialize Flask-Login
login_manager = LoginManager()


@login_manager.request_loader
def load_user_from_request(req):
    """
    Load user from the Authorization header for Flask-Login.

    Args:
        req: The incoming request

    Returns:
        User object or None if the credential is missing or invalid
    """
    from models.user import get_user_by_id, User
    from utils.auth_tokens import verify_auth_token

    header = req.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None

    user_id = verify_auth_token(header.removeprefix('Bearer ').strip())
    if user_id is None:
        return None

    user_dict = get_user_by_id(int(user_id))
    if user_dict and user_dict.get('active'):
        return User(user_dict)
    return None


@login_manager.unauthorized_handler
def unauthorized():
    """Answer unauthenticated API calls with JSON instead of a redirect."""
    from utils.api_response import api_error
    from utils.messages import MESSAGES

    return api_error(MESSAGES['authentication_required'], status=401,
                     code='Unauthorized', path=request.path)
