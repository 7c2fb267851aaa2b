"""
Authentication routes: register, login, current identity.
Issues the bearer credentials that the API blueprints accept.
"""

import sqlite3

from flask import Blueprint, current_app
from flask_login import login_required, current_user

from blueprints.auth.forms import LoginForm, RegisterForm
from models.user import (
    User, ROLE_MEMBER, create_user, get_user_by_email, get_user_by_id,
    update_last_login, check_password,
)
from utils.api_response import api_success, api_error
from utils.auth_tokens import issue_auth_token
from utils.errors import ConflictError, ValidationError
from utils.messages import MESSAGES

auth_bp = Blueprint('auth', __name__)


def _form_errors(form) -> ValidationError:
    return ValidationError('Invalid input', fields=form.errors)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create a MEMBER account and return a bearer credential."""
    form = RegisterForm()

    if not form.validate_on_submit():
        raise _form_errors(form)

    if get_user_by_email(form.email.data):
        raise ConflictError(MESSAGES['email_exists'], field='email')

    try:
        user_id = create_user(
            name=form.name.data.strip(),
            email=form.email.data,
            password=form.password.data,
            role=ROLE_MEMBER
        )
    except sqlite3.IntegrityError:
        raise ConflictError(MESSAGES['email_exists'], field='email')

    user = User(get_user_by_id(user_id))
    current_app.logger.info('Registered user %s', user.id)

    return api_success({
        'user': user.to_dict(),
        'token': issue_auth_token(user.id),
        'message': MESSAGES['registration_success'],
    }, status=201)


@auth_bp.route('/login', methods=['POST'])
def login():
    """Check credentials and return a bearer credential."""
    form = LoginForm()

    if not form.validate_on_submit():
        raise _form_errors(form)

    user_dict = get_user_by_email(form.email.data)

    # Check credentials
    if user_dict is None or not check_password(user_dict, form.password.data):
        return api_error(MESSAGES['invalid_credentials'], status=401, code='Unauthorized')

    # Check if user is active
    if not user_dict.get('active'):
        return api_error(MESSAGES['account_disabled'], status=403, code='Forbidden')

    user = User(user_dict)
    update_last_login(user.id)

    return api_success({
        'user': user.to_dict(),
        'token': issue_auth_token(user.id),
        'message': MESSAGES['login_success'].format(name=user.name),
    })


@auth_bp.route('/me')
@login_required
def me():
    """Return the identity behind the bearer credential."""
    return api_success({'user': current_user.to_dict()})
