"""
Pytest configuration and fixtures.
Each test gets its own SQLite file so WAL snapshots and concurrent
connections behave as they do in production.
"""

import itertools
from datetime import timedelta

import pytest


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated, freshly seeded database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['DATABASE_PATH'] = str(tmp_path / 'facility_booking_test.db')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _make_user(app, name, email, role):
    from models.user import User, create_user, get_user_by_id

    with app.app_context():
        user_id = create_user(name=name, email=email, password='password123', role=role)
        return User(get_user_by_id(user_id))


@pytest.fixture
def member(app):
    """A MEMBER identity."""
    return _make_user(app, 'Member One', 'member1@example.org', 'MEMBER')


@pytest.fixture
def other_member(app):
    """A second MEMBER identity."""
    return _make_user(app, 'Member Two', 'member2@example.org', 'MEMBER')


@pytest.fixture
def staff(app):
    """The seeded STAFF identity."""
    from models.user import User, get_user_by_email

    with app.app_context():
        return User(get_user_by_email(app.config['ADMIN_EMAIL']))


@pytest.fixture
def second_staff(app):
    """Another STAFF identity."""
    return _make_user(app, 'Reviewer Two', 'reviewer2@example.org', 'STAFF')


@pytest.fixture
def make_slot(app):
    """
    Factory creating AVAILABLE slots in the future.

    Each call without an explicit start lands two hours after the previous
    one, so slots of the same facility never overlap.
    """
    from models.slot import create_slot
    from utils.datetime_helpers import get_now

    counter = itertools.count()

    def _make(facility_id=1, start=None, duration_minutes=60):
        with app.app_context():
            if start is None:
                base = get_now().replace(minute=0, second=0) + timedelta(days=1)
                start = base + timedelta(hours=2 * next(counter))
            return create_slot(facility_id, start, start + timedelta(minutes=duration_minutes))

    return _make


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header for an identity."""
    from utils.auth_tokens import issue_auth_token

    def _headers(user):
        with app.app_context():
            return {'Authorization': f'Bearer {issue_auth_token(user.id)}'}

    return _headers
