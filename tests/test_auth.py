"""
Tests for identities, bearer credentials and role guards.
"""

import pytest

from utils.errors import ForbiddenError


class TestUsers:
    """Tests for the user model."""

    def test_create_user_normalizes_email(self, app):
        from models.user import create_user, get_user_by_email

        with app.app_context():
            create_user('Case Test', 'Mixed.Case@Example.org', 'password123')

            user = get_user_by_email('mixed.case@example.org')
            assert user['email'] == 'mixed.case@example.org'
            assert user['role'] == 'MEMBER'
            assert get_user_by_email('MIXED.CASE@EXAMPLE.ORG') is not None

    def test_create_user_rejects_unknown_role(self, app):
        from models.user import create_user

        with app.app_context():
            with pytest.raises(ValueError):
                create_user('Bad Role', 'bad@example.org', 'password123', role='ADMIN')

    def test_create_user_rejects_bad_email(self, app):
        from models.user import create_user

        with app.app_context():
            with pytest.raises(ValueError):
                create_user('No Domain', 'someone@nowhere', 'password123')

    def test_password_check(self, app, member):
        from models.user import check_password, get_user_by_id

        with app.app_context():
            row = get_user_by_id(member.id)
            assert check_password(row, 'password123')
            assert not check_password(row, 'password124')

    def test_user_flags(self, member, staff):
        assert member.is_authenticated
        assert member.is_active
        assert not member.is_staff
        assert staff.is_staff
        assert member.get_id() == str(member.id)
        assert 'password_hash' not in member.to_dict()


class TestRequireRole:
    """Tests for the role guard."""

    def test_staff_passes(self, staff):
        from models.user import require_role

        require_role(staff, 'STAFF')

    def test_member_refused(self, member):
        from models.user import require_role

        with pytest.raises(ForbiddenError):
            require_role(member, 'STAFF')

    def test_missing_actor_refused(self):
        from models.user import require_role

        with pytest.raises(ForbiddenError):
            require_role(None, 'STAFF')


class TestBearerCredentials:
    """Tests for signed bearer credentials."""

    def test_round_trip(self, app):
        from utils.auth_tokens import issue_auth_token, verify_auth_token

        with app.app_context():
            assert verify_auth_token(issue_auth_token(5)) == 5

    def test_tampered(self, app):
        from utils.auth_tokens import issue_auth_token, verify_auth_token

        with app.app_context():
            token = issue_auth_token(5)
            assert verify_auth_token(token[:-2] + 'xx') is None
            assert verify_auth_token('') is None

    def test_other_secret(self, app):
        from utils.auth_tokens import issue_auth_token, verify_auth_token

        with app.app_context():
            token = issue_auth_token(5)
            app.config['SECRET_KEY'] = 'a-different-secret'
            assert verify_auth_token(token) is None

    def test_expired(self, app):
        from utils.auth_tokens import issue_auth_token, verify_auth_token

        with app.app_context():
            token = issue_auth_token(5)
            app.config['AUTH_TOKEN_MAX_AGE'] = -1
            assert verify_auth_token(token) is None

    def test_disabled_account_refused(self, app, client, member, auth_headers):
        from database import get_db

        headers = auth_headers(member)
        with app.app_context():
            db = get_db()
            db.execute('UPDATE users SET active = 0 WHERE id = ?', (member.id,))
            db.commit()

        assert client.get('/auth/me', headers=headers).status_code == 401
