"""
User model and data access functions.
Handles identities, password checks, and Flask-Login integration.
"""

from werkzeug.security import generate_password_hash, check_password_hash
from database import get_db

from utils.errors import ForbiddenError
from utils.messages import MESSAGES
from utils.validators import validate_email

ROLE_MEMBER = 'MEMBER'
ROLE_STAFF = 'STAFF'
ROLES = (ROLE_MEMBER, ROLE_STAFF)


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.name = user_dict['name']
        self.email = user_dict['email']
        self.role = user_dict['role']
        self.active = user_dict['active']
        self.created_at = user_dict['created_at']
        self.last_login = user_dict.get('last_login')

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    @property
    def is_staff(self):
        return self.role == ROLE_STAFF

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
        }


def require_role(actor, role: str) -> None:
    """
    Guard clause for role-gated operations.

    Args:
        actor: Identity with a ``role`` attribute
        role: Required role

    Raises:
        ForbiddenError: If the actor does not hold the role
    """
    if actor is None or getattr(actor, 'role', None) != role:
        raise ForbiddenError(MESSAGES['permission_denied'], required_role=role)


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE id = ?', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_email(email: str) -> dict:
    """
    Get user by email (case-insensitive).

    Args:
        email: Email to search for

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM users WHERE lower(email) = lower(?)', (email,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_user(name: str, email: str, password: str, role: str = ROLE_MEMBER) -> int:
    """
    Create new user with hashed password.

    Args:
        name: Display name
        email: Unique email
        password: Plain text password (will be hashed)
        role: MEMBER or STAFF

    Returns:
        New user ID

    Raises:
        ValueError if the role or email is invalid
        sqlite3.IntegrityError if email already exists
    """
    if role not in ROLES:
        raise ValueError(f'Unknown role: {role}')
    email = (email or '').strip().lower()
    if not validate_email(email):
        raise ValueError(f'Invalid email: {email}')

    db = get_db()
    password_hash = generate_password_hash(password)

    cursor = db.cursor()
    cursor.execute('''
        INSERT INTO users (name, email, password_hash, role)
        VALUES (?, ?, ?, ?)
    ''', (name, email, password_hash, role))

    db.commit()
    return cursor.lastrowid


def update_last_login(user_id: int) -> None:
    """
    Update last login timestamp.

    Args:
        user_id: User ID
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        UPDATE users SET last_login = CURRENT_TIMESTAMP
        WHERE id = ?
    ''', (user_id,))
    db.commit()


def check_password(user_dict: dict, password: str) -> bool:
    """
    Verify password against stored hash.

    Args:
        user_dict: User dictionary with password_hash
        password: Plain text password to check

    Returns:
        True if password matches
    """
    return check_password_hash(user_dict['password_hash'], password)
