"""
Booking state machine.
Status constants, the legal transition matrix, and transition history.

State diagram:
    PENDING ──approve──► APPROVED ──checkin──► CHECKED_IN
       │                    │
       ├──reject──► REJECTED │
       │                    │
       └──cancel──► CANCELED ◄──cancel──┘
"""

from database import get_db
from utils.datetime_helpers import get_now, to_db_timestamp
from utils.errors import InvalidTransitionError


# =============================================================================
# CONSTANTS
# =============================================================================

STATUS_PENDING = 'PENDING'
STATUS_APPROVED = 'APPROVED'
STATUS_REJECTED = 'REJECTED'
STATUS_CANCELED = 'CANCELED'
STATUS_CHECKED_IN = 'CHECKED_IN'

BOOKING_STATUSES = (
    STATUS_PENDING,
    STATUS_APPROVED,
    STATUS_REJECTED,
    STATUS_CANCELED,
    STATUS_CHECKED_IN,
)

VALID_TRANSITIONS = {
    STATUS_PENDING: {STATUS_APPROVED, STATUS_REJECTED, STATUS_CANCELED},
    STATUS_APPROVED: {STATUS_CHECKED_IN, STATUS_CANCELED},
    STATUS_REJECTED: set(),    # terminal
    STATUS_CANCELED: set(),    # terminal
    STATUS_CHECKED_IN: set(),  # terminal
}


# =============================================================================
# VALIDATION
# =============================================================================

def is_terminal(status: str) -> bool:
    """True for statuses with no way out (REJECTED, CANCELED, CHECKED_IN)."""
    return not VALID_TRANSITIONS.get(status)


def validate_transition(current_status: str, target_status: str) -> bool:
    """
    Check that a transition is legal.

    Args:
        current_status: Status the booking is in
        target_status: Status the caller wants

    Returns:
        True if the transition is allowed

    Raises:
        InvalidTransitionError: If it is not
    """
    if current_status in VALID_TRANSITIONS and is_terminal(current_status):
        raise InvalidTransitionError(
            current_status, target_status,
            message=f'Booking is already {current_status} and can no longer change'
        )
    if target_status not in VALID_TRANSITIONS.get(current_status, set()):
        raise InvalidTransitionError(current_status, target_status)
    return True


# =============================================================================
# HISTORY
# =============================================================================

def record_transition(cursor, booking_id: int, from_status: str, to_status: str,
                      changed_by: int = None, notes: str = '') -> None:
    """Append a history row inside the caller's transaction."""
    cursor.execute('''
        INSERT INTO booking_status_history
        (booking_id, from_status, to_status, changed_by, notes, created_at)
        VALUES (?, ?, ?, ?, ?, ?)
    ''', (booking_id, from_status, to_status, changed_by, notes, to_db_timestamp(get_now())))


def get_status_history(booking_id: int) -> list:
    """
    Get state change history for a booking.

    Args:
        booking_id: Booking ID

    Returns:
        list: History entries, oldest first
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT h.*, u.name as changed_by_name
        FROM booking_status_history h
        LEFT JOIN users u ON h.changed_by = u.id
        WHERE h.booking_id = ?
        ORDER BY h.id
    ''', (booking_id,))
    return [dict(r) for r in cursor.fetchall()]
