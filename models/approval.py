"""
Approval workflow.
Staff review of PENDING bookings: approve (mints the check-in token) or
reject (frees the slot).
"""

import logging
import secrets
import sqlite3

from flask import current_app

from database import get_db, transaction
from models.booking import BOOKING_DETAIL_QUERY, get_booking_with_details, serialize_booking
from models.booking_state import (
    STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED,
    record_transition, validate_transition,
)
from models.slot import release_slot
from models.user import ROLE_STAFF, require_role
from utils.datetime_helpers import get_now, to_db_timestamp
from utils.errors import ConflictError, InvalidTransitionError, NotFoundError
from utils.retry import db_retry
from utils.validators import require_id

logger = logging.getLogger(__name__)

# 32 random bytes, 256 bits of entropy
CHECKIN_TOKEN_BYTES = 32


def generate_checkin_token() -> str:
    """Return a fresh URL-safe check-in token."""
    return secrets.token_urlsafe(CHECKIN_TOKEN_BYTES)


def _load_status(cursor, booking_id: int) -> str:
    cursor.execute('SELECT status FROM bookings WHERE id = ?', (booking_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFoundError(f'Booking {booking_id} not found', resource='booking')
    return row['status']


# =============================================================================
# REVIEW QUEUE
# =============================================================================

def list_pending_bookings(actor) -> list:
    """
    Get the review queue.

    Args:
        actor: Staff identity

    Returns:
        PENDING bookings, oldest first

    Raises:
        ForbiddenError: If the actor is not staff
    """
    require_role(actor, ROLE_STAFF)

    db = get_db()
    cursor = db.cursor()
    cursor.execute(
        BOOKING_DETAIL_QUERY + ' WHERE b.status = ? ORDER BY b.created_at ASC, b.id ASC',
        (STATUS_PENDING,)
    )
    return [serialize_booking(row) for row in cursor.fetchall()]


# =============================================================================
# APPROVE
# =============================================================================

@db_retry
def _approve(booking_id: int, reviewer_id: int) -> str:
    max_attempts = current_app.config.get('TOKEN_MINT_ATTEMPTS', 5)

    with transaction() as cursor:
        current_status = _load_status(cursor, booking_id)
        validate_transition(current_status, STATUS_APPROVED)

        stamp = to_db_timestamp(get_now())
        for attempt in range(max_attempts):
            token = generate_checkin_token()
            try:
                cursor.execute('''
                    UPDATE bookings
                    SET status = ?, checkin_token = ?,
                        approved_at = ?, reviewed_at = ?, reviewed_by = ?,
                        updated_at = ?
                    WHERE id = ? AND status = ?
                ''', (STATUS_APPROVED, token, stamp, stamp, reviewer_id, stamp,
                      booking_id, STATUS_PENDING))
            except sqlite3.IntegrityError:
                logger.warning('Check-in token collision on booking %s (attempt %d)',
                               booking_id, attempt + 1)
                continue

            if cursor.rowcount != 1:
                raise InvalidTransitionError(current_status, STATUS_APPROVED)

            record_transition(cursor, booking_id, current_status, STATUS_APPROVED, reviewer_id)
            return token

        raise ConflictError('Could not mint a unique check-in token', booking_id=booking_id)


def approve_booking(booking_id, actor) -> dict:
    """
    Approve a PENDING booking and attach a new check-in token.

    Args:
        booking_id: Booking ID
        actor: Staff identity

    Returns:
        Serialized booking in APPROVED, including its token

    Raises:
        ForbiddenError: Actor is not staff
        NotFoundError: Booking does not exist
        InvalidTransitionError: Booking is not PENDING
    """
    require_role(actor, ROLE_STAFF)
    booking_id = require_id(booking_id, 'bookingId')

    _approve(booking_id, actor.id)

    logger.info('Booking %s approved by user %s', booking_id, actor.id)
    return get_booking_with_details(booking_id)


# =============================================================================
# REJECT
# =============================================================================

@db_retry
def _reject(booking_id: int, reviewer_id: int) -> None:
    with transaction() as cursor:
        current_status = _load_status(cursor, booking_id)
        validate_transition(current_status, STATUS_REJECTED)

        stamp = to_db_timestamp(get_now())
        cursor.execute('''
            UPDATE bookings
            SET status = ?, reviewed_at = ?, reviewed_by = ?, updated_at = ?
            WHERE id = ? AND status = ?
        ''', (STATUS_REJECTED, stamp, reviewer_id, stamp, booking_id, STATUS_PENDING))
        if cursor.rowcount != 1:
            raise InvalidTransitionError(current_status, STATUS_REJECTED)

        cursor.execute('SELECT slot_id FROM bookings WHERE id = ?', (booking_id,))
        release_slot(cursor.fetchone()['slot_id'], cursor=cursor)
        record_transition(cursor, booking_id, current_status, STATUS_REJECTED, reviewer_id)


def reject_booking(booking_id, actor) -> dict:
    """
    Reject a PENDING booking and free its slot.

    Args:
        booking_id: Booking ID
        actor: Staff identity

    Returns:
        Serialized booking in REJECTED

    Raises:
        ForbiddenError: Actor is not staff
        NotFoundError: Booking does not exist
        InvalidTransitionError: Booking is not PENDING
    """
    require_role(actor, ROLE_STAFF)
    booking_id = require_id(booking_id, 'bookingId')

    _reject(booking_id, actor.id)

    logger.info('Booking %s rejected by user %s', booking_id, actor.id)
    return get_booking_with_details(booking_id)
