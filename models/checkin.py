"""
Check-in verifier.
Redeems a check-in token exactly once, moving its booking to CHECKED_IN.

The token stays on the booking after redemption so a second scan can be
answered with AlreadyCheckedIn instead of NotFound.
"""

import logging
from datetime import datetime, timedelta

from flask import current_app

from database import transaction
from models.booking import get_booking_with_details
from models.booking_state import (
    STATUS_APPROVED, STATUS_CHECKED_IN, record_transition, validate_transition,
)
from models.user import ROLE_STAFF, require_role
from utils.datetime_helpers import get_now, parse_db_timestamp, to_db_timestamp
from utils.errors import (
    AlreadyCheckedInError, ExpiredError, NotFoundError, TooEarlyError,
)
from utils.retry import db_retry

logger = logging.getLogger(__name__)


def check_time_window(start_time: str, end_time: str, now: datetime) -> None:
    """
    Apply the configured check-in window to a slot.

    CHECKIN_EARLY_WINDOW_MINUTES limits how long before the slot start a
    token may be redeemed; CHECKIN_LATE_GRACE_MINUTES how long after the
    slot end. None disables the respective limit.

    Raises:
        TooEarlyError: Window not open yet
        ExpiredError: Window already closed
    """
    early = current_app.config.get('CHECKIN_EARLY_WINDOW_MINUTES')
    late = current_app.config.get('CHECKIN_LATE_GRACE_MINUTES')

    if early is not None:
        opens_at = parse_db_timestamp(start_time) - timedelta(minutes=early)
        if now < opens_at:
            raise TooEarlyError('Check-in is not open yet', opens_at=to_db_timestamp(opens_at))

    if late is not None:
        closes_at = parse_db_timestamp(end_time) + timedelta(minutes=late)
        if now > closes_at:
            raise ExpiredError('The check-in window has closed', closed_at=to_db_timestamp(closes_at))


@db_retry
def _redeem(token: str, operator_id: int, now: datetime) -> int:
    with transaction() as cursor:
        cursor.execute('''
            SELECT b.id, b.status, s.start_time, s.end_time
            FROM bookings b
            JOIN slots s ON b.slot_id = s.id
            WHERE b.checkin_token = ?
        ''', (token,))
        booking = cursor.fetchone()
        if not booking:
            raise NotFoundError('No booking holds this check-in token', resource='token')

        booking_id, current_status = booking['id'], booking['status']
        if current_status == STATUS_CHECKED_IN:
            raise AlreadyCheckedInError(booking_id)
        validate_transition(current_status, STATUS_CHECKED_IN)

        check_time_window(booking['start_time'], booking['end_time'], now)

        stamp = to_db_timestamp(now)
        cursor.execute('''
            UPDATE bookings
            SET status = ?, checked_in_at = ?, checked_in_by = ?, updated_at = ?
            WHERE id = ? AND status = ?
        ''', (STATUS_CHECKED_IN, stamp, operator_id, stamp, booking_id, STATUS_APPROVED))
        if cursor.rowcount != 1:
            raise AlreadyCheckedInError(booking_id)

        record_transition(cursor, booking_id, current_status, STATUS_CHECKED_IN, operator_id)
        return booking_id


def checkin_by_token(token: str, actor, now: datetime = None) -> dict:
    """
    Redeem a check-in token.

    Args:
        token: Token presented at the facility
        actor: Staff identity operating the scanner
        now: Current time override (defaults to the configured clock)

    Returns:
        Serialized booking in CHECKED_IN

    Raises:
        ForbiddenError: Actor is not staff
        NotFoundError: No booking holds the token
        AlreadyCheckedInError: Token was already redeemed
        InvalidTransitionError: Booking is not APPROVED
        TooEarlyError / ExpiredError: Outside the configured window
    """
    require_role(actor, ROLE_STAFF)

    token = (token or '').strip()
    if not token:
        raise NotFoundError('No booking holds this check-in token', resource='token')

    booking_id = _redeem(token, actor.id, now or get_now())

    logger.info('Booking %s checked in by user %s', booking_id, actor.id)
    return get_booking_with_details(booking_id)
