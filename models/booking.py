"""
Booking lifecycle engine.
Creates bookings, cancels them, and reads them back with their details.

Slot reservation and booking creation share one transaction, as do
cancellation and slot release, so a slot is never left BOOKED without a
live booking (or the reverse).
"""

import logging
import sqlite3
from datetime import datetime

from database import get_db, transaction
from models.booking_state import (
    STATUS_PENDING, STATUS_CANCELED,
    record_transition, validate_transition,
)
from models.facility import get_facility_by_id
from models.slot import try_reserve_slot, release_slot, slot_has_started
from utils.datetime_helpers import get_now, to_db_timestamp
from utils.errors import (
    ConflictError, ForbiddenError, InvalidTransitionError, NotFoundError,
    SlotUnavailableError, TooLateError, ValidationError,
)
from utils.retry import db_retry
from utils.validators import require_id, sanitize_input

logger = logging.getLogger(__name__)

PURPOSE_MAX_LENGTH = 500

BOOKING_DETAIL_QUERY = '''
    SELECT b.*,
           f.name as facility_name, f.category as facility_category,
           f.building as facility_building, f.floor as facility_floor,
           s.start_time as slot_start_time, s.end_time as slot_end_time,
           s.status as slot_status,
           u.name as user_name, u.email as user_email
    FROM bookings b
    JOIN facilities f ON b.facility_id = f.id
    JOIN slots s ON b.slot_id = s.id
    JOIN users u ON b.user_id = u.id
'''


# =============================================================================
# READ
# =============================================================================

def serialize_booking(row) -> dict:
    """Shape a booking detail row the way API clients read it."""
    data = dict(row)
    return {
        'id': data['id'],
        'status': data['status'],
        'purpose': data['purpose'],
        'checkin_token': data['checkin_token'],
        'created_at': data['created_at'],
        'reviewed_at': data['reviewed_at'],
        'approved_at': data['approved_at'],
        'cancelled_at': data['cancelled_at'],
        'checked_in_at': data['checked_in_at'],
        'user_id': data['user_id'],
        'facility_id': data['facility_id'],
        'slot_id': data['slot_id'],
        'facility': {
            'id': data['facility_id'],
            'name': data['facility_name'],
            'category': data['facility_category'],
            'building': data['facility_building'],
            'floor': data['facility_floor'],
        },
        'slot': {
            'id': data['slot_id'],
            'start_time': data['slot_start_time'],
            'end_time': data['slot_end_time'],
            'status': data['slot_status'],
        },
        'user': {
            'id': data['user_id'],
            'name': data['user_name'],
            'email': data['user_email'],
        },
    }


def get_booking_by_id(booking_id: int) -> dict:
    """
    Get the raw booking row.

    Args:
        booking_id: Booking ID

    Returns:
        Booking dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM bookings WHERE id = ?', (booking_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_booking_with_details(booking_id: int) -> dict:
    """
    Get a booking with its facility, slot and requester.

    Args:
        booking_id: Booking ID

    Returns:
        Serialized booking dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(BOOKING_DETAIL_QUERY + ' WHERE b.id = ?', (booking_id,))
    row = cursor.fetchone()
    return serialize_booking(row) if row else None


def get_bookings_for_user(user_id: int) -> list:
    """
    Get a requester's bookings, newest first.

    Args:
        user_id: Requester ID

    Returns:
        List of serialized bookings
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(
        BOOKING_DETAIL_QUERY + ' WHERE b.user_id = ? ORDER BY b.created_at DESC, b.id DESC',
        (user_id,)
    )
    return [serialize_booking(row) for row in cursor.fetchall()]


def count_live_bookings_for_slot(slot_id: int) -> int:
    """Number of bookings on a slot that still hold it."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT COUNT(*) as total FROM bookings
        WHERE slot_id = ? AND status NOT IN ('REJECTED', 'CANCELED')
    ''', (slot_id,))
    return cursor.fetchone()['total']


# =============================================================================
# CREATE
# =============================================================================

@db_retry
def _insert_booking(requester_id: int, facility_id: int, slot_id: int, purpose: str,
                    now: datetime) -> int:
    with transaction() as cursor:
        cursor.execute('SELECT facility_id, start_time FROM slots WHERE id = ?', (slot_id,))
        slot = cursor.fetchone()
        if not slot:
            raise NotFoundError(f'Slot {slot_id} not found', resource='slot')
        if slot['facility_id'] != facility_id:
            raise ValidationError(
                f'Slot {slot_id} does not belong to facility {facility_id}',
                field='slotId'
            )
        if slot_has_started(slot, now):
            raise TooLateError('The slot has already started', start_time=slot['start_time'])

        try:
            try_reserve_slot(slot_id, cursor=cursor)
        except ConflictError as exc:
            raise SlotUnavailableError(f'Slot {slot_id} is no longer available',
                                       slot_id=slot_id) from exc

        created_at = to_db_timestamp(now)
        try:
            cursor.execute('''
                INSERT INTO bookings (
                    user_id, facility_id, slot_id, purpose, status,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ''', (requester_id, facility_id, slot_id, purpose or None, STATUS_PENDING,
                  created_at, created_at))
        except sqlite3.IntegrityError as exc:
            if not is_live_slot_violation(exc):
                raise
            raise SlotUnavailableError(f'Slot {slot_id} is no longer available',
                                       slot_id=slot_id) from exc

        booking_id = cursor.lastrowid
        record_transition(cursor, booking_id, None, STATUS_PENDING, requester_id)
        return booking_id


def is_live_slot_violation(exc: sqlite3.IntegrityError) -> bool:
    """True when an insert tripped the one-live-booking-per-slot index."""
    return 'bookings.slot_id' in str(exc)


def clean_purpose(purpose) -> str:
    """
    Validate the optional free-text purpose.

    Raises:
        ValidationError: If it is not a string or is too long
    """
    if purpose is None:
        return ''
    if not isinstance(purpose, str):
        raise ValidationError('purpose must be a string', field='purpose')

    purpose = sanitize_input(purpose)
    if len(purpose) > PURPOSE_MAX_LENGTH:
        raise ValidationError(
            f'purpose must be at most {PURPOSE_MAX_LENGTH} characters',
            field='purpose', max_length=PURPOSE_MAX_LENGTH
        )
    return purpose


def create_booking(requester_id: int, facility_id, slot_id, purpose: str = None,
                   now: datetime = None) -> dict:
    """
    Reserve a slot and create a PENDING booking for it.

    Both happen in one transaction: if the slot cannot be reserved no
    booking is written, and if the booking cannot be written the slot
    stays AVAILABLE.

    Args:
        requester_id: Requesting identity
        facility_id: Facility the slot belongs to
        slot_id: Slot to reserve
        purpose: Optional free text
        now: Current time override (defaults to the configured clock)

    Returns:
        Serialized booking

    Raises:
        ValidationError: Malformed ids or purpose, or slot of another facility
        NotFoundError: Facility or slot does not exist
        TooLateError: Slot has already started
        SlotUnavailableError: Slot is already booked
    """
    facility_id = require_id(facility_id, 'facilityId')
    slot_id = require_id(slot_id, 'slotId')
    purpose = clean_purpose(purpose)
    now = now or get_now()

    if not get_facility_by_id(facility_id):
        raise NotFoundError(f'Facility {facility_id} not found', resource='facility')

    booking_id = _insert_booking(requester_id, facility_id, slot_id, purpose, now)

    logger.info('Booking %s created by user %s for slot %s', booking_id, requester_id, slot_id)
    return get_booking_with_details(booking_id)


# =============================================================================
# CANCEL
# =============================================================================

@db_retry
def _cancel(booking_id: int, requester_id: int, now: datetime) -> str:
    with transaction() as cursor:
        cursor.execute('''
            SELECT b.id, b.user_id, b.slot_id, b.status, s.start_time
            FROM bookings b
            JOIN slots s ON b.slot_id = s.id
            WHERE b.id = ?
        ''', (booking_id,))
        booking = cursor.fetchone()
        if not booking:
            raise NotFoundError(f'Booking {booking_id} not found', resource='booking')

        if booking['user_id'] != requester_id:
            raise ForbiddenError('Only the requester can cancel this booking')

        current_status = booking['status']
        validate_transition(current_status, STATUS_CANCELED)

        if slot_has_started(booking, now):
            raise TooLateError('The slot has already started', start_time=booking['start_time'])

        stamp = to_db_timestamp(now)
        cursor.execute('''
            UPDATE bookings
            SET status = ?, cancelled_at = ?, updated_at = ?
            WHERE id = ? AND status = ?
        ''', (STATUS_CANCELED, stamp, stamp, booking_id, current_status))
        if cursor.rowcount != 1:
            raise InvalidTransitionError(current_status, STATUS_CANCELED)

        release_slot(booking['slot_id'], cursor=cursor)
        record_transition(cursor, booking_id, current_status, STATUS_CANCELED, requester_id)
        return current_status


def cancel_booking(booking_id, requester_id: int, now: datetime = None) -> dict:
    """
    Cancel a PENDING or APPROVED booking and free its slot.

    Args:
        booking_id: Booking ID
        requester_id: Identity asking for the cancellation
        now: Current time override (defaults to the configured clock)

    Returns:
        Serialized booking in CANCELED

    Raises:
        NotFoundError: Booking does not exist
        ForbiddenError: Requester does not own the booking
        InvalidTransitionError: Booking is not PENDING or APPROVED
        TooLateError: Slot has already started
    """
    booking_id = require_id(booking_id, 'bookingId')
    now = now or get_now()

    previous = _cancel(booking_id, requester_id, now)

    logger.info('Booking %s cancelled by user %s (was %s)', booking_id, requester_id, previous)
    return get_booking_with_details(booking_id)
