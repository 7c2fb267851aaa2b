"""
Slot manager.
Owns slot existence and the AVAILABLE/BOOKED flag of each slot.

try_reserve_slot is the only place a slot becomes BOOKED. It is a
compare-and-swap on the status column, so two callers racing for the
same slot cannot both win.
"""

import logging
from datetime import datetime, timedelta

from database import get_db, transaction
from models.facility import get_facility_by_id
from utils.datetime_helpers import get_now, to_db_timestamp, parse_db_timestamp
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.retry import db_retry
from utils.validators import parse_date_filter

logger = logging.getLogger(__name__)

SLOT_AVAILABLE = 'AVAILABLE'
SLOT_BOOKED = 'BOOKED'


@db_retry
def _in_own_transaction(operation, *args):
    with transaction() as cursor:
        return operation(cursor, *args)


# =============================================================================
# QUERIES
# =============================================================================

def get_slot_by_id(slot_id: int) -> dict:
    """
    Get slot by ID.

    Args:
        slot_id: Slot ID

    Returns:
        Slot dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT * FROM slots WHERE id = ?', (slot_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def list_slots(facility_id: int, date_filter=None, available_only: bool = False,
               now: datetime = None) -> list:
    """
    Get slots of a facility ordered by start time.

    Args:
        facility_id: Facility ID
        date_filter: Optional day (date or YYYY-MM-DD) the slots must start on
        available_only: If True, only return AVAILABLE slots that have not
            started yet
        now: Current time override (defaults to the configured clock)

    Returns:
        List of slot dicts

    Raises:
        NotFoundError: If the facility does not exist
        ValidationError: If the date filter is malformed
    """
    day = parse_date_filter(date_filter)

    if not get_facility_by_id(facility_id):
        raise NotFoundError(f'Facility {facility_id} not found', resource='facility')

    db = get_db()
    cursor = db.cursor()

    query = 'SELECT * FROM slots WHERE facility_id = ?'
    params = [facility_id]

    if available_only:
        query += ' AND status = ? AND start_time > ?'
        params.extend([SLOT_AVAILABLE, to_db_timestamp(now or get_now())])

    if day:
        query += ' AND date(start_time) = ?'
        params.append(day.isoformat())

    query += ' ORDER BY start_time, id'

    cursor.execute(query, params)
    return [dict(row) for row in cursor.fetchall()]


def list_available_slots(facility_id: int, date_filter=None, now: datetime = None) -> list:
    """Bookable slots of a facility: AVAILABLE and still in the future."""
    return list_slots(facility_id, date_filter, available_only=True, now=now)


# =============================================================================
# RESERVE / RELEASE
# =============================================================================

def _reserve(cursor, slot_id: int) -> bool:
    now = to_db_timestamp(get_now())
    cursor.execute('''
        UPDATE slots
        SET status = ?, updated_at = ?
        WHERE id = ? AND status = ?
    ''', (SLOT_BOOKED, now, slot_id, SLOT_AVAILABLE))

    if cursor.rowcount == 1:
        return True

    cursor.execute('SELECT status FROM slots WHERE id = ?', (slot_id,))
    if not cursor.fetchone():
        raise NotFoundError(f'Slot {slot_id} not found', resource='slot')
    raise ConflictError(f'Slot {slot_id} is already booked', slot_id=slot_id)


def _release(cursor, slot_id: int) -> bool:
    cursor.execute('SELECT status FROM slots WHERE id = ?', (slot_id,))
    row = cursor.fetchone()
    if not row:
        raise NotFoundError(f'Slot {slot_id} not found', resource='slot')

    if row['status'] == SLOT_AVAILABLE:
        return False

    cursor.execute('''
        UPDATE slots
        SET status = ?, updated_at = ?
        WHERE id = ?
    ''', (SLOT_AVAILABLE, to_db_timestamp(get_now()), slot_id))
    return True


def try_reserve_slot(slot_id: int, cursor=None) -> bool:
    """
    Atomically flip a slot from AVAILABLE to BOOKED.

    Args:
        slot_id: Slot ID
        cursor: Active transaction cursor; when omitted the reservation
            runs in its own transaction

    Returns:
        True on success

    Raises:
        NotFoundError: If the slot does not exist
        ConflictError: If the slot is not AVAILABLE
    """
    if cursor is None:
        return _in_own_transaction(_reserve, slot_id)
    return _reserve(cursor, slot_id)


def release_slot(slot_id: int, cursor=None) -> bool:
    """
    Return a slot to AVAILABLE.

    Releasing an AVAILABLE slot is a no-op.

    Args:
        slot_id: Slot ID
        cursor: Active transaction cursor (optional)

    Returns:
        True if the slot changed, False if it was already AVAILABLE

    Raises:
        NotFoundError: If the slot does not exist
    """
    if cursor is None:
        return _in_own_transaction(_release, slot_id)
    return _release(cursor, slot_id)


# =============================================================================
# SLOT CREATION
# =============================================================================

def _coerce_datetime(value, field: str) -> datetime:
    if isinstance(value, datetime):
        return value.replace(microsecond=0)
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None, microsecond=0)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {field} timestamp: {value!r}', field=field)


def _insert_slot(cursor, facility_id: int, start: datetime, end: datetime) -> int:
    start_str, end_str = to_db_timestamp(start), to_db_timestamp(end)

    cursor.execute('''
        SELECT id FROM slots
        WHERE facility_id = ? AND start_time < ? AND end_time > ?
        LIMIT 1
    ''', (facility_id, end_str, start_str))
    if cursor.fetchone():
        return None

    cursor.execute('''
        INSERT INTO slots (facility_id, start_time, end_time, status, updated_at)
        VALUES (?, ?, ?, ?, ?)
    ''', (facility_id, start_str, end_str, SLOT_AVAILABLE, to_db_timestamp(get_now())))
    return cursor.lastrowid


def create_slot(facility_id: int, start_time, end_time) -> dict:
    """
    Create an AVAILABLE slot for a facility.

    Args:
        facility_id: Facility ID
        start_time: datetime or ISO string
        end_time: datetime or ISO string

    Returns:
        The new slot dict

    Raises:
        ValidationError: If start is not before end
        NotFoundError: If the facility does not exist
        ConflictError: If the interval overlaps another slot of the facility
    """
    start = _coerce_datetime(start_time, 'start_time')
    end = _coerce_datetime(end_time, 'end_time')
    if start >= end:
        raise ValidationError('Slot start must be before its end', field='end_time')

    if not get_facility_by_id(facility_id):
        raise NotFoundError(f'Facility {facility_id} not found', resource='facility')

    slot_id = _in_own_transaction(_insert_slot, facility_id, start, end)
    if slot_id is None:
        raise ConflictError('Slot overlaps an existing slot', facility_id=facility_id)

    logger.info('Created slot %s for facility %s (%s - %s)', slot_id, facility_id, start, end)
    return get_slot_by_id(slot_id)


def generate_slots(facility_id: int, day, open_hour: int = 8, close_hour: int = 20,
                   duration_minutes: int = 60) -> list:
    """
    Create consecutive slots for one day.

    Intervals that would overlap an existing slot are skipped.

    Args:
        facility_id: Facility ID
        day: date or YYYY-MM-DD string
        open_hour: First slot start hour
        close_hour: Hour the last slot must end by
        duration_minutes: Length of each slot

    Returns:
        List of created slot dicts
    """
    slot_day = parse_date_filter(day)
    if slot_day is None:
        raise ValidationError('Day is required', field='day')
    if not 0 <= open_hour < close_hour <= 24:
        raise ValidationError('Opening hours must satisfy 0 <= open < close <= 24', field='open_hour')
    if duration_minutes <= 0:
        raise ValidationError('Slot duration must be positive', field='duration_minutes')

    if not get_facility_by_id(facility_id):
        raise NotFoundError(f'Facility {facility_id} not found', resource='facility')

    opening = datetime.combine(slot_day, datetime.min.time()) + timedelta(hours=open_hour)
    closing = datetime.combine(slot_day, datetime.min.time()) + timedelta(hours=close_hour)
    step = timedelta(minutes=duration_minutes)

    def _generate(cursor):
        created = []
        start = opening
        while start + step <= closing:
            slot_id = _insert_slot(cursor, facility_id, start, start + step)
            if slot_id is not None:
                created.append(slot_id)
            start += step
        return created

    created_ids = _in_own_transaction(_generate)
    logger.info('Generated %d slots for facility %s on %s', len(created_ids), facility_id, slot_day)
    return [get_slot_by_id(slot_id) for slot_id in created_ids]


def slot_has_started(slot: dict, now: datetime = None) -> bool:
    """True once the slot start time has been reached."""
    now = now or get_now()
    return parse_db_timestamp(slot['start_time']) <= now
