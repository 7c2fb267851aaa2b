"""
Booking usage summary.

All counts come from one read snapshot, so they are consistent with each
other and never hold the write lock. Bookings are never deleted and every
counter only counts facts that cannot be undone (a booking existing, an
approval timestamp, a terminal check-in), so successive summaries never
go down.
"""

from typing import Any

from database import snapshot
from models.booking_state import BOOKING_STATUSES, STATUS_CHECKED_IN
from utils.datetime_helpers import get_now, to_db_timestamp


def summarize_bookings() -> dict[str, Any]:
    """
    Get booking totals and per-facility counts.

    Returns:
        Dict with total_bookings, total_approved (ever approved),
        total_checked_in, counts_by_status, counts_by_facility and
        generated_at
    """
    with snapshot() as cursor:
        cursor.execute('''
            SELECT
                COUNT(*) as total_bookings,
                COALESCE(SUM(CASE WHEN approved_at IS NOT NULL THEN 1 ELSE 0 END), 0) as total_approved,
                COALESCE(SUM(CASE WHEN status = ? THEN 1 ELSE 0 END), 0) as total_checked_in
            FROM bookings
        ''', (STATUS_CHECKED_IN,))
        totals = dict(cursor.fetchone())

        cursor.execute('''
            SELECT status, COUNT(*) as count
            FROM bookings
            GROUP BY status
        ''')
        counts_by_status = {status: 0 for status in BOOKING_STATUSES}
        for row in cursor.fetchall():
            counts_by_status[row['status']] = row['count']

        cursor.execute('''
            SELECT f.id as facility_id, f.name as facility_name, COUNT(b.id) as count
            FROM facilities f
            LEFT JOIN bookings b ON b.facility_id = f.id
            GROUP BY f.id, f.name
            ORDER BY count DESC, f.name
        ''')
        counts_by_facility = [dict(row) for row in cursor.fetchall()]

    return {
        'total_bookings': totals['total_bookings'],
        'total_approved': totals['total_approved'],
        'total_checked_in': totals['total_checked_in'],
        'counts_by_status': counts_by_status,
        'counts_by_facility': counts_by_facility,
        'generated_at': to_db_timestamp(get_now()),
    }
