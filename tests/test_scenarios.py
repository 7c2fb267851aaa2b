"""
End-to-end booking walkthrough against the engine.
"""

from datetime import datetime, time, timedelta

import pytest

from utils.errors import AlreadyCheckedInError, ConflictError, InvalidTransitionError


def test_full_lifecycle(app, member, other_member, staff, make_slot):
    """Book, approve, check in, contend, cancel, then summarize."""
    from models.approval import approve_booking
    from models.booking import (
        create_booking, cancel_booking, count_live_bookings_for_slot, get_bookings_for_user,
    )
    from models.checkin import checkin_by_token
    from models.reports import summarize_bookings
    from models.slot import get_slot_by_id

    from utils.datetime_helpers import get_now

    with app.app_context():
        day = get_now().date() + timedelta(days=3)

    # S1: 10:00-11:00
    s1 = make_slot(start=datetime.combine(day, time(10, 0)), duration_minutes=60)
    s2 = make_slot()

    with app.app_context():
        # 1. Member books S1
        b1 = create_booking(member.id, 1, s1['id'])
        assert b1['status'] == 'PENDING'
        assert get_slot_by_id(s1['id'])['status'] == 'BOOKED'

        # 2. Staff approves
        b1 = approve_booking(b1['id'], staff)
        assert b1['status'] == 'APPROVED'
        t1 = b1['checkin_token']
        assert t1

        # 3. Check-in, then a second scan
        b1 = checkin_by_token(t1, staff)
        assert b1['status'] == 'CHECKED_IN'
        assert b1['checked_in_at'] is not None
        with pytest.raises(AlreadyCheckedInError):
            checkin_by_token(t1, staff)

        # 4. Another member tries S1
        with pytest.raises(ConflictError):
            create_booking(other_member.id, 1, s1['id'])
        assert get_bookings_for_user(other_member.id) == []
        assert count_live_bookings_for_slot(s1['id']) == 1

        # 5. Book and cancel S2
        b2 = create_booking(member.id, 1, s2['id'])
        b2 = cancel_booking(b2['id'], member.id)
        assert b2['status'] == 'CANCELED'
        assert get_slot_by_id(s2['id'])['status'] == 'AVAILABLE'
        with pytest.raises(InvalidTransitionError):
            cancel_booking(b2['id'], member.id)

        # 6. Summary
        summary = summarize_bookings()

    assert summary['total_bookings'] >= 1
    assert summary['total_checked_in'] >= 1
    lab = [row for row in summary['counts_by_facility'] if row['facility_id'] == 1]
    assert lab and lab[0]['count'] >= 1
