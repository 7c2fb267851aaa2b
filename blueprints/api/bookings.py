"""
Member booking routes: create, list own, cancel, history.
"""

from flask_login import login_required, current_user

from blueprints.api.serializers import booking_to_wire, history_to_wire
from models.booking import (
    create_booking, cancel_booking, get_booking_by_id, get_bookings_for_user,
)
from models.booking_state import get_status_history
from utils.api_response import api_success
from utils.errors import ForbiddenError, NotFoundError
from utils.helpers import get_json_body, get_field
from utils.messages import MESSAGES


def register_routes(bp):
    """Register booking routes on the blueprint."""

    @bp.route('/bookings', methods=['POST'])
    @login_required
    def bookings_create():
        """Reserve a slot. Body: {facilityId, slotId, purpose?}."""
        data = get_json_body()

        booking = create_booking(
            requester_id=current_user.id,
            facility_id=get_field(data, 'facilityId', 'facility_id'),
            slot_id=get_field(data, 'slotId', 'slot_id'),
            purpose=get_field(data, 'purpose')
        )

        return api_success(booking_to_wire(booking), status=201)

    @bp.route('/bookings/me')
    @login_required
    def bookings_mine():
        """List the caller's bookings, newest first."""
        bookings = get_bookings_for_user(current_user.id)
        return api_success([booking_to_wire(b) for b in bookings])

    @bp.route('/bookings/<int:booking_id>', methods=['DELETE'])
    @login_required
    def bookings_cancel(booking_id):
        """Cancel one of the caller's bookings."""
        booking = cancel_booking(booking_id, current_user.id)
        return api_success(booking_to_wire(booking))

    @bp.route('/bookings/<int:booking_id>/history')
    @login_required
    def bookings_history(booking_id):
        """Status transitions of a booking (owner or staff)."""
        booking = get_booking_by_id(booking_id)
        if not booking:
            raise NotFoundError(f'Booking {booking_id} not found', resource='booking')
        if booking['user_id'] != current_user.id and not current_user.is_staff:
            raise ForbiddenError(MESSAGES['permission_denied'])

        return api_success([history_to_wire(h) for h in get_status_history(booking_id)])
