"""
Staff approval routes.
"""

from flask_login import login_required, current_user

from blueprints.api.serializers import booking_to_wire
from models.approval import list_pending_bookings, approve_booking, reject_booking
from models.user import ROLE_STAFF
from utils.api_response import api_success
from utils.decorators import role_required


def register_routes(bp):
    """Register approval routes on the blueprint."""

    @bp.route('/admin/bookings/pending')
    @login_required
    @role_required(ROLE_STAFF)
    def admin_pending():
        """Review queue, oldest request first."""
        bookings = list_pending_bookings(current_user)
        return api_success([booking_to_wire(b) for b in bookings])

    @bp.route('/admin/bookings/<int:booking_id>/approve', methods=['PUT'])
    @login_required
    @role_required(ROLE_STAFF)
    def admin_approve(booking_id):
        """Approve a pending booking; the response carries the check-in token."""
        booking = approve_booking(booking_id, current_user)
        return api_success(booking_to_wire(booking))

    @bp.route('/admin/bookings/<int:booking_id>/reject', methods=['PUT'])
    @login_required
    @role_required(ROLE_STAFF)
    def admin_reject(booking_id):
        """Reject a pending booking."""
        booking = reject_booking(booking_id, current_user)
        return api_success(booking_to_wire(booking))
