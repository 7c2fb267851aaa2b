"""
Reporting routes.
"""

from flask_login import login_required

from blueprints.api.serializers import summary_to_wire
from models.reports import summarize_bookings
from models.user import ROLE_STAFF
from utils.api_response import api_success
from utils.decorators import role_required


def register_routes(bp):
    """Register report routes on the blueprint."""

    @bp.route('/reports/summary')
    @login_required
    @role_required(ROLE_STAFF)
    def reports_summary():
        """Booking totals and per-facility counts."""
        return api_success(summary_to_wire(summarize_bookings()))
