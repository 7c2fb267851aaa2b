"""
Facility catalog and slot availability routes.
"""

from flask import request
from flask_login import login_required

from blueprints.api.serializers import facility_to_wire, slot_to_wire
from models.facility import FACILITY_CATEGORIES, get_all_facilities, get_facility_by_id
from models.slot import list_available_slots, list_slots
from utils.api_response import api_success
from utils.errors import NotFoundError, ValidationError


def register_routes(bp):
    """Register facility routes on the blueprint."""

    @bp.route('/facilities')
    @login_required
    def facilities_list():
        """List active facilities, optionally filtered by category (?category= or ?type=)."""
        category = request.args.get('category') or request.args.get('type')
        if category and category not in FACILITY_CATEGORIES:
            raise ValidationError(f'Unknown category: {category}', field='category')

        facilities = get_all_facilities(category=category)
        return api_success([facility_to_wire(f) for f in facilities])

    @bp.route('/facilities/<int:facility_id>')
    @login_required
    def facility_detail(facility_id):
        """Get a single facility."""
        facility = get_facility_by_id(facility_id)
        if not facility:
            raise NotFoundError(f'Facility {facility_id} not found', resource='facility')
        return api_success(facility_to_wire(facility))

    @bp.route('/facilities/<int:facility_id>/slots')
    @login_required
    def facility_slots(facility_id):
        """
        List slots of a facility.

        Query params:
            date: Only slots starting on this day (YYYY-MM-DD, optional)
            all: '1' to include BOOKED and past slots (default: bookable only)
        """
        date_filter = request.args.get('date')
        include_booked = request.args.get('all', '0').lower() in ('1', 'true')

        if include_booked:
            slots = list_slots(facility_id, date_filter)
        else:
            slots = list_available_slots(facility_id, date_filter)

        return api_success([slot_to_wire(s) for s in slots])
