"""
Wire format for API responses.

Engine functions return snake_case dicts with stored timestamps
('YYYY-MM-DD HH:MM:SS'). The web client reads camelCase keys and ISO
timestamps; these helpers translate at the HTTP boundary.
"""


def to_camel(name: str) -> str:
    """snake_case -> camelCase."""
    head, *rest = name.split('_')
    return head + ''.join(part.capitalize() for part in rest)


def camelize_keys(data: dict) -> dict:
    """Rename the top-level keys of a dict to camelCase."""
    return {to_camel(key): value for key, value in data.items()}


def iso_timestamp(value):
    """Stored timestamp -> ISO 8601 ('T' separator). None stays None."""
    if value is None:
        return None
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value).replace(' ', 'T', 1)


def facility_to_wire(facility: dict) -> dict:
    return {
        'id': facility['id'],
        'name': facility['name'],
        'type': facility['category'],
        'building': facility.get('building'),
        'floor': facility.get('floor'),
        'capacity': facility.get('capacity'),
        'description': facility.get('description'),
        'active': bool(facility.get('active', 1)),
    }


def slot_to_wire(slot: dict) -> dict:
    return {
        'id': slot['id'],
        'facilityId': slot['facility_id'],
        'startTime': iso_timestamp(slot['start_time']),
        'endTime': iso_timestamp(slot['end_time']),
        'status': slot['status'],
    }


def booking_to_wire(booking: dict) -> dict:
    """Serialized booking (see models.booking.serialize_booking) -> client shape."""
    facility = booking['facility']
    slot = booking['slot']
    return {
        'id': booking['id'],
        'status': booking['status'],
        'purpose': booking['purpose'],
        'qrToken': booking['checkin_token'],
        'createdAt': iso_timestamp(booking['created_at']),
        'reviewedAt': iso_timestamp(booking['reviewed_at']),
        'approvedAt': iso_timestamp(booking['approved_at']),
        'cancelledAt': iso_timestamp(booking['cancelled_at']),
        'checkedInAt': iso_timestamp(booking['checked_in_at']),
        'userId': booking['user_id'],
        'facilityId': booking['facility_id'],
        'slotId': booking['slot_id'],
        'facility': {
            'id': facility['id'],
            'name': facility['name'],
            'type': facility['category'],
            'building': facility['building'],
            'floor': facility['floor'],
        },
        'slot': {
            'id': slot['id'],
            'startTime': iso_timestamp(slot['start_time']),
            'endTime': iso_timestamp(slot['end_time']),
            'status': slot['status'],
        },
        'user': dict(booking['user']),
    }


def history_to_wire(entry: dict) -> dict:
    return {
        'fromStatus': entry['from_status'],
        'toStatus': entry['to_status'],
        'changedBy': entry['changed_by'],
        'changedByName': entry['changed_by_name'],
        'notes': entry['notes'],
        'createdAt': iso_timestamp(entry['created_at']),
    }


def summary_to_wire(summary: dict) -> dict:
    return {
        'totalBookings': summary['total_bookings'],
        'totalApproved': summary['total_approved'],
        'totalCheckedIn': summary['total_checked_in'],
        'countsByStatus': summary['counts_by_status'],
        'byFacility': [
            {
                'facilityId': row['facility_id'],
                'facilityName': row['facility_name'],
                'count': row['count'],
            }
            for row in summary['counts_by_facility']
        ],
        'generatedAt': iso_timestamp(summary['generated_at']),
    }
