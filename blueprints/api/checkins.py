"""
Check-in route.
"""

from flask_login import login_required, current_user

from blueprints.api.serializers import booking_to_wire
from models.checkin import checkin_by_token
from models.user import ROLE_STAFF
from utils.api_response import api_success
from utils.decorators import role_required
from utils.errors import ValidationError
from utils.helpers import get_json_body, get_field


def register_routes(bp):
    """Register check-in routes on the blueprint."""

    @bp.route('/checkins/qr', methods=['POST'])
    @login_required
    @role_required(ROLE_STAFF)
    def checkins_qr():
        """Redeem a scanned token. Body: {qrToken} or {token}."""
        data = get_json_body()
        token = get_field(data, 'qrToken', 'token', 'qr_token', default='')
        if not isinstance(token, str):
            raise ValidationError('qrToken must be a string', field='qrToken')

        booking = checkin_by_token(token, current_user)
        return api_success(booking_to_wire(booking))
