"""
Booking API routes package.
Split into smaller modules by component for maintainability.
"""

from flask import Blueprint, current_app, jsonify

# Create the API blueprint
api_bp = Blueprint('api', __name__)

# Import and register routes from submodules
from blueprints.api import facilities
from blueprints.api import bookings
from blueprints.api import admin
from blueprints.api import checkins
from blueprints.api import reports

# Register all route functions on the blueprint
facilities.register_routes(api_bp)
bookings.register_routes(api_bp)
admin.register_routes(api_bp)
checkins.register_routes(api_bp)
reports.register_routes(api_bp)


@api_bp.route('/health')
def health_check():
    """
    Health check endpoint (no authentication required).

    Returns:
        JSON with status and version
    """
    return jsonify({
        'status': 'ok',
        'version': current_app.config.get('APP_VERSION'),
        'app': current_app.config.get('APP_NAME')
    })
