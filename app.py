"""
Facility Booking - shared facility reservation service
Flask application factory and initialization
"""

import os
import sqlite3
import click
import logging
from flask import Flask, g
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager

# Import database functions
from database import close_db, init_db

from blueprints.api.serializers import camelize_keys
from utils.api_response import api_error
from utils.errors import BookingError
from utils.messages import MESSAGES


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    config_class = config.get(config_name, config['default'])
    if config_name == 'production':
        config_class.validate()

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.api import api_bp

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(api_bp)


def register_error_handlers(app):
    """Register error handlers."""

    @app.errorhandler(BookingError)
    def booking_error(error):
        """Map engine failures to their HTTP status."""
        if error.status_code >= 500:
            app.logger.error('%s: %s', error.code, error.message)
        else:
            app.logger.debug('%s: %s', error.code, error.message)
        return api_error(error.message, status=error.status_code,
                         **camelize_keys(error.to_dict()))

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(MESSAGES['not_found'], status=404, code='NotFound')

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error(MESSAGES['method_not_allowed'], status=405, code='MethodNotAllowed')

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        return api_error(MESSAGES['internal_error'], status=500, code='InternalError')


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('email')
    @click.argument('name')
    @click.option('--staff', is_flag=True, help='Create a STAFF identity instead of a MEMBER.')
    @click.password_option()
    def create_user_command(email, name, staff, password):
        """Create a new user."""
        from models.user import create_user, ROLE_MEMBER, ROLE_STAFF

        with app.app_context():
            try:
                user_id = create_user(
                    name=name,
                    email=email,
                    password=password,
                    role=ROLE_STAFF if staff else ROLE_MEMBER
                )
                click.echo(f'User created successfully! ID: {user_id}')
            except (sqlite3.IntegrityError, ValueError) as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('generate-slots')
    @click.argument('facility_id', type=int)
    @click.argument('day')
    @click.option('--open-hour', default=8, show_default=True, type=int)
    @click.option('--close-hour', default=20, show_default=True, type=int)
    @click.option('--duration', default=60, show_default=True, type=int,
                  help='Slot length in minutes.')
    def generate_slots_command(facility_id, day, open_hour, close_hour, duration):
        """Create the slots of one day for a facility."""
        from models.slot import generate_slots

        with app.app_context():
            try:
                slots = generate_slots(facility_id, day, open_hour, close_hour, duration)
            except BookingError as e:
                click.echo(f'Error generating slots: {e.message}', err=True)
                return
        click.echo(f'{len(slots)} slots created for facility {facility_id} on {day}')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/facility_booking.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Engine modules log through module-level loggers
        for name in ('models', 'utils'):
            module_logger = logging.getLogger(name)
            module_logger.addHandler(file_handler)
            module_logger.setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Facility Booking startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', debug=True)
