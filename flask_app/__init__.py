"""
Flask application factory.
"""
import logging
from datetime import datetime, timezone

from flask import Flask

from autoservice.timezone_utils import (
    CIVIL_TIMEZONE_NAME,
    current_date,
    format_civil_date,
    format_civil_time,
    week_start,
)

CONFIG_OBJECTS = {
    'development': 'flask_app.config.DevelopmentConfig',
    'production': 'flask_app.config.ProductionConfig',
    'testing': 'flask_app.config.TestingConfig',
}


def create_app(config_name='development'):
    """Create and configure the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_object(CONFIG_OBJECTS.get(config_name, CONFIG_OBJECTS['development']))
    app.logger.setLevel(getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO))

    # Register custom Jinja filters
    @app.template_filter('civil_date')
    def civil_date(value):
        """Convert a Unix timestamp or datetime to a YYYY-MM-DD civil date."""
        if value is None:
            return 'Never'
        try:
            return format_civil_date(_as_datetime(value))
        except (ValueError, TypeError, OSError, OverflowError):
            return 'Unknown'

    @app.template_filter('civil_time')
    def civil_time(value):
        """Convert a Unix timestamp or datetime to an HH:MM:SS civil time."""
        if value is None:
            return 'Unknown'
        try:
            return format_civil_time(_as_datetime(value))
        except (ValueError, TypeError, OSError, OverflowError):
            return 'Unknown'

    @app.context_processor
    def inject_civil_calendar():
        """Expose the civil timezone name, today and week start to templates."""
        return {
            'timezone_name': CIVIL_TIMEZONE_NAME,
            'today': current_date(),
            'week_start': week_start(),
        }

    # Register blueprints
    from flask_app.routes.main import main_bp
    from flask_app.routes.guard import guard_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(guard_bp, url_prefix='/guard')

    app.logger.debug("Application created (config=%s, timezone=%s)", config_name, CIVIL_TIMEZONE_NAME)
    return app


def _as_datetime(value):
    """Accept a datetime or a Unix timestamp (int, float or digit string)."""
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(int(value), tz=timezone.utc)
