import os
import logging
import click
from logging.handlers import RotatingFileHandler
from flask import Flask, jsonify, request
from flask.logging import default_handler
from flask_wtf.csrf import CSRFError
from config import config
from extensions import db, csrf, limiter


JSON_PATH_PREFIXES = ('/api/', '/capture/', '/map/')


def configure_logging(app):
    """Configure application logging"""
    if not app.debug and not app.testing:
        log_dir = app.config.get('LOG_DIR', 'logs')
        if not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, app.config.get('LOG_FILE', 'land_value_map.log')),
            maxBytes=10240000,  # 10MB
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s '
            '[in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        # Service modules log through their own module loggers
        services_logger = logging.getLogger('services')
        services_logger.addHandler(file_handler)
        services_logger.setLevel(logging.INFO)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Land Value Map startup')
    else:
        # Development logging to console
        services_logger = logging.getLogger('services')
        services_logger.addHandler(default_handler)
        services_logger.setLevel(logging.DEBUG)
        app.logger.setLevel(logging.DEBUG)
        app.logger.info('Land Value Map startup (DEBUG mode)')


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # Configure logging
    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    csrf.init_app(app)
    limiter.init_app(app)

    # Add security headers
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses"""
        headers = app.config.get('SECURITY_HEADERS', {})
        for header, value in headers.items():
            response.headers[header] = value
        return response

    # Import models to ensure they're registered with SQLAlchemy
    with app.app_context():
        import models

    # Register blueprints
    from blueprints.map import map_bp
    from blueprints.capture import capture_bp

    app.register_blueprint(map_bp)
    app.register_blueprint(capture_bp)

    # Create the value_records table if it does not exist yet
    _ensure_sqlite_dir(app)
    from services.store_service import StoreService
    with app.app_context():
        StoreService.initialize()

    # Read-only records browser (must come after db.init_app and models)
    if app.config.get('ADMIN_PANEL_ENABLED'):
        from admin_panel import init_admin
        init_admin(app, db)
        csrf.exempt(app.blueprints['admin'])

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_commands(app)

    return app


def _ensure_sqlite_dir(app):
    """SQLite will not create missing parent directories for the database file."""
    uri = app.config['SQLALCHEMY_DATABASE_URI']
    if uri.startswith('sqlite:///') and uri != 'sqlite:///:memory:':
        directory = os.path.dirname(uri[len('sqlite:///'):])
        if directory and not os.path.exists(directory):
            os.makedirs(directory)


def _wants_json():
    return request.path.startswith(JSON_PATH_PREFIXES) or request.is_json


def register_error_handlers(app):
    """Register global error handlers"""

    @app.errorhandler(404)
    def not_found_error(error):
        from flask import render_template
        if _wants_json():
            return jsonify({'error': 'Not found'}), 404
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        from flask import render_template
        db.session.rollback()
        app.logger.error(f'Internal Server Error: {error}')
        if _wants_json():
            return jsonify({'error': 'Internal server error'}), 500
        return render_template('errors/500.html'), 500

    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        from flask import render_template
        if _wants_json():
            return jsonify({'error': error.description}), 400
        return render_template('errors/csrf.html', reason=error.description), 400


def _coordinate(value, width):
    return f'{value:>{width}.5f}' if value is not None else ' ' * width


def register_commands(app):
    """Register Flask CLI commands."""

    @app.cli.group()
    def records():
        """Inspect the stored land value records."""
        pass

    @records.command('init')
    def init_records():
        """Create the value_records table if it does not exist."""
        from services.store_service import StoreService
        StoreService.initialize()
        click.echo(f'Table ready. {StoreService.count()} record(s) stored.')

    @records.command('count')
    def count_records():
        """Print the number of stored records."""
        from services.store_service import StoreService
        click.echo(StoreService.count())

    @records.command('list')
    def list_records():
        """List all stored records."""
        from services.store_service import StoreService
        rows = StoreService.load_all()
        if not rows:
            click.echo('No records found.')
            return
        click.echo(f'{"ID":<38} {"Date":<11} {"Lat":>10} {"Lng":>11} {"Value":>14} {"Surface":>10}')
        click.echo('-' * 99)
        for r in rows:
            click.echo(
                f'{r.id:<38} {r.capture_date or "":<11} {_coordinate(r.latitude, 10)} {_coordinate(r.longitude, 11)} '
                f'{r.value if r.value is not None else "":>14} '
                f'{r.surface_area if r.surface_area is not None else "":>10}'
            )


if __name__ == '__main__':
    app = create_app()
    # SECURITY: Only bind to localhost in development
    # Never use 0.0.0.0 with debug mode - it exposes the debugger to the network
    app.run(host='127.0.0.1', port=5000, debug=True)
