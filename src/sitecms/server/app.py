"""
Flask Application Factory for the Content Store Service.

This module provides the create_app() factory function that creates and
configures the Flask application. It initializes:
- SQLAlchemy database connection (SQLite by default)
- Database migrations (Flask-Migrate)
- Blueprint registration
- CORS headers for the public site and admin panel
- Error handlers
- Logging configuration

Usage:
    # Development
    sitecms serve

    # Production
    gunicorn -w 4 -b 0.0.0.0:8080 'sitecms.server.app:create_app()'
"""

import logging
import os
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate

from sitecms.client.timestamps import utc_now_iso
from sitecms.server.config import get_config
from sitecms.server.models import db

# Global migrate instance
migrate = Migrate()

CORS_ALLOWED_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
CORS_ALLOWED_HEADERS = [
    'Content-Type', 'Authorization', 'X-Requested-With', 'Accept', 'Origin', 'Cache-Control', 'Pragma',
]


def create_app(config_name: Optional[str] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name ('development', 'testing', 'production').
                    If None, reads from FLASK_ENV environment variable.

    Returns:
        Configured Flask application instance.
    """
    app = Flask(__name__)

    # Load configuration
    config_class = get_config(config_name)
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Create database tables
    with app.app_context():
        db.create_all()

    # Configure logging
    _configure_logging(app)

    # Register blueprints
    _register_blueprints(app)

    # Register CORS handling
    _register_cors(app)

    # Register error handlers
    _register_error_handlers(app)

    @app.route('/health')
    @app.route('/api/health')
    def health_check():
        """Health check endpoint for monitoring."""
        return jsonify({
            'success': True,
            'message': 'Server is running well',
            'timestamp': utc_now_iso(),
        })

    return app


def _configure_logging(app: Flask) -> None:
    """
    Configure application logging.

    Args:
        app: Flask application instance.
    """
    log_dir = os.path.join(str(app.config.get('BASE_DIR', os.getcwd())), 'logs')

    # Set up file handler if log path is writable
    if not app.config.get('TESTING'):
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(os.path.join(log_dir, 'sitecms.log'))
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            ))
            app.logger.addHandler(file_handler)
        except (OSError, PermissionError):
            # Log path not writable, skip file logging
            pass

    # Set application log level
    app.logger.setLevel(logging.INFO)


def _register_blueprints(app: Flask) -> None:
    """
    Register API blueprints with the application.

    Args:
        app: Flask application instance.
    """
    from sitecms.server.routes import admin_cms_bp
    app.register_blueprint(admin_cms_bp, url_prefix='/api/admin/cms')
    app.logger.info('Registered admin CMS blueprint at /api/admin/cms')


def _register_cors(app: Flask) -> None:
    """
    Configure CORS for the API endpoints.

    Args:
        app: Flask application instance.
    """
    CORS(
        app,
        resources={r'/api/*': {'origins': app.config.get('CORS_ORIGINS', ['*'])}},
        supports_credentials=True,
        methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
        max_age=86400,
    )


def _register_error_handlers(app: Flask) -> None:
    """
    Register error handlers for common HTTP errors.

    Args:
        app: Flask application instance.
    """
    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({
            'success': False,
            'error': 'Bad Request',
            'message': str(error.description) if hasattr(error, 'description') else 'Invalid request'
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Not Found',
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method Not Allowed',
            'message': 'The method is not allowed for the requested URL'
        }), 405

    @app.errorhandler(500)
    def internal_server_error(error):
        return jsonify({
            'success': False,
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred'
        }), 500
