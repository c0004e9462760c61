"""
Content Store Configuration Module

Configuration settings for database, CORS and server.
All sensitive values are loaded from environment variables.
"""

import os
from pathlib import Path


class Config:
    """Base configuration class with default settings."""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Base Directory
    BASE_DIR = Path(os.environ.get('SITECMS_BASE_DIR', Path.cwd())).resolve()

    # Database Settings (SQLite by default)
    DATABASE_PATH = Path(os.environ.get('SITECMS_DATABASE_PATH', BASE_DIR / 'data' / 'sitecms.db'))
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{DATABASE_PATH}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Request bodies are section JSON; keep them small
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024

    # CORS: comma-separated origins, '*' echoes the request origin
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('CORS_ORIGINS', '*').split(',')
        if origin.strip()
    ]

    # Server Settings
    PORT = int(os.environ.get('SITECMS_PORT', 8080))
    HOST = os.environ.get('SITECMS_HOST', '0.0.0.0')

    @classmethod
    def init_app(cls, app):
        """Initialize application with this configuration."""
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
            cls.DATABASE_PATH.parent.mkdir(parents=True, exist_ok=True)


class DevelopmentConfig(Config):
    """Development configuration with debug enabled."""

    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration with an in-memory database."""

    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    @classmethod
    def init_app(cls, app):
        """Nothing to create on disk for tests."""
        pass


class ProductionConfig(Config):
    """Production configuration with strict security settings."""

    DEBUG = False
    TESTING = False

    @classmethod
    def init_app(cls, app):
        """Production-specific initialization."""
        Config.init_app(app)

        # Verify required environment variables are set
        required_vars = [
            'SECRET_KEY',
        ]
        missing = [var for var in required_vars if not os.environ.get(var)]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


# Configuration mapping by environment name
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}


def get_config(env_name=None):
    """Get configuration class by environment name.

    Args:
        env_name: Environment name ('development', 'testing', 'production').
                  If None, reads from FLASK_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env_name is None:
        env_name = os.environ.get('FLASK_ENV', 'development')
    return config.get(env_name, config['default'])
