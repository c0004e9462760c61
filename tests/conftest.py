"""
Pytest configuration and fixtures for sitecms tests.

This module provides shared fixtures for testing:
- Flask content store with an in-memory SQLite database
- Test client and database session
- Cache store, broadcaster and coordinator wired to a mock API client
- Mock HTTP responses
"""

import json
import os
import sys
from unittest.mock import MagicMock

import pytest

# Add src/ to path so the package imports without installation
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src'))

from sitecms.client import (  # noqa: E402
    ContentAPIClient,
    ContentCoordinator,
    InMemoryCacheStore,
    UpdateBroadcaster,
)
from sitecms.server.app import create_app  # noqa: E402
from sitecms.server.models import db, CmsContent  # noqa: E402


# =============================================================================
# Content store (server) fixtures
# =============================================================================


@pytest.fixture(scope='function')
def app():
    """
    Create a Flask application configured for testing.

    This fixture provides an isolated Flask app with:
    - In-memory SQLite database
    - Testing mode enabled
    - Clean database tables

    Yields:
        Flask application instance
    """
    application = create_app(config_name='testing')
    application.config['TESTING'] = True

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """
    Create a test client for the Flask application.

    Args:
        app: Flask application fixture

    Returns:
        Flask test client
    """
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """
    Provide a database session for testing.

    Args:
        app: Flask application fixture

    Yields:
        SQLAlchemy session
    """
    with app.app_context():
        yield db.session


@pytest.fixture(scope='function')
def sample_content(db_session):
    """
    Create a sample CmsContent record for testing.

    Args:
        db_session: Database session fixture

    Returns:
        CmsContent instance for about/hero
    """
    content, _ = CmsContent.upsert('about', 'hero', {
        'title': 'About Us',
        'subtitle': 'Engineering vertical-axis wind turbines',
    })
    db_session.commit()
    return content


@pytest.fixture(scope='function')
def sample_page(db_session):
    """
    Create several sections across two pages.

    Returns:
        List of CmsContent instances
    """
    rows = []
    for page, section, data in [
        ('home', 'hero', {'title': 'Clean Energy'}),
        ('home', 'stats', {'items': [{'label': 'Turbines', 'value': '120'}]}),
        ('about', 'partnership', {'partners': ['Acme Grid', 'North Wind']}),
    ]:
        content, _ = CmsContent.upsert(page, section, data)
        rows.append(content)
    db_session.commit()
    return rows


# =============================================================================
# Client fixtures
# =============================================================================


@pytest.fixture
def cache():
    """Empty in-memory cache store."""
    return InMemoryCacheStore()


@pytest.fixture
def broadcaster():
    """Fresh update broadcaster."""
    return UpdateBroadcaster()


@pytest.fixture
def mock_api():
    """Mock content API client with the real client's interface."""
    return MagicMock(spec=ContentAPIClient)


@pytest.fixture
def coordinator(mock_api, cache, broadcaster):
    """Coordinator wired to the mock API, in-memory cache and broadcaster."""
    return ContentCoordinator(mock_api, cache=cache, broadcaster=broadcaster)


class MockResponse:
    """Mock HTTP response for testing HTTP clients."""

    def __init__(self, json_data, status_code=200, text='', reason='OK'):
        self.json_data = json_data
        self.status_code = status_code
        self.text = text or json.dumps(json_data)
        self.reason = reason
        self.ok = 200 <= status_code < 300

    def json(self):
        if isinstance(self.json_data, Exception):
            raise self.json_data
        return self.json_data

    def raise_for_status(self):
        if not self.ok:
            from requests import HTTPError
            raise HTTPError(f'{self.status_code} Error')


@pytest.fixture(scope='function')
def mock_response_factory():
    """
    Factory fixture for creating mock HTTP responses.

    Returns:
        Function that creates MockResponse instances
    """
    def _create_response(json_data, status_code=200, text='', reason='OK'):
        return MockResponse(json_data, status_code, text, reason)
    return _create_response
