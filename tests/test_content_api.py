"""
Content API Client Tests

Tests for ContentAPIClient with the session's request method mocked,
covering URL construction, status handling and error translation.
"""

from unittest.mock import patch

import pytest
import requests

from sitecms.client import (
    CMSClientError,
    CMSConnectionError,
    CMSSaveError,
    CMSTimeoutError,
)
from sitecms.client.content_api import ContentAPIClient


BASE_URL = 'http://test-cms:8080'


@pytest.fixture
def api():
    """Client pointed at a fake host."""
    client = ContentAPIClient(BASE_URL, timeout=5)
    yield client
    client.close()


@pytest.fixture
def mock_request(api):
    """Patch the session's request method."""
    with patch.object(api.session, 'request') as mocked:
        yield mocked


# =============================================================================
# Construction
# =============================================================================


class TestClientSetup:
    """Tests for client initialization."""

    def test_strips_trailing_slash(self):
        client = ContentAPIClient('http://test-cms:8080/')
        assert client.base_url == BASE_URL

    def test_json_headers(self, api):
        assert api.session.headers['Content-Type'] == 'application/json'
        assert api.session.headers['Accept'] == 'application/json'

    def test_section_url(self, api):
        assert api._build_url('page', 'about', 'section', 'hero') == \
            f'{BASE_URL}/api/admin/cms/page/about/section/hero'

    def test_segments_are_quoted(self, api):
        assert api._build_url('page', 'investor relations') == \
            f'{BASE_URL}/api/admin/cms/page/investor%20relations'

    def test_root_url(self, api):
        assert api._build_url() == f'{BASE_URL}/api/admin/cms'


# =============================================================================
# get_section
# =============================================================================


class TestGetSection:
    """Tests for GET /page/<page>/section/<section>."""

    def test_success_returns_body(self, api, mock_request, mock_response_factory):
        body = {'success': True, 'data': {'title': 'About'}, 'updatedAt': '2024-01-01T00:00:00Z'}
        mock_request.return_value = mock_response_factory(body)

        assert api.get_section('about', 'hero') == body
        mock_request.assert_called_once_with(
            'GET', f'{BASE_URL}/api/admin/cms/page/about/section/hero', timeout=5
        )

    def test_not_found_returns_none(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': False}, status_code=404)
        assert api.get_section('about', 'hero') is None

    def test_server_error_raises(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': False}, status_code=500)

        with pytest.raises(CMSClientError) as exc_info:
            api.get_section('about', 'hero')
        assert exc_info.value.status_code == 500

    def test_invalid_json_raises(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory(ValueError('bad json'), text='<html>')

        with pytest.raises(CMSClientError):
            api.get_section('about', 'hero')

    def test_timeout(self, api, mock_request):
        mock_request.side_effect = requests.exceptions.Timeout('slow')

        with pytest.raises(CMSTimeoutError) as exc_info:
            api.get_section('about', 'hero')
        assert exc_info.value.details == {'timeout': 5}

    def test_connection_error(self, api, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError('refused')

        with pytest.raises(CMSConnectionError):
            api.get_section('about', 'hero')

    def test_other_request_error(self, api, mock_request):
        mock_request.side_effect = requests.exceptions.RequestException('odd')

        with pytest.raises(CMSClientError):
            api.get_section('about', 'hero')


# =============================================================================
# save_section
# =============================================================================


class TestSaveSection:
    """Tests for POST /page/<page>/section/<section>."""

    def test_posts_json(self, api, mock_request, mock_response_factory):
        body = {'success': True, 'data': {'title': 'X'}, 'updatedAt': '2024-01-01T00:00:00Z'}
        mock_request.return_value = mock_response_factory(body, status_code=201)

        assert api.save_section('home', 'hero', {'title': 'X'}) == body
        mock_request.assert_called_once_with(
            'POST', f'{BASE_URL}/api/admin/cms/page/home/section/hero',
            timeout=5, json={'title': 'X'},
        )

    def test_non_2xx_raises_save_error(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory(
            {'success': False}, status_code=500, reason='Internal Server Error'
        )

        with pytest.raises(CMSSaveError) as exc_info:
            api.save_section('home', 'hero', {'title': 'X'})
        assert exc_info.value.status_code == 500
        assert '500 Internal Server Error' in exc_info.value.message

    def test_success_false_raises_with_server_message(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': False, 'message': 'Nope'})

        with pytest.raises(CMSSaveError) as exc_info:
            api.save_section('home', 'hero', {'title': 'X'})
        assert exc_info.value.message == 'Nope'

    def test_connection_error_propagates(self, api, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError('refused')

        with pytest.raises(CMSConnectionError):
            api.save_section('home', 'hero', {'title': 'X'})


# =============================================================================
# Pages, overview, delete, bulk
# =============================================================================


class TestPageAndOverview:
    """Tests for page, overview, delete and bulk endpoints."""

    def test_get_page_returns_sections(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({
            'success': True, 'message': 'OK', 'data': {'hero': {'title': 'A'}},
        })
        assert api.get_page('home') == {'hero': {'title': 'A'}}

    def test_get_page_without_data(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': True, 'message': 'OK'})
        assert api.get_page('home') == {}

    def test_get_all(self, api, mock_request, mock_response_factory):
        overview = {'home': {'hero': {'title': 'A'}}, 'about': {'hero': {'title': 'B'}}}
        mock_request.return_value = mock_response_factory({'success': True, 'data': overview})

        assert api.get_all() == overview
        assert mock_request.call_args[0] == ('GET', f'{BASE_URL}/api/admin/cms')

    def test_delete_section(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': True, 'message': 'Deleted'})
        assert api.delete_section('home', 'hero') is True
        assert mock_request.call_args[0][0] == 'DELETE'

    def test_delete_missing_section(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': False}, status_code=404)
        assert api.delete_section('home', 'hero') is False

    def test_bulk_update(self, api, mock_request, mock_response_factory):
        results = [{'section': 'hero', 'created': True, 'data': {'title': 'A'}}]
        mock_request.return_value = mock_response_factory({'success': True, 'data': results})

        assert api.bulk_update('home', {'hero': {'title': 'A'}}) == results
        assert mock_request.call_args[0][1] == f'{BASE_URL}/api/admin/cms/page/home/bulk'

    def test_bulk_update_rejected(self, api, mock_request, mock_response_factory):
        mock_request.return_value = mock_response_factory({'success': False}, status_code=400)

        with pytest.raises(CMSSaveError):
            api.bulk_update('home', {'hero': {}})
