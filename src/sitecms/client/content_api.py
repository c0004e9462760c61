"""
Content API Client - HTTP access to the section content store.

This module provides the ContentAPIClient class for all communication with
the content store's admin API (``/api/admin/cms``). It handles:
- Session pooling for efficient connection reuse
- Timeout handling with proper error types
- Translation of HTTP status codes into return values or exceptions

There is no automatic retry: a failed request fails once, and the caller
decides whether to fall back (reads) or report the failure (writes).

Example:
    from sitecms.client.content_api import ContentAPIClient

    client = ContentAPIClient('http://localhost:8080')
    body = client.get_section('about', 'hero')
    if body is None:
        print('no content yet')
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from requests.exceptions import (
    ConnectionError as RequestsConnectionError,
    RequestException,
    Timeout,
)

from sitecms.client import (
    CMSClientError,
    CMSConnectionError,
    CMSSaveError,
    CMSTimeoutError,
)


logger = logging.getLogger(__name__)


# Default configuration
DEFAULT_TIMEOUT = 30  # seconds
API_PREFIX = '/api/admin/cms'


class ContentAPIClient:
    """
    Client for the content store admin API.

    Attributes:
        base_url: Content store base URL (scheme, host and port)
        timeout: Request timeout in seconds
        session: Requests session for connection pooling
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the content API client.

        Args:
            base_url: Content store base URL (e.g., 'http://localhost:8080')
            timeout: Request timeout in seconds (default: 30)
            session: Optional preconfigured session
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

        if session is None:
            session = requests.Session()
            # Connection pooling only, no retries
            adapter = HTTPAdapter(
                max_retries=0,
                pool_connections=10,
                pool_maxsize=10,
            )
            session.mount('http://', adapter)
            session.mount('https://', adapter)
        self.session = session

        self.session.headers.update({
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'User-Agent': 'SiteCMS/1.0',
        })

        logger.info(f"Content API client initialized with base URL: {self.base_url}")

    def _build_url(self, *segments: str) -> str:
        """
        Build full URL from path segments under the API prefix.

        Args:
            segments: Path segments, quoted individually

        Returns:
            Full URL string
        """
        path = '/'.join(quote(str(s), safe='') for s in segments)
        if path:
            return f"{self.base_url}{API_PREFIX}/{path}"
        return f"{self.base_url}{API_PREFIX}"

    def _request(self, method: str, url: str, data: Any = None) -> requests.Response:
        """
        Send a request and convert transport errors into client exceptions.

        Raises:
            CMSTimeoutError: When the request times out
            CMSConnectionError: When the store cannot be reached
            CMSClientError: For other request errors
        """
        kwargs: Dict[str, Any] = {'timeout': self.timeout}
        if data is not None:
            kwargs['json'] = data

        try:
            return self.session.request(method, url, **kwargs)

        except Timeout as e:
            logger.error(f"Content API timeout for {method} {url}: {e}")
            raise CMSTimeoutError(
                message=f"Request timed out for {url}",
                details={'timeout': self.timeout},
            )

        except RequestsConnectionError as e:
            logger.error(f"Content API connection failed for {method} {url}: {e}")
            raise CMSConnectionError(
                message=f"Connection failed for {url}",
                details={'error': str(e)},
            )

        except RequestException as e:
            logger.error(f"Content API request error for {method} {url}: {e}")
            raise CMSClientError(
                message=f"Request error for {url}",
                details={'error': str(e)},
            )

    @staticmethod
    def _parse_json(response: requests.Response, url: str) -> Dict[str, Any]:
        """Decode a JSON object body or raise CMSClientError."""
        try:
            body = response.json()
        except ValueError:
            raise CMSClientError(
                message=f"Invalid JSON response from {url}",
                status_code=response.status_code,
                response_body=response.text,
            )
        if not isinstance(body, dict):
            raise CMSClientError(
                message=f"Unexpected response shape from {url}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return body

    def _check_ok(self, response: requests.Response, url: str) -> None:
        if not response.ok:
            logger.error(f"Content API request failed for {url}: {response.status_code}")
            raise CMSClientError(
                message=f"Request failed for {url}",
                status_code=response.status_code,
                response_body=response.text,
            )

    # -------------------------------------------------------------------------
    # Sections
    # -------------------------------------------------------------------------

    def get_section(self, page: str, section: str) -> Optional[Dict[str, Any]]:
        """
        Fetch one section.

        Args:
            page: Page identifier (e.g., 'about')
            section: Section identifier (e.g., 'hero')

        Returns:
            Response body ``{success, data, updatedAt}``, or None when the
            store has no content for the pair (404)

        Raises:
            CMSClientError: On transport failure or unexpected status
        """
        url = self._build_url('page', page, 'section', section)
        response = self._request('GET', url)

        if response.status_code == 404:
            return None

        self._check_ok(response, url)
        return self._parse_json(response, url)

    def save_section(self, page: str, section: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create or replace one section (upsert).

        Args:
            page: Page identifier
            section: Section identifier
            data: Section payload

        Returns:
            Response body ``{success, data, updatedAt, message}``

        Raises:
            CMSSaveError: When the store rejects the write
            CMSClientError: On transport failure
        """
        url = self._build_url('page', page, 'section', section)
        response = self._request('POST', url, data=data)

        if not response.ok:
            logger.error(f"Content save failed for {page}/{section}: {response.status_code}")
            raise CMSSaveError(
                message=f"Failed to save CMS data: {response.status_code} {response.reason or ''}".rstrip(),
                status_code=response.status_code,
                response_body=response.text,
            )

        body = self._parse_json(response, url)
        if not body.get('success'):
            raise CMSSaveError(
                message=body.get('message') or 'Failed to save CMS data',
                status_code=response.status_code,
                response_body=response.text,
            )

        return body

    def delete_section(self, page: str, section: str) -> bool:
        """
        Delete one section.

        Returns:
            True if deleted, False if the store had no such section

        Raises:
            CMSClientError: On transport failure or unexpected status
        """
        url = self._build_url('page', page, 'section', section)
        response = self._request('DELETE', url)

        if response.status_code == 404:
            return False

        self._check_ok(response, url)
        return True

    # -------------------------------------------------------------------------
    # Pages
    # -------------------------------------------------------------------------

    def get_page(self, page: str) -> Dict[str, Any]:
        """
        Fetch every section of a page.

        Returns:
            Mapping of section name to section data

        Raises:
            CMSClientError: On transport failure or unexpected status
        """
        url = self._build_url('page', page)
        response = self._request('GET', url)
        self._check_ok(response, url)

        body = self._parse_json(response, url)
        data = body.get('data') if body.get('success') else None
        return data if isinstance(data, dict) else {}

    def get_all(self) -> Dict[str, Dict[str, Any]]:
        """
        Fetch the full content overview.

        Returns:
            Nested mapping ``{page: {section: data}}``
        """
        url = self._build_url()
        response = self._request('GET', url)
        self._check_ok(response, url)

        body = self._parse_json(response, url)
        data = body.get('data') if body.get('success') else None
        return data if isinstance(data, dict) else {}

    def bulk_update(self, page: str, sections: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Upsert several sections of one page in a single request.

        Args:
            page: Page identifier
            sections: Mapping of section name to section data

        Returns:
            Per-section results ``[{section, created, data}, ...]``

        Raises:
            CMSSaveError: When the store rejects the write
            CMSClientError: On transport failure
        """
        url = self._build_url('page', page, 'bulk')
        response = self._request('POST', url, data=sections)

        if not response.ok:
            raise CMSSaveError(
                message=f"Bulk update failed for {page}: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )

        body = self._parse_json(response, url)
        if not body.get('success'):
            raise CMSSaveError(
                message=body.get('message') or f"Bulk update failed for {page}",
                status_code=response.status_code,
                response_body=response.text,
            )
        return body.get('data') or []

    def close(self) -> None:
        """Close the session and release resources."""
        self.session.close()
        logger.info("Content API client session closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close session."""
        self.close()
        return False
