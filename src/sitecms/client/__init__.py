"""
Client side of the site content system.

This package provides:
- Local cache store (persistent key-value cache of section content)
- Content API client (HTTP access to the content store)
- Update broadcaster (in-process change notifications)
- Content coordinator (remote first, cache fallback, default last)
- Section binding used by renderers and admin forms

Base exception classes are defined here for consistent error handling
across the client modules.

Example:
    from sitecms.client import CMSError, ContentCoordinator, ContentAPIClient

    coordinator = ContentCoordinator(ContentAPIClient('http://localhost:8080'))
    try:
        coordinator.save_content('home', 'hero', {'title': 'Wind'})
    except CMSError as e:
        logger.error(f"Failed to save changes: {e}")
"""


class CMSError(Exception):
    """
    Base exception for all content client errors.

    All client-specific exceptions inherit from this class so the
    read path can absorb any of them with a single except clause.
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class CMSClientError(CMSError):
    """
    Exception raised when communication with the content store fails.

    This includes network errors, timeouts, unexpected HTTP
    status codes and undecodable response bodies.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.response_body = response_body


class CMSTimeoutError(CMSClientError):
    """
    Exception raised when a content store request times out.
    """

    pass


class CMSConnectionError(CMSClientError):
    """
    Exception raised when the content store cannot be reached.

    This indicates network-level failures such as DNS resolution
    failures or connection refused.
    """

    pass


class CMSSaveError(CMSClientError):
    """
    Exception raised when the content store rejects a write.

    Raised for non-2xx responses to a save and for 2xx responses
    whose body reports ``success: false``.
    """

    pass


from sitecms.client.broadcaster import ContentUpdate, Subscription, UpdateBroadcaster  # noqa: E402
from sitecms.client.cache_store import (  # noqa: E402
    CacheStore,
    InMemoryCacheStore,
    SQLiteCacheStore,
    cache_key,
)
from sitecms.client.content_api import ContentAPIClient  # noqa: E402
from sitecms.client.coordinator import ContentCoordinator, ContentResult  # noqa: E402
from sitecms.client.section import SectionContent  # noqa: E402

__all__ = [
    # Exception classes
    'CMSError',
    'CMSClientError',
    'CMSTimeoutError',
    'CMSConnectionError',
    'CMSSaveError',
    # Client classes
    'CacheStore',
    'InMemoryCacheStore',
    'SQLiteCacheStore',
    'cache_key',
    'ContentAPIClient',
    'ContentUpdate',
    'Subscription',
    'UpdateBroadcaster',
    'ContentCoordinator',
    'ContentResult',
    'SectionContent',
]
