"""
Content coordinator - the single entry point renderers and forms use.

Reads go remote first: the content store is the source of truth and the
local cache is only a fallback. Strategy for get_content():
1. Try the content store (unless skip_cache is set)
2. On a usable answer, refresh the cache and return it
3. On failure, 404 or empty data, return the cached entry if it has data
4. Otherwise return the caller's default

Writes go store -> cache -> broadcast, and only on a confirmed save.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sitecms.client import CMSError
from sitecms.client.broadcaster import ContentUpdate, Listener, Subscription, UpdateBroadcaster
from sitecms.client.cache_store import (
    KEY_PREFIX,
    CacheStore,
    InMemoryCacheStore,
    cache_key,
    page_prefix,
    read_entry,
    write_entry,
)
from sitecms.client.content_api import ContentAPIClient
from sitecms.client.timestamps import parse_timestamp, utc_now_iso

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentResult:
    """Section content with the timestamp it was last written."""

    data: Any
    updated_at: str

    def to_dict(self) -> dict:
        return {'data': self.data, 'updatedAt': self.updated_at}


def _has_data(data: Any) -> bool:
    """Non-empty mapping check used for both remote and cached data."""
    return isinstance(data, dict) and len(data) > 0


class ContentCoordinator:
    """
    Mediates between section consumers, the content store and the cache.

    Attributes:
        api: Content store client
        cache: Local cache store
        broadcaster: Update broadcaster notified after saves and deletes
    """

    def __init__(
        self,
        api: ContentAPIClient,
        cache: Optional[CacheStore] = None,
        broadcaster: Optional[UpdateBroadcaster] = None,
    ):
        self.api = api
        self.cache = cache if cache is not None else InMemoryCacheStore()
        self.broadcaster = broadcaster if broadcaster is not None else UpdateBroadcaster()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_content(
        self,
        page: str,
        section: str,
        skip_cache: bool = False,
        default_value: Any = None,
    ) -> ContentResult:
        """
        Get content for one section. Never raises.

        Args:
            page: Page identifier (e.g., 'about', 'home')
            section: Section identifier (e.g., 'hero', 'partnership')
            skip_cache: Skip the content store and read the cache directly
            default_value: Returned as data when nothing else is available

        Returns:
            ContentResult with data and updatedAt
        """
        key = cache_key(page, section)

        if not skip_cache:
            try:
                body = self.api.get_section(page, section)
            except CMSError as e:
                logger.error(f"Error fetching CMS data from API for {page}/{section}: {e}")
            else:
                if body is None:
                    logger.info(f"No CMS data in database for {page}/{section}")
                elif body.get('success') and _has_data(body.get('data')):
                    result = ContentResult(
                        data=body['data'],
                        updated_at=body.get('updatedAt') or utc_now_iso(),
                    )
                    self._write_cache(key, result)
                    return result

        entry = self._read_cache(key)
        if entry is not None and _has_data(entry.get('data')):
            return ContentResult(
                data=entry['data'],
                updated_at=entry.get('updatedAt') or utc_now_iso(),
            )

        return ContentResult(
            data=default_value if default_value is not None else {},
            updated_at=utc_now_iso(),
        )

    def get_page_content(self, page: str) -> Dict[str, Any]:
        """
        Get every section of a page as ``{section: data}``. Never raises.

        Falls back to the cached sections of the page when the content
        store cannot be reached.
        """
        try:
            return self.api.get_page(page)
        except CMSError as e:
            logger.error(f"Error loading CMS page {page} from API: {e}")

        prefix = page_prefix(page)
        sections: Dict[str, Any] = {}
        for key in self._cache_keys():
            if not key.startswith(prefix):
                continue
            entry = self._read_cache(key)
            if entry is not None and 'data' in entry:
                sections[key[len(prefix):]] = entry['data']
        return sections

    def is_stale(self, page: str, section: str, remote_updated_at: str) -> bool:
        """
        Check if the cached entry is older than a known remote timestamp.

        Args:
            page: Page identifier
            section: Section identifier
            remote_updated_at: updatedAt reported by the content store

        Returns:
            True if the cache entry is missing, has no usable timestamp,
            or is strictly older than remote_updated_at
        """
        entry = self._read_cache(cache_key(page, section))
        if entry is None or not entry.get('updatedAt'):
            return True

        cached_time = parse_timestamp(entry['updatedAt'])
        if cached_time is None:
            return True

        remote_time = parse_timestamp(remote_updated_at)
        if remote_time is None:
            return False

        return remote_time > cached_time

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def save_content(self, page: str, section: str, data: Dict[str, Any]) -> ContentResult:
        """
        Save section content, then mirror it to the cache and broadcast.

        Args:
            page: Page identifier
            section: Section identifier
            data: Section payload

        Returns:
            ContentResult as confirmed by the content store

        Raises:
            CMSError: If the save fails; cache and listeners are untouched
        """
        try:
            body = self.api.save_section(page, section, data)
        except CMSError as e:
            logger.error(f"Error saving CMS data for {page}/{section}: {e}")
            raise

        saved_data = body.get('data')
        result = ContentResult(
            data=saved_data if saved_data is not None else data,
            updated_at=body.get('updatedAt') or utc_now_iso(),
        )

        write_entry(self.cache, cache_key(page, section), result.data, result.updated_at)
        self.broadcaster.publish(ContentUpdate(
            page=page,
            section=section,
            data=result.data,
            updated_at=result.updated_at,
        ))
        logger.info(f"Saved CMS data for {page}/{section}")
        return result

    def delete_content(self, page: str, section: str) -> bool:
        """
        Delete a section from the store and drop its cache entry.

        Returns:
            True if the store deleted it, False if it did not exist

        Raises:
            CMSError: If the content store request fails
        """
        deleted = self.api.delete_section(page, section)
        self.cache.delete(cache_key(page, section))
        if deleted:
            self.broadcaster.publish(ContentUpdate(page=page, section=section))
            logger.info(f"Deleted CMS data for {page}/{section}")
        return deleted

    def clear_cache(self, page: Optional[str] = None, section: Optional[str] = None) -> int:
        """
        Clear cached content.

        Args:
            page: Limit to one page (None clears every page)
            section: Limit to one section of page

        Returns:
            Number of cache keys removed

        Raises:
            ValueError: If section is given without page
        """
        if section and not page:
            raise ValueError("clear_cache: section requires page")

        if page and section:
            key = cache_key(page, section)
            existed = self.cache.get(key) is not None
            self.cache.delete(key)
            return 1 if existed else 0

        prefix = page_prefix(page) if page else KEY_PREFIX
        removed = 0
        for key in self._cache_keys():
            if key.startswith(prefix):
                self.cache.delete(key)
                removed += 1
        return removed

    def subscribe(
        self,
        listener: Listener,
        page: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Subscription:
        """Register for update notifications (see UpdateBroadcaster.subscribe)."""
        return self.broadcaster.subscribe(listener, page=page, section=section)

    # -------------------------------------------------------------------------
    # Cache access
    # -------------------------------------------------------------------------

    def _read_cache(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return read_entry(self.cache, key)
        except Exception as e:
            logger.error(f"Error reading cache for {key}: {e}")
            return None

    def _write_cache(self, key: str, result: ContentResult) -> None:
        try:
            write_entry(self.cache, key, result.data, result.updated_at)
        except Exception as e:
            logger.error(f"Error writing cache for {key}: {e}")

    def _cache_keys(self):
        try:
            return self.cache.keys()
        except Exception as e:
            logger.error(f"Error listing cache keys: {e}")
            return []
