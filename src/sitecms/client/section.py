"""
Section binding for renderers and admin forms.

SectionContent holds the state one consumer needs for one
``(page, section)``: current data, loading flag, last error and
timestamp. It starts out showing the defaults, loads through the
coordinator, and follows ``cmsUpdate`` notifications for its own section
until closed.

Example:
    with SectionContent(coordinator, 'home', 'hero',
                        default_value={'title': 'Clean Energy'}) as hero:
        render(hero.data)
        hero.save({'title': 'Cleaner Energy'})
"""

import logging
from typing import Any, Callable, Dict, Optional

from sitecms.client.broadcaster import ContentUpdate
from sitecms.client.coordinator import ContentCoordinator

logger = logging.getLogger(__name__)


class SectionContent:
    """
    Live view of one section's content.

    Attributes:
        page: Page identifier
        section: Section identifier
        data: Current section data (defaults until the first load)
        loading: True while a load or save is in progress
        error: Last load/save error, or None
        updated_at: Timestamp of the current data, or None before a load
    """

    def __init__(
        self,
        coordinator: ContentCoordinator,
        page: str,
        section: str,
        default_value: Any = None,
        auto_fetch: bool = True,
        on_update: Optional[Callable[[Any], None]] = None,
    ):
        """
        Bind to a section.

        Args:
            coordinator: Coordinator used for reads and writes
            page: Page identifier
            section: Section identifier
            default_value: Data shown before and instead of stored content
            auto_fetch: Load immediately
            on_update: Called with the new data after every change
        """
        self.coordinator = coordinator
        self.page = page
        self.section = section
        self.default_value = default_value
        self.on_update = on_update

        self.data: Any = default_value
        self.loading = auto_fetch
        self.error: Optional[Exception] = None
        self.updated_at: Optional[str] = None

        self._subscription = coordinator.subscribe(self._handle_update, page=page, section=section)

        if auto_fetch:
            self.load()

    @property
    def closed(self) -> bool:
        """True once close() has been called."""
        return not self._subscription.active

    def _merge_defaults(self, data: Any) -> Any:
        """Overlay loaded data on the defaults so every default field is present."""
        if isinstance(self.default_value, dict) and isinstance(data, dict):
            return {**self.default_value, **data}
        return data

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self.data)

    def load(self, skip_cache: bool = False) -> Any:
        """
        Load the section through the coordinator.

        Args:
            skip_cache: Read the cache without contacting the content store

        Returns:
            The merged section data
        """
        self.loading = True
        result = self.coordinator.get_content(
            self.page,
            self.section,
            skip_cache=skip_cache,
            default_value=self.default_value,
        )
        self.data = self._merge_defaults(result.data)
        self.updated_at = result.updated_at
        self.error = None
        self.loading = False
        self._notify()
        return self.data

    def refresh(self) -> Any:
        """Re-read the section from the content store."""
        return self.load(skip_cache=False)

    def save(self, changes: Dict[str, Any]) -> Any:
        """
        Merge changes into the current data and save the result.

        Args:
            changes: Fields to overwrite

        Returns:
            Section data as confirmed by the content store

        Raises:
            CMSError: If the save fails (also stored in ``error``)
        """
        self.loading = True
        self.error = None
        current = self.data if isinstance(self.data, dict) else {}
        updated = {**current, **changes}

        try:
            result = self.coordinator.save_content(self.page, self.section, updated)
        except Exception as e:
            self.error = e
            self.loading = False
            raise

        # The broadcast from save_content has normally applied this already
        self.data = result.data
        self.updated_at = result.updated_at
        self.loading = False
        return self.data

    def _handle_update(self, update: ContentUpdate) -> None:
        """Apply a cmsUpdate notification for this section."""
        if self.closed:
            return
        if update.page != self.page or update.section != self.section:
            return

        logger.debug(f"Applying cmsUpdate for {self.page}/{self.section}")
        if update.data is None:
            self.data = self.default_value
        else:
            self.data = update.data
        self.updated_at = update.updated_at
        self._notify()

    def close(self) -> None:
        """Stop following updates."""
        self._subscription.unsubscribe()

    def __enter__(self) -> 'SectionContent':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<SectionContent {self.page}/{self.section} loading={self.loading}>"
