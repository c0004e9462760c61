"""
In-process content update notifications.

After a successful save the coordinator publishes a ``cmsUpdate``
notification. Every listener registered at that moment whose filter matches
the update's ``(page, section)`` is called synchronously, in subscription
order. Listeners that are not registered miss the update; they are expected
to re-read their section on their own schedule.

Example:
    broadcaster = UpdateBroadcaster()
    sub = broadcaster.subscribe(on_hero_change, page='home', section='hero')
    ...
    sub.unsubscribe()
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

EVENT_NAME = 'cmsUpdate'


@dataclass(frozen=True)
class ContentUpdate:
    """Payload of a ``cmsUpdate`` notification."""

    page: str
    section: str
    data: Any = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Event detail in wire form."""
        return {
            'page': self.page,
            'section': self.section,
            'data': self.data,
            'updatedAt': self.updated_at,
        }


Listener = Callable[[ContentUpdate], None]


class Subscription:
    """Handle returned by subscribe(); call unsubscribe() on teardown."""

    def __init__(
        self,
        broadcaster: 'UpdateBroadcaster',
        listener: Listener,
        page: Optional[str] = None,
        section: Optional[str] = None,
    ):
        self._broadcaster = broadcaster
        self.listener = listener
        self.page = page
        self.section = section
        self.active = True

    def matches(self, update: ContentUpdate) -> bool:
        """Check whether the update is for the page/section this listener watches."""
        if self.page is not None and self.page != update.page:
            return False
        if self.section is not None and self.section != update.section:
            return False
        return True

    def unsubscribe(self) -> None:
        """Stop receiving updates. Safe to call more than once."""
        if self.active:
            self.active = False
            self._broadcaster._remove(self)

    def __enter__(self) -> 'Subscription':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        return f"<Subscription page={self.page} section={self.section} active={self.active}>"


class UpdateBroadcaster:
    """Observer registry for content update notifications."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        listener: Listener,
        page: Optional[str] = None,
        section: Optional[str] = None,
    ) -> Subscription:
        """
        Register a listener.

        Args:
            listener: Called with each matching ContentUpdate
            page: Only deliver updates for this page (None for any)
            section: Only deliver updates for this section (None for any)

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, listener, page=page, section=section)
        with self._lock:
            self._subscriptions.append(subscription)
        logger.debug(f"Listener subscribed for {page or '*'}/{section or '*'}")
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, update: ContentUpdate) -> int:
        """
        Deliver an update to every matching listener.

        A listener that raises is logged and skipped; delivery to the
        remaining listeners continues.

        Args:
            update: The update to deliver

        Returns:
            Number of listeners the update was delivered to
        """
        with self._lock:
            snapshot = list(self._subscriptions)

        delivered = 0
        for subscription in snapshot:
            if not subscription.active or not subscription.matches(update):
                continue
            try:
                subscription.listener(update)
            except Exception:
                logger.exception(
                    f"{EVENT_NAME} listener failed for {update.page}/{update.section}"
                )
                continue
            delivered += 1

        logger.debug(f"{EVENT_NAME} {update.page}/{update.section} delivered to {delivered} listener(s)")
        return delivered

    @property
    def listener_count(self) -> int:
        """Number of registered listeners."""
        with self._lock:
            return len(self._subscriptions)
