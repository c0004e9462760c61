"""
CmsContent database model for section content.

Each row holds the JSON data of one section of one page of the site:
- Identity: page, section (unique together)
- Payload: data (free-form JSON object, shape owned by the renderer)
- Timestamps: created_at, updated_at (used by clients for cache freshness)

Writes are upserts: the first save of a pair creates the row, later saves
overwrite ``data``. There is no versioning; the last writer wins.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sitecms.client.timestamps import format_timestamp
from sitecms.server.models import db, DateTimeUTC


def _utcnow():
    return datetime.now(timezone.utc)


class CmsContent(db.Model):
    """
    Database model for one section's content.

    Attributes:
        id: Primary key
        page: Page identifier (home, about, products, technology, ...)
        section: Section identifier (hero, stats, differentiators, ...)
        data: JSON data for the section
        created_at: When the section was first saved
        updated_at: When the section was last saved
    """
    __tablename__ = 'cms_content'
    __table_args__ = (
        db.UniqueConstraint('page', 'section', name='unique_page_section'),
    )

    id = db.Column(db.Integer, primary_key=True)
    page = db.Column(db.String(100), nullable=False, index=True)
    section = db.Column(db.String(100), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(DateTimeUTC, nullable=False, default=_utcnow)
    updated_at = db.Column(DateTimeUTC, nullable=False, default=_utcnow)

    @property
    def updated_at_iso(self) -> str:
        """updatedAt as sent to clients."""
        return format_timestamp(self.updated_at or _utcnow())

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize model to dictionary for JSON responses.

        Returns:
            dict: Section identity, data and timestamps
        """
        return {
            'id': self.id,
            'page': self.page,
            'section': self.section,
            'data': self.data,
            'createdAt': format_timestamp(self.created_at) if self.created_at else None,
            'updatedAt': self.updated_at_iso,
        }

    @classmethod
    def get_section(cls, page: str, section: str) -> Optional['CmsContent']:
        """Find the row for a (page, section) pair."""
        return cls.query.filter_by(page=page, section=section).first()

    @classmethod
    def for_page(cls, page: str) -> List['CmsContent']:
        """All sections of a page, ordered by section name."""
        return cls.query.filter_by(page=page).order_by(cls.section.asc()).all()

    @classmethod
    def all_ordered(cls) -> List['CmsContent']:
        """Every section, ordered by page then section."""
        return cls.query.order_by(cls.page.asc(), cls.section.asc()).all()

    @classmethod
    def upsert(cls, page: str, section: str, data: Dict[str, Any]) -> Tuple['CmsContent', bool]:
        """
        Create the row for a pair or overwrite its data.

        The caller commits.

        Args:
            page: Page identifier
            section: Section identifier
            data: New section data

        Returns:
            tuple: (CmsContent instance, bool created)
        """
        now = _utcnow()
        content = cls.get_section(page, section)
        if content:
            content.data = data
            content.updated_at = now
            return content, False

        content = cls(page=page, section=section, data=data, created_at=now, updated_at=now)
        db.session.add(content)
        return content, True

    @staticmethod
    def grouped(contents: Iterable['CmsContent']) -> Dict[str, Dict[str, Any]]:
        """Group rows as ``{page: {section: data}}``."""
        result: Dict[str, Dict[str, Any]] = {}
        for content in contents:
            result.setdefault(content.page, {})[content.section] = content.data
        return result

    def __repr__(self):
        """String representation."""
        return f"<CmsContent {self.page}/{self.section}>"
