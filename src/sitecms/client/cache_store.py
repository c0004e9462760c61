"""
Local cache store for section content.

Section content fetched from (or confirmed by) the content store is mirrored
here so renderers can keep showing the last known content when the store is
unreachable. Entries are JSON strings keyed ``cms_{page}_{section}``:

    {"data": {...}, "updatedAt": "2024-01-01T00:00:00.000Z"}

Two backends are provided:
- InMemoryCacheStore: dict-backed, process lifetime only
- SQLiteCacheStore: file-backed, survives restarts

Writes are single-key replacements; nothing spans multiple keys.
"""

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

KEY_PREFIX = 'cms_'
DEFAULT_DB_FILE = 'content_cache.db'


def cache_key(page: str, section: str) -> str:
    """Cache key for one ``(page, section)`` pair."""
    return f"{KEY_PREFIX}{page}_{section}"


def page_prefix(page: str) -> str:
    """Key prefix shared by every section of a page."""
    return f"{KEY_PREFIX}{page}_"


class CacheStore(ABC):
    """Key-value persistence used by the content coordinator."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return all stored keys."""


class InMemoryCacheStore(CacheStore):
    """Dict-backed cache store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<InMemoryCacheStore entries={len(self._items)}>"


class SQLiteCacheStore(CacheStore):
    """
    SQLite-backed cache store for content that must survive restarts.

    Thread-safe: uses a connection per thread via thread-local storage.
    """

    def __init__(self, db_path: str, db_file: str = DEFAULT_DB_FILE):
        """
        Initialize the store.

        Args:
            db_path: Directory holding the database, or a path ending in
                     ``.db`` to use as the database file directly
            db_file: Database file name when db_path is a directory
        """
        path = Path(db_path)
        if path.suffix == '.db':
            self.db_file = path
        else:
            self.db_file = path / db_file
        self.db_file.parent.mkdir(parents=True, exist_ok=True)
        self._local = threading.local()

        self._init_schema()
        logger.info("SQLiteCacheStore initialized: %s", self.db_file)

    def _get_conn(self) -> sqlite3.Connection:
        """Get a thread-local SQLite connection."""
        if not hasattr(self._local, "conn") or self._local.conn is None:
            self._local.conn = sqlite3.connect(
                str(self.db_file),
                timeout=10,
            )
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    def _init_schema(self) -> None:
        """Create the cache table if it doesn't exist."""
        conn = self._get_conn()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS cache_entries (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                stored_at TEXT NOT NULL
            )
        """)
        conn.commit()

    def get(self, key: str) -> Optional[str]:
        row = self._get_conn().execute(
            "SELECT value FROM cache_entries WHERE key = ?", (key,)
        ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO cache_entries (key, value, stored_at) VALUES (?, ?, ?)",
            (key, value, datetime.now(timezone.utc).isoformat()),
        )
        conn.commit()

    def delete(self, key: str) -> None:
        conn = self._get_conn()
        conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        conn.commit()

    def keys(self) -> List[str]:
        rows = self._get_conn().execute(
            "SELECT key FROM cache_entries ORDER BY key"
        ).fetchall()
        return [row[0] for row in rows]

    def close(self) -> None:
        """Close this thread's connection."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None

    def __repr__(self) -> str:
        return f"<SQLiteCacheStore file={self.db_file}>"


def read_entry(store: CacheStore, key: str) -> Optional[Dict[str, Any]]:
    """
    Read and decode a cached entry.

    Corrupt JSON and non-mapping values count as a miss.

    Args:
        store: Cache store to read from
        key: Cache key

    Returns:
        Entry dict with ``data`` and ``updatedAt``, or None
    """
    raw = store.get(key)
    if raw is None:
        return None

    try:
        entry = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.error(f"Error reading cache entry {key}: {e}")
        return None

    if not isinstance(entry, dict):
        logger.error(f"Error reading cache entry {key}: not an object")
        return None

    return entry


def write_entry(store: CacheStore, key: str, data: Any, updated_at: str) -> None:
    """Encode and store a cache entry, replacing any previous one."""
    store.set(key, json.dumps({'data': data, 'updatedAt': updated_at}))
