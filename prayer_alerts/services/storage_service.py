"""
Key-value persistence for settings and armed alert handles.

Backed by the `key_values` table when DATABASE_URL is configured,
otherwise by an in-process dict.
"""
import logging
import threading
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from prayer_alerts.models.kv import StoredValue

logger = logging.getLogger(__name__)

SETTINGS_KEY = "prayerNotificationSettings"
ARMED_KEY = "prayerTimerIds"


class PersistenceError(RuntimeError):
    """Raised when the storage backend fails to read or write."""


class KeyValueStore:
    """Interface: bytes in, bytes out."""

    def get(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def set(self, key: str, value: bytes) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)


class SqlKeyValueStore(KeyValueStore):
    """Stores blobs in the `key_values` table."""

    def __init__(self, session_factory):
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[bytes]:
        db = self._session_factory()
        try:
            row = db.get(StoredValue, key)
            return bytes(row.value) if row else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read {key}: {e}") from e
        finally:
            db.close()

    def set(self, key: str, value: bytes) -> None:
        db = self._session_factory()
        try:
            db.merge(StoredValue(key=key, value=value))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to write {key}: {e}") from e
        finally:
            db.close()


def build_store(session_factory=None) -> KeyValueStore:
    """Pick the SQL store when a session factory is available."""
    if session_factory is None:
        logger.warning("DATABASE_URL not configured, settings will not survive a restart")
        return MemoryKeyValueStore()
    return SqlKeyValueStore(session_factory)
