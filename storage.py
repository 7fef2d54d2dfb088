"""Key/value persistence used for adapter state such as the tag vocabulary."""
import json
import logging
from typing import Any, Optional, Protocol

from redis import Redis

from config import settings
from database import SessionLocal, init_db
from models import StoredValue

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Persistence collaborator: JSON-compatible values under string keys."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class MemoryStore:
    """Process-local store, mostly for tests and one-off CLI runs."""

    def __init__(self, initial: Optional[dict] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class SqlStore:
    """Store backed by the plugin_storage table."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal

    def get(self, key: str) -> Optional[Any]:
        db = self.session_factory()
        try:
            row = db.get(StoredValue, key)
            if row is None:
                return None
            return json.loads(row.value)
        finally:
            db.close()

    def set(self, key: str, value: Any) -> None:
        db = self.session_factory()
        try:
            payload = json.dumps(value, ensure_ascii=False)
            row = db.get(StoredValue, key)
            if row is None:
                db.add(StoredValue(key=key, value=payload))
            else:
                row.value = payload
            db.commit()
            logger.debug(f"Stored value for key '{key}'")
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


class RedisStore:
    """Store backed by Redis string keys."""

    def __init__(self, redis_conn: Redis, prefix: str = "esjzone:"):
        self.redis = redis_conn
        self.prefix = prefix

    def get(self, key: str) -> Optional[Any]:
        raw = self.redis.get(self.prefix + key)
        if raw is None:
            return None
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        self.redis.set(self.prefix + key, json.dumps(value, ensure_ascii=False))
        logger.debug(f"Stored value for key '{key}' in Redis")


def get_store(backend: Optional[str] = None) -> KeyValueStore:
    """
    Build the configured store.

    Args:
        backend: 'sql', 'redis' or 'memory' (defaults to settings.storage_backend)

    Returns:
        Store instance
    """
    backend = (backend or settings.storage_backend).lower()

    if backend == "memory":
        return MemoryStore()

    if backend == "redis":
        logger.info(f"Using Redis store at {settings.redis_url}")
        return RedisStore(Redis.from_url(settings.redis_url))

    if backend == "sql":
        init_db()
        return SqlStore()

    raise ValueError(f"Unknown storage backend: {backend}")
