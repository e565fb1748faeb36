"""
TTL cache for remote news payloads.

Two interchangeable backends share the ``CacheStore`` interface:

- ``InMemoryCacheStore`` keeps entries in a process-local dict.
- ``DatabaseCacheStore`` keeps entries in the ``cache_entries`` table so the
  API process and the importer CLI see the same cache.

Entries expire strictly by time: an entry written at T with a TTL of 15
minutes is served for reads before T+15min and is absent from T+15min on.
There is no capacity bound and no eviction beyond expiry.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Tuple

import structlog
from sqlalchemy.orm import Session

from ..models.cache_entry import CacheEntry

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


class CacheStore(ABC):
    """Key-value store with per-entry expiry"""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or datetime.utcnow

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired"""
        pass

    @abstractmethod
    def put(self, key: str, value: Any, ttl: timedelta) -> None:
        pass

    @abstractmethod
    def flush_all(self) -> None:
        """Remove every entry regardless of key or expiry"""
        pass


class InMemoryCacheStore(CacheStore):

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._entries: Dict[str, Tuple[Any, datetime]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None

        value, expires_at = entry
        if self.clock() >= expires_at:
            # Another request may have evicted it already
            self._entries.pop(key, None)
            logger.debug("cache_expired", key=key)
            return None

        logger.debug("cache_hit", key=key)
        return value

    def put(self, key: str, value: Any, ttl: timedelta) -> None:
        expires_at = self.clock() + ttl
        self._entries[key] = (value, expires_at)
        logger.debug("cache_put", key=key, expires_at=expires_at.isoformat())

    def flush_all(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info("cache_flushed", backend="memory", entries=count)


class DatabaseCacheStore(CacheStore):

    def __init__(self, session: Session, clock: Optional[Clock] = None):
        super().__init__(clock)
        self.session = session

    def get(self, key: str) -> Optional[Any]:
        entry = self.session.query(CacheEntry).filter(CacheEntry.key == key).first()
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None

        if entry.is_expired(self.clock()):
            self.session.delete(entry)
            self.session.commit()
            logger.debug("cache_expired", key=key)
            return None

        logger.debug("cache_hit", key=key)
        return entry.value

    def put(self, key: str, value: Any, ttl: timedelta) -> None:
        expires_at = self.clock() + ttl
        entry = self.session.query(CacheEntry).filter(CacheEntry.key == key).first()
        if entry:
            entry.value = value
            entry.expires_at = expires_at
        else:
            self.session.add(CacheEntry(key=key, value=value, expires_at=expires_at))
        self.session.commit()
        logger.debug("cache_put", key=key, expires_at=expires_at.isoformat())

    def flush_all(self) -> None:
        count = self.session.query(CacheEntry).delete()
        self.session.commit()
        logger.info("cache_flushed", backend="database", entries=count)
