"""
Service Cache - Time-Bounded Entity Cache

🧠 In-Memory Entity Cache:
Maps identifiers to entities with an optional cache-wide time-to-live. The
cache never schedules itself; the owning StorageService calls ``clean()`` on
every tick. Both internal maps are guarded by one lock so application threads
and the tick thread can use the cache at the same time.
"""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar
import logging
import threading

from ..core.timeunit import TimeUnit, to_timedelta

logger = logging.getLogger(__name__)

I = TypeVar("I")
V = TypeVar("V")

Clock = Callable[[], datetime]

def _entity_identifier(value: Any) -> Any:
    return value.identifier

class ServiceCache(Generic[I, V]):
    """
    Identifier -> entity cache with an optional TTL.

    Entries are keyed by ``identify(value)``, which defaults to the entity's
    own ``identifier``. Every ``add`` stamps the entry with the current time.
    When the cache was built with a TTL, ``clean()`` evicts every entry whose
    stamp plus the TTL is not after now. Without a TTL nothing is ever evicted
    by age.
    """

    def __init__(self,
                 cache_time: Optional[float] = None,
                 cache_time_unit: Optional[TimeUnit] = None,
                 clock: Optional[Clock] = None,
                 identify: Optional[Callable[[V], I]] = None):
        self._values: Dict[I, V] = {}
        self._times: Dict[I, datetime] = {}
        self._lock = threading.RLock()
        self._ttl: Optional[timedelta] = to_timedelta(cache_time, cache_time_unit)
        self._clock: Clock = clock or datetime.now
        self._identify: Callable[[V], I] = identify or _entity_identifier

    @property
    def ttl(self) -> Optional[timedelta]:
        return self._ttl

    def add(self, value: V) -> None:
        """Insert or replace ``value`` under its identifier and stamp it"""
        identifier = self._identify(value)
        with self._lock:
            self._values[identifier] = value
            self._times[identifier] = self._clock()

    def remove(self, identifier: I) -> None:
        """Drop the entry for ``identifier``; no-op when absent"""
        with self._lock:
            self._values.pop(identifier, None)
            self._times.pop(identifier, None)

    def contains(self, identifier: I) -> bool:
        with self._lock:
            return identifier in self._values

    def get(self, identifier: I) -> Optional[V]:
        with self._lock:
            return self._values.get(identifier)

    def values(self) -> List[V]:
        """Snapshot of the cached entities"""
        with self._lock:
            return list(self._values.values())

    def clear(self) -> None:
        with self._lock:
            self._values.clear()
            self._times.clear()

    def clean(self) -> int:
        """
        Evict entries older than the TTL.

        Returns:
            Number of entries evicted
        """
        if self._ttl is None:
            return 0

        evicted = 0
        with self._lock:
            now = self._clock()
            for identifier in list(self._values.keys()):
                cached_at = self._times.get(identifier)
                if cached_at is None:
                    continue
                if cached_at + self._ttl > now:
                    continue
                self.remove(identifier)
                evicted += 1

        if evicted:
            logger.debug(f"Evicted {evicted} stale entries from cache")
        return evicted

    def __contains__(self, identifier: Any) -> bool:
        return self.contains(identifier)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def __repr__(self) -> str:
        return f"ServiceCache(size={len(self)}, ttl={self._ttl})"

__all__ = ["ServiceCache", "Clock"]
