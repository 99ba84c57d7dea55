"""
Storage Service - Cached Entity Persistence

🏗️ Unified Entity Access:
A StorageService puts a time-bounded cache in front of one storage backend
for one entity type. A periodic tick sweeps stale cache entries and, when
auto-save is enabled and due, writes every cached entity back to the backend.

Lifecycle:
    service = StorageService(Player, JSONFileBackend("data"))   # tick scheduled
    service.startup()                                            # backend ready
    player = service.get(player_id)                              # cached read
    service.save(player)                                         # write-through
    service.shutdown()                                           # flush + cancel

The service trusts a single writer per identifier; it does not copy entities
and does not guard against use after shutdown.
"""

from concurrent.futures import Future
from datetime import datetime
from typing import Callable, Generic, List, Optional, Type, TypeVar
import logging

from ..core.context import StorageContext, resolve_storage_context
from ..core.timeunit import TimeUnit
from ..scheduling.scheduler import Scheduler, ScheduledTask, get_default_scheduler
from .backends.base import StorageBackend
from .cache import ServiceCache

logger = logging.getLogger(__name__)

I = TypeVar("I")
V = TypeVar("V")

DEFAULT_AUTO_SAVE_INTERVAL = 15
DEFAULT_AUTO_SAVE_INTERVAL_UNIT = TimeUnit.MINUTES
DEFAULT_TICK_INTERVAL = 1
DEFAULT_TICK_INTERVAL_UNIT = TimeUnit.SECONDS

class StorageService(Generic[I, V]):
    """
    Cache + backend orchestration for one entity type.

    Args:
        entity_class: The StorageObject subclass managed by this service
        backend: Storage engine; bound to ``entity_class`` here
        cache_time: Optional cache TTL value; entries never expire without it
        cache_time_unit: Unit of ``cache_time``
        scheduler: Runs the tick and the async operations (shared default
            scheduler when omitted)
        clock: Time source for the cache and the auto-save schedule
        metadata: Collection metadata, overriding the registered one
        tick_interval: How often ``tick`` runs
        tick_interval_unit: Unit of ``tick_interval``
    """

    def __init__(self,
                 entity_class: Type[V],
                 backend: StorageBackend[I, V],
                 cache_time: Optional[float] = None,
                 cache_time_unit: Optional[TimeUnit] = None,
                 scheduler: Optional[Scheduler] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 metadata: Optional[StorageContext] = None,
                 tick_interval: float = DEFAULT_TICK_INTERVAL,
                 tick_interval_unit: TimeUnit = DEFAULT_TICK_INTERVAL_UNIT):
        self._storage_object_class = entity_class
        self._metadata = metadata or resolve_storage_context(entity_class)
        if self._metadata is None:
            logger.warning(f"{entity_class.__name__} has no storage context; backend access will fail")

        self._backend = backend
        self._backend.bind(entity_class, self._metadata)

        self._clock = clock or datetime.now
        self._cache: ServiceCache[I, V] = ServiceCache(cache_time, cache_time_unit, clock=self._clock,
                                                      identify=self.identify)
        self._scheduler = scheduler or get_default_scheduler()

        self._auto_save = True
        self._auto_save_interval = DEFAULT_AUTO_SAVE_INTERVAL
        self._auto_save_interval_unit = DEFAULT_AUTO_SAVE_INTERVAL_UNIT
        self._last_auto_save = self._clock()

        # Ticking starts right away, independent of startup()
        self._tick_task: ScheduledTask = self._scheduler.run_at_fixed_rate(
            self.tick, tick_interval, tick_interval, tick_interval_unit
        )

    # Lifecycle
    def startup(self) -> None:
        """Prepare the backend; must run before any read or write"""
        logger.info(f"Starting storage service for {self._storage_object_class.__name__}")
        self._backend.startup()

    def shutdown(self) -> None:
        """Flush every cached entity, stop ticking and close the backend"""
        logger.info(f"Shutting down storage service for {self._storage_object_class.__name__}")
        self.save_all()
        self._tick_task.cancel()
        self._backend.shutdown()

    def tick(self) -> None:
        """Sweep the cache and run the auto-save when it is due"""
        try:
            self._cache.clean()
        except Exception:
            logger.exception("Cache cleanup failed")

        if not self._auto_save:
            return

        interval = self._auto_save_interval_unit.to_timedelta(self._auto_save_interval)
        if self._last_auto_save + interval > self._clock():
            return

        try:
            saved = self.save_all()
            logger.debug(f"Auto-saved {saved} {self._storage_object_class.__name__} entities")
        except Exception:
            logger.exception("Auto-save failed")
        self._last_auto_save = self._clock()

    def identify(self, value: V) -> I:
        """Identifier of ``value`` under this service's collection metadata"""
        if self._metadata is None:
            return value.identifier
        return getattr(value, self._metadata.identifier_field)

    # Configuration
    def set_update_interval(self, interval: float, unit: TimeUnit) -> None:
        """Set how often the tick saves every cached entity"""
        if interval <= 0:
            raise ValueError("Auto-save interval must be positive")
        self._auto_save_interval = interval
        self._auto_save_interval_unit = unit

    def set_auto_save(self, auto_save: bool) -> None:
        self._auto_save = auto_save

    @property
    def auto_save(self) -> bool:
        return self._auto_save

    @property
    def last_auto_save(self) -> datetime:
        return self._last_auto_save

    # Reads
    def get(self, identifier: I, should_cache: bool = True) -> Optional[V]:
        """
        Get an entity, serving it from the cache when present.

        Args:
            identifier: Identifier of the entity
            should_cache: Put a value loaded from the backend into the cache

        Returns:
            The entity, or None when it is missing or unreadable
        """
        cached = self._cache.get(identifier)
        if cached is not None:
            return cached

        value = self._backend.get(identifier)
        if value is not None and should_cache:
            self._cache.add(value)
        return value

    def get_all(self, should_cache: bool = False) -> List[V]:
        """Load every entity from the backend, never from the cache alone"""
        values = self._backend.get_all()
        if should_cache:
            for value in values:
                self._cache.add(value)
        return values

    def get_cached(self, identifier: I) -> Optional[V]:
        """Cache-only lookup"""
        return self._cache.get(identifier)

    # Cache management
    def add_to_cache(self, value: V) -> None:
        self._cache.add(value)

    def remove_from_cache(self, identifier: I) -> None:
        self._cache.remove(identifier)

    def contains(self, identifier: I) -> bool:
        """Whether ``identifier`` is currently cached"""
        return self._cache.contains(identifier)

    # Writes
    def save(self, value: V) -> None:
        """Write ``value`` through to the backend; the cache is left untouched"""
        self._backend.save(value)

    def save_async(self, value: V) -> Future:
        """Save on the scheduler; failures are logged"""
        def task():
            try:
                self.save(value)
            except Exception:
                logger.exception(f"Async save of {self.identify(value)!r} failed")
        return self._scheduler.run(task)

    def save_all(self) -> int:
        """
        Save every cached entity.

        A failing entity is logged and skipped so the rest still get saved.

        Returns:
            Number of entities saved successfully
        """
        saved = 0
        for value in self._cache.values():
            try:
                self._backend.save(value)
                saved += 1
            except Exception:
                logger.exception(f"Failed to save {self._storage_object_class.__name__} {self.identify(value)!r}")
        return saved

    def delete(self, value: V) -> None:
        """Evict ``value`` from the cache and delete its stored record"""
        identifier = self.identify(value)
        self._cache.remove(identifier)
        self._backend.delete(identifier)

    def delete_async(self, value: V) -> Future:
        """Delete on the scheduler; failures are logged"""
        def task():
            try:
                self.delete(value)
            except Exception:
                logger.exception(f"Async delete of {self.identify(value)!r} failed")
        return self._scheduler.run(task)

    # Accessors
    @property
    def cache(self) -> ServiceCache[I, V]:
        return self._cache

    @property
    def backend(self) -> StorageBackend[I, V]:
        return self._backend

    @property
    def storage_object_class(self) -> Type[V]:
        return self._storage_object_class

    @property
    def metadata(self) -> Optional[StorageContext]:
        return self._metadata

    @property
    def tick_task(self) -> ScheduledTask:
        return self._tick_task

    def __enter__(self) -> "StorageService[I, V]":
        self.startup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return (f"StorageService(storage_object_class={self._storage_object_class.__name__}, "
                f"backend={self._backend!r}, cache={self._cache!r})")

__all__ = ["StorageService"]
