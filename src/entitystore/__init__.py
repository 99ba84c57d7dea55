"""
entitystore - Cached Persistence for Identifiable Entities

Load by id, mutate in memory, eventually persist: a time-bounded cache in
front of swappable storage engines, with background eviction and periodic
auto-save.
"""

from .core import (
    StorageObject, StorageContext, storage_context, register_storage_context,
    resolve_storage_context, TimeUnit
)
from .errors import (
    StorageError, StorageConfigurationError, MissingStorageContextError, EntityDecodeError
)
from .persistence import (
    ServiceCache, StorageBackend, JSONFileBackend, MongoBackend, StorageService,
    json_storage_service, mongo_storage_service, create_storage_service
)
from .scheduling import Scheduler, ScheduledTask, ThreadPoolScheduler, ManualScheduler, ManualClock
from .config import StorageSettings, configure_logging, get_settings, set_settings

__version__ = "0.1.0"

__all__ = [
    # Entities
    "StorageObject", "StorageContext", "storage_context", "register_storage_context",
    "resolve_storage_context", "TimeUnit",

    # Errors
    "StorageError", "StorageConfigurationError", "MissingStorageContextError", "EntityDecodeError",

    # Persistence
    "ServiceCache", "StorageBackend", "JSONFileBackend", "MongoBackend", "StorageService",
    "json_storage_service", "mongo_storage_service", "create_storage_service",

    # Scheduling
    "Scheduler", "ScheduledTask", "ThreadPoolScheduler", "ManualScheduler", "ManualClock",

    # Configuration
    "StorageSettings", "configure_logging", "get_settings", "set_settings"
]
