"""
Persistence - Cached Entity Storage

💾 Pluggable Storage Backends:
A StorageService fronts one backend with a time-bounded cache and keeps it
saved through a periodic tick. Entities choose their collection through a
StorageContext; the service chooses the engine.

Structure:
- backends/: Storage implementations (JSON files, MongoDB)
- cache.py: Time-bounded identifier -> entity cache
- service.py: Cache + backend orchestration
- factory.py: Service construction from arguments or settings

Example:
    from entitystore import StorageObject, TimeUnit, storage_context, json_storage_service

    @storage_context("players", "name")
    class Player(StorageObject[str]):
        name: str
        score: int = 0

    service = json_storage_service(Player, "data", cache_time=10, cache_time_unit=TimeUnit.MINUTES)
    service.startup()
"""

from .cache import ServiceCache
from .serialization import EntitySerializer, get_serializer, set_serializer
from .backends import StorageBackend, JSONFileBackend, MongoBackend
from .service import StorageService
from .factory import json_storage_service, mongo_storage_service, create_storage_service

__all__ = [
    "ServiceCache", "EntitySerializer", "get_serializer", "set_serializer",
    "StorageBackend", "JSONFileBackend", "MongoBackend", "StorageService",
    "json_storage_service", "mongo_storage_service", "create_storage_service"
]
