"""
Service factories.

Shortcuts that pair a StorageService with a backend, either from explicit
arguments or from StorageSettings.
"""

from pathlib import Path
from typing import Optional, Type, Union
import logging

from ..config import BackendType, StorageSettings, get_settings
from ..core.timeunit import TimeUnit
from .backends.json_file import JSONFileBackend
from .backends.mongo import MongoBackend
from .service import StorageService

logger = logging.getLogger(__name__)

def json_storage_service(entity_class: Type,
                         database_folder: Union[str, Path],
                         cache_time: Optional[float] = None,
                         cache_time_unit: Optional[TimeUnit] = None,
                         **service_options) -> StorageService:
    """StorageService storing ``entity_class`` as JSON files under ``database_folder``"""
    return StorageService(entity_class, JSONFileBackend(database_folder),
                          cache_time=cache_time, cache_time_unit=cache_time_unit,
                          **service_options)

def mongo_storage_service(entity_class: Type,
                          connection_string: str,
                          cache_time: Optional[float] = None,
                          cache_time_unit: Optional[TimeUnit] = None,
                          **service_options) -> StorageService:
    """StorageService storing ``entity_class`` in the database named by ``connection_string``"""
    return StorageService(entity_class, MongoBackend(connection_string),
                          cache_time=cache_time, cache_time_unit=cache_time_unit,
                          **service_options)

def create_storage_service(entity_class: Type,
                           settings: Optional[StorageSettings] = None,
                           **service_options) -> StorageService:
    """
    Build a StorageService from settings.

    Args:
        entity_class: Entity type to manage
        settings: Settings to use (global settings when omitted)
        **service_options: Extra StorageService arguments such as ``scheduler``

    Returns:
        A configured, not yet started, StorageService
    """
    settings = settings or get_settings()

    if settings.backend == BackendType.MONGO:
        backend = MongoBackend(settings.mongo.connection_string,
                               database_name=settings.mongo.database_name,
                               client_options=settings.mongo.client_options)
    else:
        backend = JSONFileBackend(settings.json_file.folder)

    service = StorageService(
        entity_class,
        backend,
        cache_time=settings.cache.cache_time,
        cache_time_unit=settings.cache.cache_time_unit,
        tick_interval=settings.tick_interval,
        tick_interval_unit=settings.tick_interval_unit,
        **service_options
    )
    service.set_auto_save(settings.auto_save.enabled)
    service.set_update_interval(settings.auto_save.interval, settings.auto_save.unit)

    logger.debug(f"Created {settings.backend.value} storage service for {entity_class.__name__}")
    return service

__all__ = ["json_storage_service", "mongo_storage_service", "create_storage_service"]
