"""
Core - Entities and Collection Metadata

Components:
- StorageObject: pydantic base class for identifiable entities
- StorageContext: per-type collection metadata and its registry
- TimeUnit: (value, unit) durations
"""

from .context import (
    StorageContext, StorageContextRegistry, get_registry,
    register_storage_context, storage_context, resolve_storage_context
)
from .entity import StorageObject, IdentifierType, EntityType
from .timeunit import TimeUnit, to_timedelta

__all__ = [
    "StorageContext", "StorageContextRegistry", "get_registry",
    "register_storage_context", "storage_context", "resolve_storage_context",
    "StorageObject", "IdentifierType", "EntityType",
    "TimeUnit", "to_timedelta"
]
