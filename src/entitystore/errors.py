"""
Storage errors.

Configuration problems (missing collection metadata, unusable connection
parameters) are fatal and raised at the first operation that needs them.
Read problems on single items surface as ``EntityDecodeError`` inside the
backends and are logged rather than propagated by the bulk operations.
"""

class StorageError(Exception):
    """Base exception for storage operations"""
    pass

class StorageConfigurationError(StorageError):
    """Raised when a backend cannot be configured from the given parameters"""
    pass

class MissingStorageContextError(StorageConfigurationError):
    """Raised when an entity type has no collection metadata registered"""

    def __init__(self, entity_class: type):
        self.entity_class = entity_class
        name = getattr(entity_class, "__name__", repr(entity_class))
        super().__init__(f"No storage context registered for {name}")

class EntityDecodeError(StorageError):
    """Raised when stored data cannot be turned back into an entity"""
    pass

__all__ = [
    "StorageError", "StorageConfigurationError",
    "MissingStorageContextError", "EntityDecodeError"
]
