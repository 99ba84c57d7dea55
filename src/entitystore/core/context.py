"""
Storage Context - Collection Metadata for Entity Types

📇 Declarative Collection Binding:
Every entity type stored through a StorageService is bound to a collection name
and the name of the field that carries its identifier. The binding lives in an
explicit registry keyed by class, filled either by the ``@storage_context``
decorator or by ``register_storage_context``.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Type
import logging
import threading

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class StorageContext:
    """Collection metadata for one entity type"""
    collection_name: str
    identifier_field: str

    def __post_init__(self):
        if not self.collection_name:
            raise ValueError("collection_name must be a non-empty string")
        if not self.identifier_field:
            raise ValueError("identifier_field must be a non-empty string")

class StorageContextRegistry:
    """
    Registry mapping entity classes to their StorageContext.

    Lookups walk the class MRO, so a subclass of a registered entity inherits
    its parent's collection unless it registers its own.
    """

    def __init__(self):
        self._contexts: Dict[type, StorageContext] = {}
        self._lock = threading.Lock()

    def register(self, entity_class: type, context: StorageContext) -> None:
        """Bind ``entity_class`` to ``context``, replacing any previous binding"""
        with self._lock:
            self._contexts[entity_class] = context
        logger.debug(f"Registered storage context for {entity_class.__name__}: {context}")

    def unregister(self, entity_class: type) -> None:
        with self._lock:
            self._contexts.pop(entity_class, None)

    def resolve(self, entity_class: type) -> Optional[StorageContext]:
        """Return the context bound to ``entity_class`` or one of its bases"""
        with self._lock:
            for klass in getattr(entity_class, "__mro__", (entity_class,)):
                context = self._contexts.get(klass)
                if context is not None:
                    return context
        return None

    def clear(self) -> None:
        with self._lock:
            self._contexts.clear()

    def __contains__(self, entity_class: type) -> bool:
        return self.resolve(entity_class) is not None

# Process-wide default registry
_registry = StorageContextRegistry()

def get_registry() -> StorageContextRegistry:
    """Get the default storage context registry"""
    return _registry

def register_storage_context(entity_class: type, collection_name: str,
                             identifier_field: str) -> StorageContext:
    """Register collection metadata for an entity class in the default registry"""
    context = StorageContext(collection_name, identifier_field)
    _registry.register(entity_class, context)
    return context

def storage_context(collection_name: str, identifier_field: str):
    """
    Class decorator binding an entity type to a collection.

    Example:
        @storage_context("players", "uuid")
        class Player(StorageObject[UUID]):
            uuid: UUID
            name: str
    """
    def decorator(entity_class: Type) -> Type:
        register_storage_context(entity_class, collection_name, identifier_field)
        return entity_class
    return decorator

def resolve_storage_context(entity_class: type) -> Optional[StorageContext]:
    """Look up the collection metadata of ``entity_class`` in the default registry"""
    return _registry.resolve(entity_class)

__all__ = [
    "StorageContext", "StorageContextRegistry", "get_registry",
    "register_storage_context", "storage_context", "resolve_storage_context"
]
