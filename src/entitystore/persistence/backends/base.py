"""
Storage Backend - Persistence Contract

💾 Pluggable Storage Engines:
This module defines the contract every storage engine implements. A backend
is bound to exactly one entity type and its collection metadata, and knows
nothing about caching; the StorageService layers the cache on top.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, Type, TypeVar
import logging
import uuid

from ...core.context import StorageContext
from ...errors import MissingStorageContextError, StorageError
from ..serialization import EntitySerializer, get_serializer

I = TypeVar("I")
V = TypeVar("V")

class StorageBackend(ABC, Generic[I, V]):
    """
    Abstract storage engine for one entity type.

    Subclasses implement the ``_do_*`` hooks; the public methods take care of
    the started/unstarted bookkeeping and of resolving collection metadata.
    """

    def __init__(self, serializer: Optional[EntitySerializer] = None):
        self.serializer = serializer or get_serializer()
        self.entity_class: Optional[Type[V]] = None
        self._context: Optional[StorageContext] = None
        self._is_started = False
        self._logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def bind(self, entity_class: Type[V], context: Optional[StorageContext]) -> None:
        """Attach the entity type and its (possibly missing) collection metadata"""
        self.entity_class = entity_class
        self._context = context

    @property
    def is_started(self) -> bool:
        return self._is_started

    @property
    def context(self) -> StorageContext:
        """Collection metadata, raising when the entity type has none"""
        if self._context is None:
            raise MissingStorageContextError(self.entity_class)
        return self._context

    @property
    def collection_name(self) -> str:
        return self.context.collection_name

    @property
    def identifier_field(self) -> str:
        return self.context.identifier_field

    def startup(self) -> None:
        """Prepare the storage location; safe to call more than once"""
        if self.entity_class is None:
            raise StorageError(f"{self.__class__.__name__} is not bound to an entity type")
        # Metadata problems are configuration errors, surface them here
        context = self.context
        self._do_startup()
        self._is_started = True
        self._logger.info(f"{self.__class__.__name__} started for collection '{context.collection_name}'")

    def shutdown(self) -> None:
        """Release resources held by the backend"""
        if not self._is_started:
            return
        self._do_shutdown()
        self._is_started = False
        self._logger.info(f"{self.__class__.__name__} shut down")

    def identifier_of(self, value: V) -> I:
        """Identifier of ``value``, read from the bound identifier field"""
        return getattr(value, self.identifier_field)

    def encode_identifier(self, identifier: I) -> Any:
        """Canonical form of ``identifier`` for this storage medium"""
        if isinstance(identifier, uuid.UUID):
            return str(identifier)
        return identifier

    @abstractmethod
    def get(self, identifier: I) -> Optional[V]:
        """
        Read one entity.

        Returns:
            The entity, or None when it does not exist or cannot be read
        """
        pass

    @abstractmethod
    def get_all(self) -> List[V]:
        """Read every readable entity of the collection"""
        pass

    @abstractmethod
    def save(self, value: V) -> None:
        """Create or fully overwrite the record of ``value``"""
        pass

    @abstractmethod
    def delete(self, identifier: I) -> None:
        """Remove the record of ``identifier``; absence is not an error"""
        pass

    def _do_startup(self) -> None:
        """Override in subclasses for specific preparation"""
        pass

    def _do_shutdown(self) -> None:
        """Override in subclasses for specific cleanup"""
        pass

    def __repr__(self) -> str:
        collection = self._context.collection_name if self._context else None
        return f"{self.__class__.__name__}(collection={collection!r}, started={self._is_started})"

__all__ = ["StorageBackend"]
