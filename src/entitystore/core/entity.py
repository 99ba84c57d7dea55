"""
Storage Object - Identifiable Entity Base Class

🎯 Identifiable Domain Objects:
A StorageObject is a plain pydantic model with exactly one stable identifier.
Subclasses either override ``identifier`` or let it read the field named by
the type's StorageContext.
"""

from typing import Generic, TypeVar
from pydantic import BaseModel, ConfigDict

from .context import resolve_storage_context
from ..errors import MissingStorageContextError

IdentifierType = TypeVar("IdentifierType")

class StorageObject(BaseModel, Generic[IdentifierType]):
    """
    Base class for entities handled by a StorageService.

    Private attributes (``PrivateAttr``) are never persisted, which makes them
    the place for runtime-only state such as locks or handles. Subclasses must
    not declare a field named ``identifier``.
    """
    model_config = ConfigDict(populate_by_name=True)

    @property
    def identifier(self) -> IdentifierType:
        """The stable identifier of this entity"""
        context = resolve_storage_context(type(self))
        if context is None:
            raise MissingStorageContextError(type(self))
        return getattr(self, context.identifier_field)

EntityType = TypeVar("EntityType", bound=StorageObject)

__all__ = ["StorageObject", "IdentifierType", "EntityType"]
