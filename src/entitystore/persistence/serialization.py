"""
Entity serialization shared by the storage backends.

Entities are dumped in pydantic's JSON mode, so UUIDs, datetimes and enums
become plain JSON values both in files and in MongoDB documents. The active
serializer can be swapped process-wide with ``set_serializer``.
"""

from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from ..errors import EntityDecodeError

class EntitySerializer:
    """Converts entities to and from JSON text and JSON-compatible dicts"""

    def __init__(self, indent: Optional[int] = 2, exclude_none: bool = False):
        self.indent = indent
        self.exclude_none = exclude_none

    def to_document(self, entity: BaseModel) -> Dict[str, Any]:
        return entity.model_dump(mode="json", exclude_none=self.exclude_none)

    def to_json(self, entity: BaseModel) -> str:
        return entity.model_dump_json(indent=self.indent, exclude_none=self.exclude_none)

    def from_document(self, entity_class: Type[BaseModel], document: Dict[str, Any]) -> BaseModel:
        try:
            return entity_class.model_validate(document)
        except ValidationError as e:
            raise EntityDecodeError(f"Invalid {entity_class.__name__} document: {e}") from e

    def from_json(self, entity_class: Type[BaseModel], text: str) -> BaseModel:
        try:
            return entity_class.model_validate_json(text)
        except ValidationError as e:
            raise EntityDecodeError(f"Invalid {entity_class.__name__} JSON: {e}") from e

_serializer = EntitySerializer()

def get_serializer() -> EntitySerializer:
    return _serializer

def set_serializer(serializer: EntitySerializer) -> None:
    """Replace the serializer used by every backend created afterwards"""
    global _serializer
    _serializer = serializer

__all__ = ["EntitySerializer", "get_serializer", "set_serializer"]
