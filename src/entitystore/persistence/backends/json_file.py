"""
JSON File Backend - One File per Entity

Stores every entity as ``<folder>/<collection>/<identifier>.json``. Writes go
to a temporary sibling first and are moved into place with ``os.replace``, so
a crash mid-write leaves the previous version intact.
"""

from pathlib import Path
from typing import List, Optional, Union
import logging
import os
import tempfile

from .base import StorageBackend, I, V
from ...errors import EntityDecodeError, StorageError

logger = logging.getLogger(__name__)

FILE_SUFFIX = ".json"

class JSONFileBackend(StorageBackend[I, V]):
    """Flat-file storage backend using pretty-printed JSON documents"""

    def __init__(self, database_folder: Union[str, Path], **kwargs):
        super().__init__(**kwargs)
        self.database_folder = Path(database_folder)

    @property
    def data_folder(self) -> Path:
        """Directory holding the collection's files"""
        return self.database_folder / self.collection_name

    def _do_startup(self) -> None:
        self.data_folder.mkdir(parents=True, exist_ok=True)

    def _file_name(self, identifier: I) -> Optional[str]:
        """File stem for ``identifier``, None when it would escape the folder"""
        name = str(self.encode_identifier(identifier))
        separators = {"/", os.sep, os.altsep} - {None}
        if name in ("", ".", "..") or any(sep in name for sep in separators):
            return None
        return name

    def _file_for(self, identifier: I) -> Path:
        folder = self.data_folder
        name = self._file_name(identifier)
        if name is None:
            raise StorageError(f"Identifier {identifier!r} cannot be used as a file name")
        return folder / f"{name}{FILE_SUFFIX}"

    def _read(self, path: Path) -> V:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise EntityDecodeError(f"Failed to read {path}: {e}") from e
        return self.serializer.from_json(self.entity_class, text)

    def get(self, identifier: I) -> Optional[V]:
        folder = self.data_folder
        name = self._file_name(identifier)
        if name is None:
            logger.warning(f"Identifier {identifier!r} cannot be used as a file name")
            return None

        path = folder / f"{name}{FILE_SUFFIX}"
        if not path.is_file():
            logger.debug(f"No stored entity at {path}")
            return None

        try:
            return self._read(path)
        except EntityDecodeError as e:
            logger.error(f"Could not load {self.entity_class.__name__} {identifier!r}: {e}")
            return None

    def get_all(self) -> List[V]:
        folder = self.data_folder
        if not folder.is_dir():
            return []

        values: List[V] = []
        for path in sorted(folder.iterdir()):
            if path.suffix != FILE_SUFFIX or not path.is_file():
                continue
            try:
                values.append(self._read(path))
            except EntityDecodeError as e:
                logger.warning(f"Skipping unreadable file {path.name}: {e}")

        logger.debug(f"Loaded {len(values)} entities from {folder}")
        return values

    def save(self, value: V) -> None:
        identifier = self.identifier_of(value)
        path = self._file_for(identifier)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = self.serializer.to_json(value)

        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(temp_name, path)
        except BaseException:
            try:
                os.unlink(temp_name)
            except OSError:
                pass
            raise

        logger.debug(f"Saved {self.entity_class.__name__} {identifier!r} to {path}")

    def delete(self, identifier: I) -> None:
        path = self._file_for(identifier)
        path.unlink(missing_ok=True)
        logger.debug(f"Deleted {path}")

    def __repr__(self) -> str:
        return f"JSONFileBackend(folder={str(self.database_folder)!r}, started={self.is_started})"

__all__ = ["JSONFileBackend", "FILE_SUFFIX"]
