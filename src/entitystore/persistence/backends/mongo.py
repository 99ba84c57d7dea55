"""
MongoDB Backend - Document Store Persistence

🗃️ Remote Document Storage:
Maps entities to documents in a MongoDB collection. Documents are matched on
the identifier field declared in the entity's StorageContext, not on ``_id``,
and every save is a single-document upsert replacing the whole document.

The ``MongoClient`` is created at startup, shared by every call and pooled
internally by pymongo, so one backend can be used from many threads.
"""

from typing import Any, Dict, List, Optional
import logging

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConfigurationError, PyMongoError

from .base import StorageBackend, I, V
from ...errors import EntityDecodeError, StorageConfigurationError, StorageError

logger = logging.getLogger(__name__)

class MongoBackend(StorageBackend[I, V]):
    """
    Document-store backend built on pymongo.

    Args:
        connection_string: MongoDB URI; must name the target database unless
            ``database_name`` is given
        client: An existing client to use instead of creating one (it is not
            closed on shutdown)
        database_name: Explicit database name, overriding the URI
        client_options: Extra keyword arguments for ``MongoClient``
    """

    def __init__(self,
                 connection_string: Optional[str] = None,
                 client: Optional[MongoClient] = None,
                 database_name: Optional[str] = None,
                 client_options: Optional[Dict[str, Any]] = None,
                 **kwargs):
        super().__init__(**kwargs)
        if connection_string is None and client is None:
            raise StorageConfigurationError("MongoBackend needs a connection string or a client")
        self.connection_string = connection_string
        self.database_name = database_name
        self.client_options = client_options or {}
        self._client = client
        self._owns_client = client is None
        self._database: Optional[Database] = None

    def _do_startup(self) -> None:
        if self._database is not None:
            return

        try:
            if self._client is None:
                self._client = MongoClient(self.connection_string, **self.client_options)
            if self.database_name:
                database = self._client[self.database_name]
            else:
                database = self._client.get_default_database()
        except ConfigurationError as e:
            if self._owns_client and self._client is not None:
                self._client.close()
                self._client = None
            raise StorageConfigurationError(f"No database specified in the connection string: {e}") from e

        self._database = database
        logger.info(f"Connected to MongoDB database '{database.name}'")

    def _do_shutdown(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
        self._database = None

    @property
    def collection(self) -> Collection:
        if self._database is None:
            raise StorageError("MongoBackend has not been started")
        return self._database[self.collection_name]

    def _filter(self, identifier: I) -> Dict[str, Any]:
        return {self.identifier_field: self.encode_identifier(identifier)}

    def _decode(self, document: Dict[str, Any]) -> V:
        document = dict(document)
        document.pop("_id", None)
        return self.serializer.from_document(self.entity_class, document)

    def get(self, identifier: I) -> Optional[V]:
        collection = self.collection
        try:
            document = collection.find_one(self._filter(identifier))
        except PyMongoError as e:
            logger.error(f"Failed to fetch {self.entity_class.__name__} {identifier!r}: {e}")
            return None

        if document is None:
            return None

        try:
            return self._decode(document)
        except EntityDecodeError as e:
            logger.error(f"Could not decode {self.entity_class.__name__} {identifier!r}: {e}")
            return None

    def get_all(self) -> List[V]:
        collection = self.collection
        values: List[V] = []

        cursor = collection.find()
        try:
            for document in cursor:
                try:
                    values.append(self._decode(document))
                except EntityDecodeError as e:
                    logger.warning(f"Skipping undecodable document {document.get('_id')}: {e}")
        finally:
            cursor.close()

        logger.debug(f"Loaded {len(values)} documents from '{collection.name}'")
        return values

    def save(self, value: V) -> None:
        identifier = self.identifier_of(value)
        document = self.serializer.to_document(value)
        result = self.collection.replace_one(self._filter(identifier), document, upsert=True)
        logger.debug(
            f"Saved {self.entity_class.__name__} {identifier!r} "
            f"(matched={result.matched_count}, upserted={result.upserted_id is not None})"
        )

    def delete(self, identifier: I) -> None:
        result = self.collection.delete_one(self._filter(identifier))
        logger.debug(f"Deleted {result.deleted_count} document(s) for {identifier!r}")

    def __repr__(self) -> str:
        name = self._database.name if self._database is not None else self.database_name
        return f"MongoBackend(database={name!r}, started={self.is_started})"

__all__ = ["MongoBackend"]
