"""
Storage Backends - Storage Implementation Layer

Available Backends:
- JSONFileBackend: one JSON file per entity on the local filesystem
- MongoBackend: one document per entity in a MongoDB collection
"""

from .base import StorageBackend
from .json_file import JSONFileBackend
from .mongo import MongoBackend

__all__ = ["StorageBackend", "JSONFileBackend", "MongoBackend"]
