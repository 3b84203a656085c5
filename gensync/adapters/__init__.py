"""Adapters — file store implementations and marker installers.

Public re-exports for convenient access.
"""

from gensync.adapters.base import FileStore, StoreError
from gensync.adapters.filesystem import LocalFileStore
from gensync.adapters.markers import JsonMarkerStore
from gensync.adapters.memory import InMemoryFileStore

__all__ = [
    "FileStore",
    "InMemoryFileStore",
    "JsonMarkerStore",
    "LocalFileStore",
    "StoreError",
]
