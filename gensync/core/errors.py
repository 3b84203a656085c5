"""
Synchronizer errors.

Store adapters raise ``StoreError``.  The synchronizer wraps every
store, encoding and serialization failure into ``SyncError`` so callers
only have one failure type to handle per generated file.
"""

from __future__ import annotations


class SyncError(RuntimeError):
    """A generated file could not be synchronized.

    The file (and its trace / source-map siblings) may be partially
    updated. The next successful pass reconciles it.
    """

    def __init__(self, message: str, path: object | None = None):
        super().__init__(message)
        self.path = path


class OperationCancelledError(Exception):
    """The surrounding generation pass was cancelled."""
