"""
File store base — the contract between the synchronizer and persistent storage.

The synchronizer only talks to storage through this interface, never
directly to the filesystem.  Paths are ``PurePosixPath`` values relative
to the store root.  Containers are folders; files live in containers.

Every failure is raised as ``StoreError`` so the synchronizer can wrap
it uniformly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import PurePosixPath
from typing import BinaryIO

DEFAULT_ENCODING = "utf-8"


class StoreError(Exception):
    """Raised when a store operation fails."""

    def __init__(self, message: str, path: PurePosixPath | None = None):
        super().__init__(message)
        self.path = path


class FileStore(ABC):
    """Abstract base class for file stores.

    To create a new store:
        1. Subclass FileStore
        2. Implement every abstract method, raising StoreError on failure
        3. Hand an instance to OutputSynchronizer
    """

    @abstractmethod
    def exists(self, path: PurePosixPath) -> bool:
        """Whether a file or container exists at ``path``. Never raises."""

    @abstractmethod
    def is_container(self, path: PurePosixPath) -> bool:
        """Whether ``path`` exists and is a container. Never raises."""

    @abstractmethod
    def read(self, path: PurePosixPath) -> BinaryIO:
        """Open a file's bytes for reading. The caller closes the stream."""

    @abstractmethod
    def create(self, path: PurePosixPath, data: BinaryIO) -> None:
        """Create a new file. Fails if it exists or its container is missing."""

    @abstractmethod
    def write(self, path: PurePosixPath, data: BinaryIO) -> None:
        """Replace the bytes of an existing file."""

    @abstractmethod
    def delete(self, path: PurePosixPath, keep_history: bool = False) -> None:
        """Delete a file, keeping a history copy when supported and requested."""

    @abstractmethod
    def create_container(self, path: PurePosixPath) -> None:
        """Create one container. Its parent must already exist."""

    @abstractmethod
    def touch(self, path: PurePosixPath) -> None:
        """Update a file's modification stamp without changing its bytes."""

    @abstractmethod
    def is_derived(self, path: PurePosixPath) -> bool:
        """Whether a file is flagged as derived (build output)."""

    @abstractmethod
    def set_derived(self, path: PurePosixPath, derived: bool) -> None:
        """Flag or unflag a file as derived."""

    @abstractmethod
    def list_files(self, container: PurePosixPath) -> list[PurePosixPath]:
        """All files below ``container``, recursively, sorted."""

    def resolve_encoding(self, path: PurePosixPath) -> str:
        """Character encoding used for a file's text. Defaults to UTF-8."""
        return DEFAULT_ENCODING

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
