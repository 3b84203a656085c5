"""
Artifact lifecycle callbacks and content post-processing hooks.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Protocol

from gensync.core.models.content import PlainText, TracedText


class FileCallback(Protocol):
    """Notified about generated files the synchronizer touches."""

    def after_file_creation(self, path: PurePosixPath) -> None: ...

    def after_file_update(self, path: PurePosixPath) -> None: ...

    def before_file_deletion(self, path: PurePosixPath) -> bool:
        """Return False to veto the deletion."""
        ...


class PostProcessor(Protocol):
    """Transforms generated content before it is persisted."""

    def process(
        self,
        file_name: str,
        output_name: str,
        contents: PlainText | TracedText,
    ) -> PlainText | TracedText: ...


class NullFileCallback:
    """Ignores notifications and allows every deletion."""

    def after_file_creation(self, path: PurePosixPath) -> None:
        pass

    def after_file_update(self, path: PurePosixPath) -> None:
        pass

    def before_file_deletion(self, path: PurePosixPath) -> bool:
        return True


class RecordingFileCallback:
    """Keeps every notification; can veto deletions."""

    def __init__(self, allow_deletion: bool = True):
        self.allow_deletion = allow_deletion
        self.created: list[PurePosixPath] = []
        self.updated: list[PurePosixPath] = []
        self.deletion_requests: list[PurePosixPath] = []

    def after_file_creation(self, path: PurePosixPath) -> None:
        self.created.append(path)

    def after_file_update(self, path: PurePosixPath) -> None:
        self.updated.append(path)

    def before_file_deletion(self, path: PurePosixPath) -> bool:
        self.deletion_requests.append(path)
        return self.allow_deletion
