"""
In-memory store — test double for every store operation.

Keeps files as bytes in a dict and records every mutating call in an
operation log, so tests can assert exactly which writes happened.
Failures can be injected per operation and path.
"""

from __future__ import annotations

import io
from pathlib import PurePosixPath
from typing import BinaryIO

from gensync.adapters.base import DEFAULT_ENCODING, FileStore, StoreError

_ROOT = PurePosixPath(".")


class InMemoryFileStore(FileStore):
    """Dict-backed store with an operation log.

    Each log entry is ``(operation, path)``, e.g. ``("write", "gen/A.java")``.
    """

    def __init__(
        self,
        files: dict[str, bytes | str] | None = None,
        encodings: dict[str, str] | None = None,
    ):
        self._files: dict[PurePosixPath, bytes] = {}
        self._containers: set[PurePosixPath] = {_ROOT}
        self._derived: set[PurePosixPath] = set()
        self._stamps: dict[PurePosixPath, int] = {}
        self._clock = 0
        self._encodings = dict(encodings or {})
        self._failures: dict[tuple[str, PurePosixPath], str] = {}
        self.history: list[tuple[PurePosixPath, bytes]] = []
        self.operations: list[tuple[str, str]] = []

        for name, data in (files or {}).items():
            path = PurePosixPath(name)
            self._add_parents(path)
            self._files[path] = data.encode(DEFAULT_ENCODING) if isinstance(data, str) else data
            self._stamp(path)

    # ── Test helpers ────────────────────────────────────────────────

    def set_failure(self, operation: str, path: str | PurePosixPath, error: str = "Mock failure") -> None:
        """Make ``operation`` fail for ``path``."""
        self._failures[(operation, PurePosixPath(path))] = error

    def clear_failures(self) -> None:
        self._failures.clear()

    def contents(self, path: str | PurePosixPath) -> bytes:
        return self._files[PurePosixPath(path)]

    def text(self, path: str | PurePosixPath, encoding: str = DEFAULT_ENCODING) -> str:
        return self.contents(path).decode(encoding)

    def stamp(self, path: str | PurePosixPath) -> int:
        """Logical modification stamp; bumps on write and touch."""
        return self._stamps[PurePosixPath(path)]

    def ops(self, operation: str) -> list[str]:
        """Paths of all logged calls to ``operation``."""
        return [p for op, p in self.operations if op == operation]

    def reset_log(self) -> None:
        self.operations.clear()

    # ── FileStore ───────────────────────────────────────────────────

    def exists(self, path: PurePosixPath) -> bool:
        return path in self._files or path in self._containers

    def is_container(self, path: PurePosixPath) -> bool:
        return path in self._containers

    def read(self, path: PurePosixPath) -> BinaryIO:
        self._check("read", path)
        if path not in self._files:
            raise StoreError(f"File not found: {path}", path)
        return io.BytesIO(self._files[path])

    def create(self, path: PurePosixPath, data: BinaryIO) -> None:
        self._log("create", path)
        if self.exists(path):
            raise StoreError(f"Resource already exists: {path}", path)
        if path.parent not in self._containers:
            raise StoreError(f"Container does not exist: {path.parent}", path)
        self._files[path] = data.read()
        self._stamp(path)

    def write(self, path: PurePosixPath, data: BinaryIO) -> None:
        self._log("write", path)
        if path not in self._files:
            raise StoreError(f"File not found: {path}", path)
        self._files[path] = data.read()
        self._stamp(path)

    def delete(self, path: PurePosixPath, keep_history: bool = False) -> None:
        self._log("delete", path)
        if path not in self._files:
            raise StoreError(f"File not found: {path}", path)
        data = self._files.pop(path)
        if keep_history:
            self.history.append((path, data))
        self._derived.discard(path)
        self._stamps.pop(path, None)

    def create_container(self, path: PurePosixPath) -> None:
        self._log("create_container", path)
        if path in self._files:
            raise StoreError(f"A file is in the way: {path}", path)
        if path.parent not in self._containers:
            raise StoreError(f"Container does not exist: {path.parent}", path)
        self._containers.add(path)

    def touch(self, path: PurePosixPath) -> None:
        self._log("touch", path)
        if path not in self._files:
            raise StoreError(f"File not found: {path}", path)
        self._stamp(path)

    def is_derived(self, path: PurePosixPath) -> bool:
        return path in self._derived

    def set_derived(self, path: PurePosixPath, derived: bool) -> None:
        self._log("set_derived", path)
        if path not in self._files:
            raise StoreError(f"File not found: {path}", path)
        if derived:
            self._derived.add(path)
        else:
            self._derived.discard(path)

    def list_files(self, container: PurePosixPath) -> list[PurePosixPath]:
        if container == _ROOT:
            return sorted(self._files)
        return sorted(p for p in self._files if container in p.parents)

    def resolve_encoding(self, path: PurePosixPath) -> str:
        return self._encodings.get(path.suffix, DEFAULT_ENCODING)

    # ── Internals ───────────────────────────────────────────────────

    def _log(self, operation: str, path: PurePosixPath) -> None:
        self.operations.append((operation, str(path)))
        self._check(operation, path)

    def _check(self, operation: str, path: PurePosixPath) -> None:
        error = self._failures.get((operation, path))
        if error is not None:
            raise StoreError(error, path)

    def _stamp(self, path: PurePosixPath) -> None:
        self._clock += 1
        self._stamps[path] = self._clock

    def _add_parents(self, path: PurePosixPath) -> None:
        for parent in path.parents:
            self._containers.add(parent)
