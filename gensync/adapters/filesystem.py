"""
Filesystem store — a directory on disk acting as the persistent file store.

Store paths are resolved below ``root``.  Bookkeeping the filesystem
cannot express natively lives under ``<root>/.state/``:

    - derived.json   registry of files flagged as derived
    - history/       copies of files deleted with keep_history=True

All OSErrors are converted into StoreError.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from gensync.adapters.base import DEFAULT_ENCODING, FileStore, StoreError
from gensync.core.persistence.state_file import DEFAULT_STATE_DIR, load_json, save_json, state_path

logger = logging.getLogger(__name__)

DERIVED_FILE = "derived.json"
HISTORY_DIR = "history"

_COPY_CHUNK = 64 * 1024


class LocalFileStore(FileStore):
    """File store backed by a local directory.

    Args:
        root: Directory holding the store. Must exist.
        default_encoding: Text encoding for files without an override.
        encodings: Per-suffix encoding overrides, e.g. ``{".properties": "latin-1"}``.
    """

    def __init__(
        self,
        root: Path,
        default_encoding: str = DEFAULT_ENCODING,
        encodings: dict[str, str] | None = None,
    ):
        self._root = Path(root)
        self._default_encoding = default_encoding
        self._encodings = dict(encodings or {})
        self._derived_path = state_path(self._root, DERIVED_FILE)
        self._derived: set[str] | None = None

    @property
    def root(self) -> Path:
        return self._root

    # ── FileStore ───────────────────────────────────────────────────

    def exists(self, path: PurePosixPath) -> bool:
        return self._resolve(path).exists()

    def is_container(self, path: PurePosixPath) -> bool:
        return self._resolve(path).is_dir()

    def read(self, path: PurePosixPath) -> BinaryIO:
        target = self._resolve(path)
        try:
            return target.open("rb")
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}", path) from e

    def create(self, path: PurePosixPath, data: BinaryIO) -> None:
        target = self._resolve(path)
        if not target.parent.is_dir():
            raise StoreError(f"Container does not exist: {path.parent}", path)
        try:
            with target.open("xb") as f:
                shutil.copyfileobj(data, f, _COPY_CHUNK)
        except FileExistsError as e:
            raise StoreError(f"Resource already exists: {path}", path) from e
        except OSError as e:
            raise StoreError(f"Cannot create {path}: {e}", path) from e
        logger.debug("Created %s", path)

    def write(self, path: PurePosixPath, data: BinaryIO) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise StoreError(f"File not found: {path}", path)

        # Atomic replace: temp file in the same directory, then rename
        tmp = target.with_name(f".{target.name}.tmp")
        try:
            with tmp.open("wb") as f:
                shutil.copyfileobj(data, f, _COPY_CHUNK)
            tmp.replace(target)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StoreError(f"Cannot write {path}: {e}", path) from e
        logger.debug("Wrote %s", path)

    def delete(self, path: PurePosixPath, keep_history: bool = False) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise StoreError(f"File not found: {path}", path)
        try:
            if keep_history:
                stamp = time.strftime("%Y%m%dT%H%M%S")
                backup = self._root / DEFAULT_STATE_DIR / HISTORY_DIR / f"{path}.{stamp}"
                backup.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(target, backup)
            target.unlink()
            derived = self._load_derived()
            if str(path) in derived:
                derived.discard(str(path))
                self._save_derived()
        except OSError as e:
            raise StoreError(f"Cannot delete {path}: {e}", path) from e
        logger.debug("Deleted %s (keep_history=%s)", path, keep_history)

    def create_container(self, path: PurePosixPath) -> None:
        target = self._resolve(path)
        try:
            target.mkdir()
        except OSError as e:
            raise StoreError(f"Cannot create container {path}: {e}", path) from e

    def touch(self, path: PurePosixPath) -> None:
        target = self._resolve(path)
        try:
            os.utime(target)
        except OSError as e:
            raise StoreError(f"Cannot touch {path}: {e}", path) from e

    def is_derived(self, path: PurePosixPath) -> bool:
        return str(path) in self._load_derived()

    def set_derived(self, path: PurePosixPath, derived: bool) -> None:
        if not self._resolve(path).is_file():
            raise StoreError(f"File not found: {path}", path)
        registry = self._load_derived()
        key = str(path)
        if derived == (key in registry):
            return
        if derived:
            registry.add(key)
        else:
            registry.discard(key)
        try:
            self._save_derived()
        except OSError as e:
            raise StoreError(f"Cannot record derived flag for {path}: {e}", path) from e

    def list_files(self, container: PurePosixPath) -> list[PurePosixPath]:
        base = self._resolve(container)
        if not base.is_dir():
            return []
        state_dir = self._root / DEFAULT_STATE_DIR
        files = []
        for candidate in base.rglob("*"):
            if candidate.is_file() and state_dir not in candidate.parents:
                files.append(PurePosixPath(candidate.relative_to(self._root).as_posix()))
        return sorted(files)

    def resolve_encoding(self, path: PurePosixPath) -> str:
        return self._encodings.get(path.suffix, self._default_encoding)

    # ── Internals ───────────────────────────────────────────────────

    def _resolve(self, path: PurePosixPath) -> Path:
        if path.is_absolute() or ".." in path.parts:
            raise StoreError(f"Path escapes the store root: {path}", path)
        return self._root.joinpath(*path.parts)

    def _load_derived(self) -> set[str]:
        if self._derived is None:
            data = load_json(self._derived_path, default=[])
            self._derived = set(data) if isinstance(data, list) else set()
        return self._derived

    def _save_derived(self) -> None:
        save_json(sorted(self._load_derived()), self._derived_path)
