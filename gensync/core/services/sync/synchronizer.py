"""
Output synchronizer — writes generated files onto a file store.

For every generated artifact the synchronizer decides between create,
update, unchanged and skipped, keeps the derived flag in line with the
output configuration, and maintains two companions next to the file:

    F._trace   serialized trace region, present iff F was generated
               with a trace region in its most recent call
    F'.smap    SMAP for debug-language files (``A.java`` → ``A.smap``),
               present iff a source map could be derived

Source URIs found in trace regions are recorded into a
``SourceTraceIndex`` that the pass owner flushes once at the end.

Store failures are wrapped into ``SyncError`` and never retried.  A
failed call may leave its one file partially updated; the next pass
repairs it because the comparator sees the difference.
"""

from __future__ import annotations

import io
import logging
import struct
from pathlib import PurePosixPath

from gensync.adapters.base import FileStore, StoreError
from gensync.core.cancellation import CancellationToken
from gensync.core.errors import SyncError
from gensync.core.models.content import GeneratedArtifact, PlainText, SyncResult, TracedText, as_content
from gensync.core.models.output import OutputConfiguration, OutputConfigurations
from gensync.core.models.trace import TraceRegion
from gensync.core.services.sync.callbacks import FileCallback, NullFileCallback, PostProcessor
from gensync.core.services.sync.comparator import contents_changed
from gensync.core.services.trace.serializer import TraceRegionSerializer
from gensync.core.services.trace.smap import DEFAULT_DEBUG_EXTENSIONS, SmapBuilder, smap_name_for
from gensync.core.services.trace.source_index import DEFAULT_GENERATOR_NAME, SourceTraceIndex
from gensync.core.services.trace.uris import uri_for_path

logger = logging.getLogger(__name__)

TRACE_FILE_EXTENSION = "._trace"
SMAP_ENCODING = "utf-8"


class OutputSynchronizer:
    """Synchronizes generated artifacts for one project root.

    Args:
        store: Persistent file store.
        outputs: Output configurations, looked up by name.
        project_root: Store container that output directories are relative to.
        callback: Lifecycle notifications and deletion veto.
        post_processor: Optional content transform applied before writing.
        source_index: Collects source → trace associations; None disables recording.
        serializer: Trace region encoder.
        smap_builder: Source map builder for debug-language files.
        debug_extensions: File suffixes that get a source map sibling.
        cancel_token: Checked once at the start of every ``synchronize`` call.
    """

    def __init__(
        self,
        store: FileStore,
        outputs: OutputConfigurations,
        *,
        project_root: PurePosixPath | str = ".",
        callback: FileCallback | None = None,
        post_processor: PostProcessor | None = None,
        source_index: SourceTraceIndex | None = None,
        serializer: TraceRegionSerializer | None = None,
        smap_builder: SmapBuilder | None = None,
        debug_extensions: tuple[str, ...] = DEFAULT_DEBUG_EXTENSIONS,
        cancel_token: CancellationToken | None = None,
    ):
        self._store = store
        self._outputs = outputs
        self._project_root = PurePosixPath(project_root)
        self._callback = callback or NullFileCallback()
        self._post_processor = post_processor
        self._source_index = source_index
        self._serializer = serializer or TraceRegionSerializer()
        self._smap_builder = smap_builder or SmapBuilder()
        self._debug_extensions = tuple(debug_extensions)
        self._cancel_token = cancel_token or CancellationToken()

    @property
    def cancel_token(self) -> CancellationToken:
        return self._cancel_token

    @property
    def source_index(self) -> SourceTraceIndex | None:
        return self._source_index

    # ── Path resolution ─────────────────────────────────────────────

    def folder_for(self, config: OutputConfiguration) -> PurePosixPath:
        return self._project_root / config.output_directory

    def path_for(self, file_name: str, output_name: str) -> PurePosixPath:
        return self.folder_for(self._outputs.get(output_name)) / file_name

    def uri_for(self, file_name: str, output_name: str) -> str:
        """``src://`` URI of a generated file."""
        return uri_for_path(self.path_for(file_name, output_name))

    @staticmethod
    def trace_path_for(path: PurePosixPath) -> PurePosixPath:
        return path.with_name(path.name + TRACE_FILE_EXTENSION)

    def smap_path_for(self, path: PurePosixPath) -> PurePosixPath | None:
        name = smap_name_for(path.name, self._debug_extensions)
        return None if name is None else path.with_name(name)

    # ── Operations ──────────────────────────────────────────────────

    def synchronize(
        self,
        file_name: str,
        output_name: str,
        contents: str | PlainText | TracedText,
    ) -> SyncResult:
        """Write one generated file, its trace file and its source map."""
        self._cancel_token.raise_if_cancelled()
        config = self._outputs.get(output_name)

        folder = self.folder_for(config)
        try:
            if not self._store.exists(folder):
                if not config.create_output_directory:
                    logger.debug("Output folder %s missing, skipping %s", folder, file_name)
                    return SyncResult(action="skipped", reason=f"output folder {folder} missing")
                self._ensure_exists(folder)
        except StoreError as e:
            raise SyncError(f"Cannot create output folder {folder}: {e}", folder) from e

        path = folder / file_name
        trace_path = self.trace_path_for(path)
        smap_path = self.smap_path_for(path)
        content = self._post_process(file_name, output_name, as_content(contents))
        region = content.trace_region if content.kind == "traced" else None
        derived = config.set_derived_property

        try:
            if self._store.exists(path):
                if not config.override_existing_resources:
                    logger.debug("Not overriding existing %s", path)
                    return SyncResult(action="skipped", path=path, reason="override disabled")
                action = self._update(path, smap_path, content.text, derived)
            else:
                self._ensure_exists(path.parent)
                self._store.create(path, io.BytesIO(self._encode(content.text, path)))
                if derived:
                    self._store.set_derived(path, True)
                action = "created"

            if smap_path is not None:
                self._update_smap(smap_path, region, path, derived)
            self._update_trace(trace_path, region, derived)
        except StoreError as e:
            raise SyncError(f"Cannot synchronize {path}: {e}", path) from e

        logger.debug("%s %s", action.capitalize(), path)
        if action == "created":
            self._callback.after_file_creation(path)
        elif action == "updated":
            self._callback.after_file_update(path)

        return SyncResult(
            action=action,
            path=path,
            trace_path=trace_path if region is not None else None,
            smap_path=smap_path,
        )

    def synchronize_artifact(self, artifact: GeneratedArtifact) -> SyncResult:
        return self.synchronize(artifact.file_name, artifact.output_name, artifact.contents)

    def delete(self, file_name: str, output_name: str) -> bool:
        """Delete a generated file and its trace file unless the callback vetoes.

        The source map sibling is left alone; the next synchronize of a
        debug-language file reconciles it.

        Returns:
            True if the file was deleted.
        """
        config = self._outputs.get(output_name)
        path = self.path_for(file_name, output_name)
        if not self._callback.before_file_deletion(path):
            logger.debug("Deletion of %s vetoed", path)
            return False

        try:
            if not self._store.exists(path):
                return False
            self._remove(path, config.keep_local_history)
        except StoreError as e:
            raise SyncError(f"Cannot delete {path}: {e}", path) from e
        logger.debug("Deleted %s", path)
        return True

    def clean(self, output_name: str) -> list[PurePosixPath]:
        """Delete every derived file below an output folder.

        Trace files go with their generated file; trace files whose
        generated file is already gone are removed as well.

        Returns:
            Paths of the deleted generated files.
        """
        self._cancel_token.raise_if_cancelled()
        config = self._outputs.get(output_name)
        folder = self.folder_for(config)
        if not config.clean_up_derived_resources or not self._store.is_container(folder):
            return []

        removed: list[PurePosixPath] = []
        try:
            files = self._store.list_files(folder)
            for path in files:
                if path.name.endswith(TRACE_FILE_EXTENSION) or not self._store.is_derived(path):
                    continue
                if not self._callback.before_file_deletion(path):
                    logger.debug("Cleaning of %s vetoed", path)
                    continue
                self._remove(path, config.keep_local_history)
                removed.append(path)

            for path in files:
                if not path.name.endswith(TRACE_FILE_EXTENSION) or not self._store.exists(path):
                    continue
                primary = path.with_name(path.name[: -len(TRACE_FILE_EXTENSION)])
                if not self._store.exists(primary) and self._store.is_derived(path):
                    self._store.delete(path, keep_history=config.keep_local_history)
        except StoreError as e:
            raise SyncError(f"Cannot clean {folder}: {e}", folder) from e

        logger.info("Cleaned %d derived files from %s", len(removed), folder)
        return removed

    def flush_source_traces(self, generator_name: str = DEFAULT_GENERATOR_NAME) -> int:
        """Install markers for everything recorded so far; see ``SourceTraceIndex.flush``."""
        if self._source_index is None:
            return 0
        return self._source_index.flush(generator_name)

    # ── Internals ───────────────────────────────────────────────────

    def _update(
        self,
        path: PurePosixPath,
        smap_path: PurePosixPath | None,
        text: str,
        derived: bool,
    ) -> str:
        data = self._encode(text, path)
        if self._has_contents_changed(path, data):
            self._store.write(path, io.BytesIO(data))
            action = "updated"
        else:
            # Debuggers compare stamps of a file and its source map
            if smap_path is not None and self._store.exists(smap_path):
                self._store.touch(path)
            action = "unchanged"

        if self._store.is_derived(path) != derived:
            self._store.set_derived(path, derived)
        return action

    def _has_contents_changed(self, path: PurePosixPath, data: bytes) -> bool:
        try:
            existing = self._store.read(path)
        except StoreError as e:
            logger.debug("Cannot open %s, assuming changed: %s", path, e)
            return True
        with existing:
            return contents_changed(existing, io.BytesIO(data))

    def _update_trace(
        self,
        trace_path: PurePosixPath,
        region: TraceRegion | None,
        derived: bool,
    ) -> None:
        if region is None:
            if self._store.exists(trace_path):
                self._store.delete(trace_path, keep_history=True)
            return

        if self._source_index is not None:
            self._source_index.record_region(region, trace_path)
        try:
            data = self._serializer.write(region)
        except struct.error as e:
            raise SyncError(f"Cannot serialize trace data for {trace_path}: {e}", trace_path) from e
        self._put(trace_path, data)
        self._store.set_derived(trace_path, derived)

    def _update_smap(
        self,
        smap_path: PurePosixPath,
        region: TraceRegion | None,
        path: PurePosixPath,
        derived: bool,
    ) -> None:
        smap = self._smap_builder.build(region, path.name)
        if smap is None:
            if self._store.exists(smap_path):
                self._store.delete(smap_path)
            return
        self._put(smap_path, smap.encode(SMAP_ENCODING))
        self._store.set_derived(smap_path, derived)

    def _put(self, path: PurePosixPath, data: bytes) -> None:
        if self._store.exists(path):
            self._store.write(path, io.BytesIO(data))
        else:
            self._store.create(path, io.BytesIO(data))

    def _remove(self, path: PurePosixPath, keep_history: bool) -> None:
        trace_path = self.trace_path_for(path)
        self._store.delete(path, keep_history=keep_history)
        if self._store.exists(trace_path):
            self._store.delete(trace_path, keep_history=keep_history)

    def _ensure_exists(self, container: PurePosixPath) -> None:
        if self._store.exists(container):
            return
        if container.parent != container:
            self._ensure_exists(container.parent)
        self._store.create_container(container)

    def _encode(self, text: str, path: PurePosixPath) -> bytes:
        encoding = self._store.resolve_encoding(path)
        try:
            return text.encode(encoding)
        except (LookupError, UnicodeEncodeError) as e:
            raise SyncError(f"Cannot encode {path} as {encoding}: {e}", path) from e

    def _post_process(
        self,
        file_name: str,
        output_name: str,
        content: PlainText | TracedText,
    ) -> PlainText | TracedText:
        if self._post_processor is None:
            return content
        return self._post_processor.process(file_name, output_name, content)
