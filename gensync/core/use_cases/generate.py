"""
Generation pass use case — synchronize a batch of artifacts, then flush.

A pass is the unit an incremental build schedules: a list of generated
artifacts, optionally some generated files to delete, and one flush of
the source trace index at the end.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from gensync.adapters.filesystem import LocalFileStore
from gensync.adapters.markers import JsonMarkerStore
from gensync.core.cancellation import CancellationToken
from gensync.core.config.loader import SyncSettings
from gensync.core.models.content import GeneratedArtifact, SyncResult
from gensync.core.services.sync.synchronizer import OutputSynchronizer
from gensync.core.services.trace.smap import SmapBuilder
from gensync.core.services.trace.source_index import DEFAULT_GENERATOR_NAME, SourceTraceIndex

logger = logging.getLogger(__name__)


@dataclass
class PassReport:
    """Result of one generation pass."""

    generator_name: str = DEFAULT_GENERATOR_NAME
    results: list[SyncResult] = field(default_factory=list)
    deleted: list[PurePosixPath] = field(default_factory=list)
    markers_installed: int = 0

    def count(self, action: str) -> int:
        return sum(1 for r in self.results if r.action == action)

    def to_dict(self) -> dict:
        return {
            "generator": self.generator_name,
            "created": self.count("created"),
            "updated": self.count("updated"),
            "unchanged": self.count("unchanged"),
            "skipped": self.count("skipped"),
            "deleted": [str(p) for p in self.deleted],
            "markers_installed": self.markers_installed,
        }


def synchronizer_from_settings(
    settings: SyncSettings,
    store_root: Path,
    cancel_token: CancellationToken | None = None,
) -> OutputSynchronizer:
    """Wire a synchronizer onto a local directory from loaded settings.

    Markers are persisted with ``JsonMarkerStore`` under ``store_root``.
    """
    store = LocalFileStore(
        store_root,
        default_encoding=settings.default_encoding,
        encodings=settings.encodings,
    )
    return OutputSynchronizer(
        store,
        settings.output_configurations(),
        project_root=settings.project_root,
        source_index=SourceTraceIndex(JsonMarkerStore(store_root), store),
        smap_builder=SmapBuilder(settings.smap_stratum),
        debug_extensions=tuple(settings.debug_extensions),
        cancel_token=cancel_token,
    )


def run_generation_pass(
    synchronizer: OutputSynchronizer,
    artifacts: Iterable[GeneratedArtifact],
    generator_name: str = DEFAULT_GENERATOR_NAME,
    deletions: Iterable[tuple[str, str]] = (),
) -> PassReport:
    """Synchronize every artifact, apply deletions and flush source traces.

    Cancellation is checked before each artifact.  The source trace
    index is flushed even when the pass fails part-way, so traces of
    the files already written still get their markers.

    Args:
        synchronizer: Synchronizer bound to the target project.
        artifacts: Generated files to write.
        generator_name: Identity the markers are installed under.
        deletions: ``(file_name, output_name)`` pairs to delete.

    Returns:
        PassReport with per-file results.

    Raises:
        OperationCancelledError: If the pass was cancelled.
        SyncError: On the first file that cannot be synchronized.
    """
    report = PassReport(generator_name=generator_name)
    token = synchronizer.cancel_token
    try:
        for artifact in artifacts:
            token.raise_if_cancelled()
            report.results.append(synchronizer.synchronize_artifact(artifact))

        for file_name, output_name in deletions:
            token.raise_if_cancelled()
            if synchronizer.delete(file_name, output_name):
                report.deleted.append(synchronizer.path_for(file_name, output_name))
    finally:
        report.markers_installed = synchronizer.flush_source_traces(generator_name)

    logger.info(
        "Generation pass '%s': %d created, %d updated, %d unchanged, %d skipped, %d deleted",
        generator_name,
        report.count("created"),
        report.count("updated"),
        report.count("unchanged"),
        report.count("skipped"),
        len(report.deleted),
    )
    return report


def run_configured_pass(
    settings: SyncSettings,
    store_root: Path,
    artifacts: Iterable[GeneratedArtifact],
    deletions: Iterable[tuple[str, str]] = (),
    cancel_token: CancellationToken | None = None,
) -> PassReport:
    """Run one pass on a local directory, installing markers under ``settings.generator_name``."""
    synchronizer = synchronizer_from_settings(settings, store_root, cancel_token)
    return run_generation_pass(synchronizer, artifacts, settings.generator_name, deletions)
