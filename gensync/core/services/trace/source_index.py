"""
Source trace index — which trace files each source file contributed to.

The synchronizer records ``source uri → trace path`` pairs while a
generation pass runs.  When the pass is done, its owner calls
``flush()``, which hands every store-addressable source and its trace
paths to a ``MarkerInstaller`` and empties the index.

Nothing is persisted here.  A pass that never flushes simply installs
no markers.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from pathlib import PurePosixPath
from typing import Protocol

from gensync.adapters.base import FileStore
from gensync.core.models.trace import TraceRegion
from gensync.core.services.trace.uris import store_path_from_uri

logger = logging.getLogger(__name__)

DEFAULT_GENERATOR_NAME = "default"


class MarkerInstaller(Protocol):
    """Attaches provenance markers to a source file."""

    def install(
        self,
        source: PurePosixPath,
        generator_name: str,
        trace_paths: list[PurePosixPath],
    ) -> None:
        """Replace the markers ``generator_name`` owns on ``source``."""


class SourceTraceIndex:
    """Multi-valued ``source uri → {trace path}`` map with explicit flush.

    Entries only accumulate until ``flush()``.  The index does not
    partition by generator name; callers that need isolation flush
    before switching generator identity.
    """

    def __init__(
        self,
        installer: MarkerInstaller,
        store: FileStore,
        resolver: Callable[[str], PurePosixPath | None] = store_path_from_uri,
    ):
        self._installer = installer
        self._store = store
        self._resolver = resolver
        self._traces: defaultdict[str, set[PurePosixPath]] = defaultdict(set)

    def record(self, source_uri: str, trace_path: PurePosixPath) -> None:
        self._traces[source_uri].add(trace_path)

    def record_region(self, region: TraceRegion, trace_path: PurePosixPath) -> None:
        """Record every source referenced anywhere in ``region``."""
        for source_uri in region.source_uris():
            self.record(source_uri, trace_path)

    def sources(self) -> list[str]:
        return list(self._traces)

    def traces_for(self, source_uri: str) -> set[PurePosixPath]:
        return set(self._traces.get(source_uri, ()))

    def __len__(self) -> int:
        return len(self._traces)

    def flush(self, generator_name: str = DEFAULT_GENERATOR_NAME) -> int:
        """Install markers for every recorded source and clear the index.

        Returns:
            Number of sources markers were installed for.
        """
        # Swap first: the index is empty afterwards even if an installer fails.
        pending, self._traces = self._traces, defaultdict(set)

        installed = 0
        for source_uri, trace_paths in pending.items():
            source = self._resolver(source_uri)
            if source is None:
                logger.debug("Skipping non-store source %s", source_uri)
                continue
            if not self._store.exists(source):
                logger.warning("Skipping markers for missing source %s", source)
                continue
            try:
                self._installer.install(source, generator_name, sorted(trace_paths))
            except Exception as e:
                logger.error("Failed to install trace markers on %s: %s", source, e)
                continue
            installed += 1

        logger.info(
            "Flushed source traces for generator '%s': %d of %d sources marked",
            generator_name, installed, len(pending),
        )
        return installed
