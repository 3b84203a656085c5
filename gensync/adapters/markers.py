"""
Trace markers — file-backed marker installer.

Stores, per source file, which trace files each generator produced
from it.  An IDE (or the CLI) reads these to jump from a source file
to the generated code.  Markers live in ``.state/trace_markers.json``::

    {
      "model/Foo.dsl": {"default": ["src-gen/A.java._trace"]}
    }
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath

from gensync.core.persistence.state_file import load_json, save_json, state_path

logger = logging.getLogger(__name__)

MARKERS_FILE = "trace_markers.json"


class JsonMarkerStore:
    """Marker installer persisting to a JSON document under ``root``."""

    def __init__(self, root: Path):
        self._path = state_path(Path(root), MARKERS_FILE)

    @property
    def path(self) -> Path:
        return self._path

    def install(
        self,
        source: PurePosixPath,
        generator_name: str,
        trace_paths: list[PurePosixPath],
    ) -> None:
        """Replace the markers ``generator_name`` owns on ``source``."""
        markers = self._load()
        per_source = markers.setdefault(str(source), {})
        if trace_paths:
            per_source[generator_name] = sorted(str(p) for p in trace_paths)
        else:
            per_source.pop(generator_name, None)
            if not per_source:
                markers.pop(str(source), None)
        save_json(markers, self._path)
        logger.debug("Installed %d trace markers on %s", len(trace_paths), source)

    def markers_for(self, source: PurePosixPath | str) -> dict[str, list[str]]:
        """Trace paths per generator for one source file."""
        return dict(self._load().get(str(source), {}))

    def sources(self) -> list[str]:
        return sorted(self._load())

    def _load(self) -> dict[str, dict[str, list[str]]]:
        data = load_json(self._path, default={})
        return data if isinstance(data, dict) else {}
