"""
Source map builder — JSR-45 SMAP line tables from trace regions.

A debugger stepping through a generated file uses the SMAP to show
the source line each generated line came from.  Only line numbers
matter here; columns and offsets are ignored.

Mapping rules:
    - Regions are visited depth-first. A nested region overrides the
      lines its parent already mapped (innermost wins).
    - A region maps through its first location that names a source.
    - Generated line ``start_line + i`` maps to source line
      ``min(location.start_line + i, location.end_line)``.
    - Consecutive generated lines collapse into stripes
      ``in#fid,repeat:out,incr``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from gensync.core.models.trace import TraceRegion
from gensync.core.services.trace.uris import store_path_from_uri

logger = logging.getLogger(__name__)

DEFAULT_STRATUM = "DSL"
DEFAULT_DEBUG_EXTENSIONS = (".java",)
SMAP_EXTENSION = ".smap"


@dataclass
class LineStripe:
    """One line-section entry: ``repeat`` source lines onto ``repeat * incr`` output lines."""

    source_line: int
    file_id: int
    output_line: int
    repeat: int = 1
    incr: int = 1

    @property
    def next_output_line(self) -> int:
        return self.output_line + self.repeat * self.incr

    def extend(self, source_line: int, file_id: int, output_line: int) -> bool:
        """Absorb the next mapped line if it continues this stripe."""
        if file_id != self.file_id or output_line != self.next_output_line:
            return False
        if self.repeat == 1 and source_line == self.source_line:
            self.incr += 1
            return True
        if self.incr == 1 and source_line == self.source_line + self.repeat:
            self.repeat += 1
            return True
        return False

    def render(self) -> str:
        text = f"{self.source_line}#{self.file_id}"
        if self.repeat != 1:
            text += f",{self.repeat}"
        text += f":{self.output_line}"
        if self.incr != 1:
            text += f",{self.incr}"
        return text


class SmapBuilder:
    """Derives SMAP text from a trace region tree.

    Args:
        stratum: Name of the source stratum written into the SMAP.
    """

    def __init__(self, stratum: str = DEFAULT_STRATUM):
        self.stratum = stratum

    def build(self, region: TraceRegion | None, generated_name: str) -> str | None:
        """Build the SMAP for ``generated_name``, or None without line data."""
        if region is None:
            return None

        files: dict[str, int] = {}
        lines: dict[int, tuple[int, int]] = {}  # output line → (source line, file id)
        for node in region.walk():
            location = node.primary_location()
            if location is None:
                continue
            file_id = files.setdefault(location.source_uri, len(files) + 1)
            for i, output_line in enumerate(range(node.start_line, node.end_line + 1)):
                source_line = min(location.start_line + i, location.end_line)
                lines[output_line] = (source_line, file_id)

        if not lines:
            logger.debug("No line data for %s — no source map", generated_name)
            return None

        stripes = self.stripes(lines)
        out = [
            "SMAP",
            generated_name,
            self.stratum,
            f"*S {self.stratum}",
            "*F",
        ]
        for uri, file_id in files.items():
            out.append(f"+ {file_id} {_display_name(uri)}")
            out.append(_source_path(uri))
        out.append("*L")
        out.extend(stripe.render() for stripe in stripes)
        out.append("*E")
        return "\n".join(out) + "\n"

    @staticmethod
    def stripes(lines: dict[int, tuple[int, int]]) -> list[LineStripe]:
        """Collapse per-line mappings into as few stripes as possible."""
        stripes: list[LineStripe] = []
        for output_line in sorted(lines):
            source_line, file_id = lines[output_line]
            if stripes and stripes[-1].extend(source_line, file_id, output_line):
                continue
            stripes.append(LineStripe(source_line, file_id, output_line))
        return stripes


def smap_name_for(file_name: str, extensions: tuple[str, ...] = DEFAULT_DEBUG_EXTENSIONS) -> str | None:
    """Name of the SMAP sibling of a debug-language file, or None."""
    for extension in extensions:
        if file_name.endswith(extension) and len(file_name) > len(extension):
            return file_name[: -len(extension)] + SMAP_EXTENSION
    return None


def _source_path(uri: str) -> str:
    path = store_path_from_uri(uri)
    return uri if path is None else path.as_posix()


def _display_name(uri: str) -> str:
    return PurePosixPath(_source_path(uri)).name or uri
