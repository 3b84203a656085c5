"""
Trace region model — provenance of generated text.

A ``TraceRegion`` tree is produced by a generator alongside the text it
generates.  Each node covers a span of the generated text and may carry
``LocationData`` pointing back into source files.  Children are nested
inside their parent's span, do not overlap each other, and are ordered
as they appear in the generated text.

Lines are 1-based, columns are 0-based.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, Field, model_validator


class LocationData(BaseModel):
    """A span in a source file that contributed to a generated region."""

    source_uri: str | None = None
    start_line: int = Field(default=1, ge=1)
    start_column: int = Field(default=0, ge=0)
    end_line: int = Field(default=1, ge=1)
    end_column: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_span(self) -> LocationData:
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line {self.end_line} precedes start_line {self.start_line}"
            )
        return self


class TraceRegion(BaseModel):
    """A node of the trace tree covering ``[offset, offset + length)`` of generated text."""

    offset: int = Field(default=0, ge=0)
    length: int = Field(default=0, ge=0)
    start_line: int = Field(default=1, ge=1)
    end_line: int = Field(default=1, ge=1)
    locations: list[LocationData] = Field(default_factory=list)
    children: list[TraceRegion] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_span(self) -> TraceRegion:
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line {self.end_line} precedes start_line {self.start_line}"
            )
        return self

    def walk(self) -> Iterator[TraceRegion]:
        """Yield this region and all descendants, depth-first, pre-order."""
        stack: list[TraceRegion] = [self]
        while stack:
            region = stack.pop()
            yield region
            stack.extend(reversed(region.children))

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def source_uris(self) -> list[str]:
        """Distinct source URIs referenced anywhere in the tree, first-seen order."""
        seen: dict[str, None] = {}
        for region in self.walk():
            for location in region.locations:
                if location.source_uri is not None:
                    seen.setdefault(location.source_uri, None)
        return list(seen)

    def primary_location(self) -> LocationData | None:
        """First location of this node that names a source, if any."""
        for location in self.locations:
            if location.source_uri is not None:
                return location
        return None
