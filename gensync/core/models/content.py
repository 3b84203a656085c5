"""
Generated content and artifact models.

Content is a tagged value: plain text, or text that carries its trace
region.  Code branches on ``kind`` rather than inspecting types.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator

from gensync.core.models.output import DEFAULT_OUTPUT
from gensync.core.models.trace import TraceRegion


class PlainText(BaseModel):
    """Generated text without provenance data."""

    kind: Literal["plain"] = "plain"
    text: str

    @property
    def trace_region(self) -> TraceRegion | None:
        return None


class TracedText(BaseModel):
    """Generated text with the trace region the generator produced for it."""

    kind: Literal["traced"] = "traced"
    text: str
    trace_region: TraceRegion | None = None


Content = Annotated[PlainText | TracedText, Field(discriminator="kind")]


def as_content(contents: str | PlainText | TracedText) -> PlainText | TracedText:
    """Wrap a bare string as ``PlainText``; pass tagged content through."""
    if isinstance(contents, str):
        return PlainText(text=contents)
    return contents


class GeneratedArtifact(BaseModel):
    """One generated file as handed over by a generator."""

    file_name: str
    output_name: str = DEFAULT_OUTPUT
    contents: Content

    @field_validator("contents", mode="before")
    @classmethod
    def _wrap_text(cls, value: object) -> object:
        if isinstance(value, str):
            return {"kind": "plain", "text": value}
        return value


class SyncResult(BaseModel):
    """Outcome of one ``synchronize`` call."""

    action: Literal["created", "updated", "unchanged", "skipped"]
    path: PurePosixPath | None = None
    trace_path: PurePosixPath | None = None
    smap_path: PurePosixPath | None = None
    reason: str = ""

    @property
    def written(self) -> bool:
        """Whether the generated file's bytes were written."""
        return self.action in ("created", "updated")
