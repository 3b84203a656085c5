"""
Trace serializer — compact binary encoding of a trace region tree.

Layout (big-endian)::

    b"GTRC"  u16 version
    u32 uri count, then per uri: u32 byte length + UTF-8 bytes
    node := i32 offset, i32 length, i32 start_line, i32 end_line
            u32 location count
                per location: i32 uri index (-1 = none),
                              i32 start_line, i32 start_column,
                              i32 end_line, i32 end_column
            u32 child count, then child nodes

Each distinct source URI is stored once in the table and referenced
by index from the locations.
"""

from __future__ import annotations

import io
import struct
from typing import BinaryIO

from gensync.core.models.trace import LocationData, TraceRegion

MAGIC = b"GTRC"
VERSION = 1

_HEADER = struct.Struct(">4sH")
_COUNT = struct.Struct(">I")
_SPAN = struct.Struct(">iiii")
_LOCATION = struct.Struct(">iiiii")


class TraceFormatError(ValueError):
    """Raised when trace data cannot be decoded."""


class TraceRegionSerializer:
    """Encodes and decodes ``TraceRegion`` trees."""

    def write(self, region: TraceRegion) -> bytes:
        buffer = io.BytesIO()
        self.write_to(region, buffer)
        return buffer.getvalue()

    def write_to(self, region: TraceRegion, stream: BinaryIO) -> None:
        uris = region.source_uris()
        index = {uri: i for i, uri in enumerate(uris)}

        stream.write(_HEADER.pack(MAGIC, VERSION))
        stream.write(_COUNT.pack(len(uris)))
        for uri in uris:
            encoded = uri.encode("utf-8")
            stream.write(_COUNT.pack(len(encoded)))
            stream.write(encoded)

        # Pre-order walk; each node carries its child count, so the
        # reader can rebuild the shape without end markers.
        for node in region.walk():
            stream.write(_SPAN.pack(node.offset, node.length, node.start_line, node.end_line))
            stream.write(_COUNT.pack(len(node.locations)))
            for loc in node.locations:
                uri_index = -1 if loc.source_uri is None else index[loc.source_uri]
                stream.write(
                    _LOCATION.pack(
                        uri_index, loc.start_line, loc.start_column, loc.end_line, loc.end_column
                    )
                )
            stream.write(_COUNT.pack(len(node.children)))

    def read(self, data: bytes) -> TraceRegion:
        stream = io.BytesIO(data)
        region = self.read_from(stream)
        if stream.read(1):
            raise TraceFormatError("Trailing bytes after trace data")
        return region

    def read_from(self, stream: BinaryIO) -> TraceRegion:
        magic, version = _unpack(_HEADER, stream)
        if magic != MAGIC:
            raise TraceFormatError(f"Not a trace file (magic {magic!r})")
        if version != VERSION:
            raise TraceFormatError(f"Unsupported trace format version {version}")

        (uri_count,) = _unpack(_COUNT, stream)
        uris = []
        for _ in range(uri_count):
            (size,) = _unpack(_COUNT, stream)
            raw = stream.read(size)
            if len(raw) != size:
                raise TraceFormatError("Truncated trace data")
            try:
                uris.append(raw.decode("utf-8"))
            except UnicodeDecodeError as e:
                raise TraceFormatError(f"Invalid source uri: {e}") from e

        root, child_count = self._read_node(stream, uris)
        # (node, children still to read)
        pending: list[tuple[TraceRegion, int]] = [(root, child_count)]
        while pending:
            parent, remaining = pending[-1]
            if remaining == 0:
                pending.pop()
                continue
            pending[-1] = (parent, remaining - 1)
            child, child_count = self._read_node(stream, uris)
            parent.children.append(child)
            pending.append((child, child_count))
        return root

    def _read_node(self, stream: BinaryIO, uris: list[str]) -> tuple[TraceRegion, int]:
        offset, length, start_line, end_line = _unpack(_SPAN, stream)
        (location_count,) = _unpack(_COUNT, stream)
        raw_locations = [_unpack(_LOCATION, stream) for _ in range(location_count)]
        (child_count,) = _unpack(_COUNT, stream)

        try:
            locations = [self._location(fields, uris) for fields in raw_locations]
            region = TraceRegion(
                offset=offset,
                length=length,
                start_line=start_line,
                end_line=end_line,
                locations=locations,
            )
        except ValueError as e:
            raise TraceFormatError(f"Invalid trace region: {e}") from e
        return region, child_count

    @staticmethod
    def _location(fields: tuple, uris: list[str]) -> LocationData:
        uri_index, start_line, start_column, end_line, end_column = fields
        if uri_index >= len(uris) or uri_index < -1:
            raise TraceFormatError(f"Source uri index {uri_index} out of range")
        return LocationData(
            source_uri=None if uri_index == -1 else uris[uri_index],
            start_line=start_line,
            start_column=start_column,
            end_line=end_line,
            end_column=end_column,
        )


def _unpack(layout: struct.Struct, stream: BinaryIO) -> tuple:
    raw = stream.read(layout.size)
    if len(raw) != layout.size:
        raise TraceFormatError("Truncated trace data")
    return layout.unpack(raw)
