"""
Trace data — serialization, source maps and the source trace index.

Public API:
    from gensync.core.services.trace import TraceRegionSerializer, SmapBuilder
    from gensync.core.services.trace import SourceTraceIndex, DEFAULT_GENERATOR_NAME
"""

from gensync.core.services.trace.serializer import TraceFormatError, TraceRegionSerializer
from gensync.core.services.trace.smap import SmapBuilder, smap_name_for
from gensync.core.services.trace.source_index import (
    DEFAULT_GENERATOR_NAME,
    MarkerInstaller,
    SourceTraceIndex,
)
from gensync.core.services.trace.uris import store_path_from_uri, uri_for_path

__all__ = [
    "DEFAULT_GENERATOR_NAME",
    "MarkerInstaller",
    "SmapBuilder",
    "SourceTraceIndex",
    "TraceFormatError",
    "TraceRegionSerializer",
    "smap_name_for",
    "store_path_from_uri",
    "uri_for_path",
]
