"""
Domain models — Pydantic types for generated output synchronization.

All models are re-exported here for convenient access:

    from gensync.core.models import OutputConfiguration, TraceRegion, TracedText
"""

from gensync.core.models.content import (
    Content,
    GeneratedArtifact,
    PlainText,
    SyncResult,
    TracedText,
    as_content,
)
from gensync.core.models.output import (
    DEFAULT_OUTPUT,
    OutputConfiguration,
    OutputConfigurations,
)
from gensync.core.models.trace import LocationData, TraceRegion

__all__ = [
    # content.py
    "Content",
    "GeneratedArtifact",
    "PlainText",
    "SyncResult",
    "TracedText",
    "as_content",
    # output.py
    "DEFAULT_OUTPUT",
    "OutputConfiguration",
    "OutputConfigurations",
    # trace.py
    "LocationData",
    "TraceRegion",
]
