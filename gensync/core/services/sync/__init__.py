"""
Output synchronization — write/update/delete of generated files.

Public API:
    from gensync.core.services.sync import OutputSynchronizer, contents_changed
    from gensync.core.services.sync import FileCallback, NullFileCallback, PostProcessor
"""

from gensync.core.services.sync.callbacks import (
    FileCallback,
    NullFileCallback,
    PostProcessor,
    RecordingFileCallback,
)
from gensync.core.services.sync.comparator import contents_changed
from gensync.core.services.sync.synchronizer import TRACE_FILE_EXTENSION, OutputSynchronizer

__all__ = [
    "FileCallback",
    "NullFileCallback",
    "OutputSynchronizer",
    "PostProcessor",
    "RecordingFileCallback",
    "TRACE_FILE_EXTENSION",
    "contents_changed",
]
