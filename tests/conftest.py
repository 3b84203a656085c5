"""
Shared test fixtures and configuration.
"""

from pathlib import PurePosixPath

import pytest

from gensync.adapters.memory import InMemoryFileStore
from gensync.core.models.output import OutputConfiguration, OutputConfigurations
from gensync.core.models.trace import LocationData, TraceRegion
from gensync.core.services.sync.callbacks import RecordingFileCallback
from gensync.core.services.sync.synchronizer import OutputSynchronizer
from gensync.core.services.trace.source_index import SourceTraceIndex


class RecordingInstaller:
    """Marker installer that remembers every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[PurePosixPath, str, list[PurePosixPath]]] = []

    def install(self, source, generator_name, trace_paths) -> None:
        self.calls.append((source, generator_name, list(trace_paths)))


def make_region(uri: str = "src://Foo.dsl", start: int = 3, end: int = 5) -> TraceRegion:
    """Root region covering generated lines 1..(end-start+1) traced to ``uri``."""
    return TraceRegion(
        offset=0,
        length=42,
        start_line=1,
        end_line=end - start + 1,
        locations=[LocationData(source_uri=uri, start_line=start, end_line=end)],
    )


@pytest.fixture
def store() -> InMemoryFileStore:
    return InMemoryFileStore(files={"Foo.dsl": "entity Foo {}\n"})


@pytest.fixture
def outputs() -> OutputConfigurations:
    return OutputConfigurations([
        OutputConfiguration(name="default", output_directory="src-gen"),
        OutputConfiguration(
            name="keep",
            output_directory="keep-gen",
            override_existing_resources=False,
        ),
        OutputConfiguration(
            name="nocreate",
            output_directory="missing-gen",
            create_output_directory=False,
        ),
        OutputConfiguration(
            name="plain",
            output_directory="plain-gen",
            set_derived_property=False,
            keep_local_history=False,
        ),
    ])


@pytest.fixture
def installer() -> RecordingInstaller:
    return RecordingInstaller()


@pytest.fixture
def callback() -> RecordingFileCallback:
    return RecordingFileCallback()


@pytest.fixture
def index(installer: RecordingInstaller, store: InMemoryFileStore) -> SourceTraceIndex:
    return SourceTraceIndex(installer, store)


@pytest.fixture
def synchronizer(
    store: InMemoryFileStore,
    outputs: OutputConfigurations,
    callback: RecordingFileCallback,
    index: SourceTraceIndex,
) -> OutputSynchronizer:
    return OutputSynchronizer(store, outputs, callback=callback, source_index=index)
