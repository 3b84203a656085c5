"""
Tests for the local filesystem store and a synchronizer running on it.
"""

import io
import os
from pathlib import Path, PurePosixPath

import pytest

from gensync.adapters.base import StoreError
from gensync.adapters.filesystem import LocalFileStore
from gensync.adapters.markers import JsonMarkerStore
from gensync.core.models.content import TracedText
from gensync.core.models.output import OutputConfiguration, OutputConfigurations
from gensync.core.services.sync.synchronizer import OutputSynchronizer
from gensync.core.services.trace.source_index import SourceTraceIndex

from conftest import make_region


def P(path: str) -> PurePosixPath:
    return PurePosixPath(path)


@pytest.fixture
def fs(tmp_path: Path) -> LocalFileStore:
    return LocalFileStore(tmp_path)


class TestLocalFileStore:
    def test_create_and_read(self, fs, tmp_path):
        fs.create(P("a.txt"), io.BytesIO(b"hello"))

        assert (tmp_path / "a.txt").read_bytes() == b"hello"
        with fs.read(P("a.txt")) as f:
            assert f.read() == b"hello"

    def test_create_refuses_existing(self, fs):
        fs.create(P("a.txt"), io.BytesIO(b"one"))
        with pytest.raises(StoreError, match="already exists"):
            fs.create(P("a.txt"), io.BytesIO(b"two"))

    def test_create_needs_container(self, fs):
        with pytest.raises(StoreError, match="Container does not exist"):
            fs.create(P("gen/a.txt"), io.BytesIO(b""))

    def test_write_replaces(self, fs, tmp_path):
        fs.create(P("a.txt"), io.BytesIO(b"one"))
        fs.write(P("a.txt"), io.BytesIO(b"two"))

        assert (tmp_path / "a.txt").read_bytes() == b"two"
        assert not list(tmp_path.glob(".*.tmp"))

    def test_write_missing(self, fs):
        with pytest.raises(StoreError, match="File not found"):
            fs.write(P("a.txt"), io.BytesIO(b""))

    def test_read_missing(self, fs):
        with pytest.raises(StoreError):
            fs.read(P("a.txt"))

    def test_containers(self, fs):
        fs.create_container(P("gen"))

        assert fs.exists(P("gen"))
        assert fs.is_container(P("gen"))
        with pytest.raises(StoreError):
            fs.create_container(P("x/y"))

    def test_touch(self, fs, tmp_path):
        fs.create(P("a.txt"), io.BytesIO(b""))
        os.utime(tmp_path / "a.txt", (1_000_000, 1_000_000))

        fs.touch(P("a.txt"))

        assert (tmp_path / "a.txt").stat().st_mtime > 1_000_000

    def test_derived_flag_persists(self, fs, tmp_path):
        fs.create(P("a.txt"), io.BytesIO(b""))
        fs.set_derived(P("a.txt"), True)

        assert fs.is_derived(P("a.txt"))
        assert LocalFileStore(tmp_path).is_derived(P("a.txt"))

        fs.set_derived(P("a.txt"), False)
        assert not LocalFileStore(tmp_path).is_derived(P("a.txt"))

    def test_delete_keeps_history(self, fs, tmp_path):
        fs.create(P("a.txt"), io.BytesIO(b"old"))
        fs.set_derived(P("a.txt"), True)

        fs.delete(P("a.txt"), keep_history=True)

        assert not fs.exists(P("a.txt"))
        assert not fs.is_derived(P("a.txt"))
        copies = list((tmp_path / ".state" / "history").glob("a.txt.*"))
        assert len(copies) == 1
        assert copies[0].read_bytes() == b"old"

    def test_delete_without_history(self, fs, tmp_path):
        fs.create(P("a.txt"), io.BytesIO(b"old"))
        fs.delete(P("a.txt"))
        assert not (tmp_path / ".state" / "history").exists()

    def test_list_files_skips_state(self, fs):
        fs.create_container(P("gen"))
        fs.create(P("gen/a.txt"), io.BytesIO(b""))
        fs.create(P("b.txt"), io.BytesIO(b""))
        fs.set_derived(P("b.txt"), True)

        assert fs.list_files(P(".")) == [P("b.txt"), P("gen/a.txt")]
        assert fs.list_files(P("gen")) == [P("gen/a.txt")]
        assert fs.list_files(P("missing")) == []

    def test_rejects_escaping_paths(self, fs):
        with pytest.raises(StoreError, match="escapes"):
            fs.exists(P("../outside.txt"))
        with pytest.raises(StoreError, match="escapes"):
            fs.read(P("/etc/passwd"))

    def test_encodings(self, tmp_path):
        fs = LocalFileStore(tmp_path, default_encoding="utf-16", encodings={".properties": "latin-1"})

        assert fs.resolve_encoding(P("a.properties")) == "latin-1"
        assert fs.resolve_encoding(P("a.java")) == "utf-16"


class TestSynchronizerOnDisk:
    def test_generation_pass(self, tmp_path):
        (tmp_path / "model").mkdir()
        (tmp_path / "model" / "Foo.dsl").write_text("entity Foo {}\n")
        store = LocalFileStore(tmp_path)
        markers = JsonMarkerStore(tmp_path)
        sync = OutputSynchronizer(
            store,
            OutputConfigurations([OutputConfiguration(name="default")]),
            source_index=SourceTraceIndex(markers, store),
        )
        contents = TracedText(text="class A {}\n", trace_region=make_region("src://model/Foo.dsl"))

        first = sync.synchronize("A.java", "default", contents)
        second = sync.synchronize("A.java", "default", contents)
        sync.flush_source_traces("gen")

        assert (first.action, second.action) == ("created", "unchanged")
        assert (tmp_path / "src-gen" / "A.java").read_text() == "class A {}\n"
        assert (tmp_path / "src-gen" / "A.java._trace").is_file()
        assert (tmp_path / "src-gen" / "A.smap").read_text().startswith("SMAP\nA.java\n")
        assert store.is_derived(P("src-gen/A.java"))
        assert markers.markers_for("model/Foo.dsl") == {"gen": ["src-gen/A.java._trace"]}

    def test_clean(self, tmp_path):
        store = LocalFileStore(tmp_path)
        sync = OutputSynchronizer(store, OutputConfigurations([OutputConfiguration(name="default")]))
        sync.synchronize("A.java", "default", TracedText(text="x", trace_region=make_region()))
        (tmp_path / "src-gen" / "notes.txt").write_text("mine")

        removed = sync.clean("default")

        assert removed == [P("src-gen/A.java"), P("src-gen/A.smap")]
        assert sorted(p.name for p in (tmp_path / "src-gen").iterdir()) == ["notes.txt"]
