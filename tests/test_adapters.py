"""
Tests for the in-memory store and the cancellation token.
"""

import io
from pathlib import PurePosixPath

import pytest

from gensync.adapters.base import StoreError
from gensync.adapters.memory import InMemoryFileStore
from gensync.core.cancellation import CancellationToken
from gensync.core.errors import OperationCancelledError


def P(path: str) -> PurePosixPath:
    return PurePosixPath(path)


class TestInMemoryFileStore:
    def test_seeded_files_and_parents(self):
        store = InMemoryFileStore(files={"model/Foo.dsl": "entity Foo {}", "raw.bin": b"\x00\x01"})

        assert store.is_container(P("model"))
        assert store.text("model/Foo.dsl") == "entity Foo {}"
        assert store.contents("raw.bin") == b"\x00\x01"
        assert store.operations == []

    def test_operation_log(self):
        store = InMemoryFileStore()
        store.create_container(P("gen"))
        store.create(P("gen/a.txt"), io.BytesIO(b"a"))
        store.write(P("gen/a.txt"), io.BytesIO(b"b"))
        store.touch(P("gen/a.txt"))
        store.set_derived(P("gen/a.txt"), True)
        store.delete(P("gen/a.txt"))

        assert [op for op, _ in store.operations] == [
            "create_container", "create", "write", "touch", "set_derived", "delete",
        ]
        assert store.ops("write") == ["gen/a.txt"]

    def test_stamps(self):
        store = InMemoryFileStore(files={"a.txt": "a"})
        before = store.stamp("a.txt")

        store.touch(P("a.txt"))

        assert store.stamp("a.txt") > before
        assert store.text("a.txt") == "a"

    def test_create_rules(self):
        store = InMemoryFileStore(files={"a.txt": "a"})

        with pytest.raises(StoreError, match="already exists"):
            store.create(P("a.txt"), io.BytesIO(b""))
        with pytest.raises(StoreError, match="Container does not exist"):
            store.create(P("gen/b.txt"), io.BytesIO(b""))

    def test_delete_history_and_derived(self):
        store = InMemoryFileStore(files={"a.txt": "a"})
        store.set_derived(P("a.txt"), True)

        store.delete(P("a.txt"), keep_history=True)

        assert store.history == [(P("a.txt"), b"a")]
        assert not store.is_derived(P("a.txt"))

    def test_injected_failure(self):
        store = InMemoryFileStore(files={"a.txt": "a"})
        store.set_failure("read", "a.txt", "unreadable")

        with pytest.raises(StoreError, match="unreadable") as exc_info:
            store.read(P("a.txt"))
        assert exc_info.value.path == P("a.txt")

        store.clear_failures()
        assert store.read(P("a.txt")).read() == b"a"

    def test_list_files(self):
        store = InMemoryFileStore(files={"gen/a.txt": "", "gen/sub/b.txt": "", "c.txt": ""})

        assert store.list_files(P("gen")) == [P("gen/a.txt"), P("gen/sub/b.txt")]
        assert len(store.list_files(P("."))) == 3

    def test_encodings(self):
        store = InMemoryFileStore(encodings={".properties": "latin-1"})

        assert store.resolve_encoding(P("x.properties")) == "latin-1"
        assert store.resolve_encoding(P("x.java")) == "utf-8"


class TestCancellationToken:
    def test_initially_clear(self):
        token = CancellationToken()
        assert token.cancelled is False
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()

        assert token.cancelled is True
        with pytest.raises(OperationCancelledError):
            token.raise_if_cancelled()
