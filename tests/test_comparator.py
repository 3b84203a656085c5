"""
Tests for change detection.
"""

import io

import pytest

from gensync.adapters.base import StoreError
from gensync.core.services.sync.comparator import contents_changed


class DribbleStream(io.RawIOBase):
    """Returns at most ``step`` bytes per read, like a slow socket."""

    def __init__(self, data: bytes, step: int = 3):
        self._data = data
        self._pos = 0
        self._step = step

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._data)
        chunk = self._data[self._pos : self._pos + min(size, self._step)]
        self._pos += len(chunk)
        return chunk


class BrokenStream(io.RawIOBase):
    def __init__(self, error: Exception):
        self._error = error

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        raise self._error


class TestContentsChanged:
    def test_equal(self):
        assert contents_changed(io.BytesIO(b"same"), io.BytesIO(b"same")) is False

    def test_both_empty(self):
        assert contents_changed(io.BytesIO(b""), io.BytesIO(b"")) is False

    def test_one_byte_differs(self):
        assert contents_changed(io.BytesIO(b"abcd"), io.BytesIO(b"abce")) is True

    def test_new_is_longer(self):
        assert contents_changed(io.BytesIO(b"abc"), io.BytesIO(b"abcd")) is True

    def test_new_is_shorter(self):
        assert contents_changed(io.BytesIO(b"abcd"), io.BytesIO(b"abc")) is True

    def test_difference_past_first_chunk(self):
        old = b"x" * 100 + b"a"
        new = b"x" * 100 + b"b"
        assert contents_changed(io.BytesIO(old), io.BytesIO(new), chunk_size=16) is True

    def test_short_reads_are_refilled(self):
        data = bytes(range(256)) * 4
        assert contents_changed(DribbleStream(data, step=5), io.BytesIO(data), chunk_size=64) is False
        assert contents_changed(io.BytesIO(data), DribbleStream(data, step=7), chunk_size=64) is False

    def test_encoding_matters(self):
        text = "grüße"
        assert contents_changed(
            io.BytesIO(text.encode("latin-1")), io.BytesIO(text.encode("utf-8"))
        ) is True

    @pytest.mark.parametrize("error", [OSError("disk gone"), StoreError("unreadable")])
    def test_unreadable_existing_counts_as_changed(self, error):
        assert contents_changed(BrokenStream(error), io.BytesIO(b"new")) is True

    def test_unreadable_new_propagates(self):
        with pytest.raises(OSError):
            contents_changed(io.BytesIO(b"old"), BrokenStream(OSError("boom")))
