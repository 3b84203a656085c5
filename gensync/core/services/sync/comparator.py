"""
Change detection — byte-exact comparison of stored and new content.

Both streams are read in lockstep, one chunk at a time, so neither
side is ever fully loaded into memory.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

from gensync.adapters.base import StoreError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


def contents_changed(
    existing: BinaryIO,
    new: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bool:
    """Whether ``new`` differs from ``existing``.

    A failure reading ``existing`` counts as changed, so the caller
    rewrites the file.  A failure reading ``new`` propagates.
    """
    while True:
        try:
            old_chunk = _read_chunk(existing, chunk_size)
        except (OSError, StoreError) as e:
            logger.debug("Cannot read stored content, assuming changed: %s", e)
            return True
        new_chunk = _read_chunk(new, chunk_size)

        if old_chunk != new_chunk:
            return True
        if not old_chunk:
            return False


def _read_chunk(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes unless the stream ends first."""
    chunk = stream.read(size)
    while chunk and len(chunk) < size:
        more = stream.read(size - len(chunk))
        if not more:
            break
        chunk += more
    return chunk
