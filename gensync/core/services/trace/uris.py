"""
Source URIs — how trace locations address files in the store.

``src://<store path>`` and scheme-less relative paths denote files in
the managed store.  Any other scheme (``file:``, ``http:``, ...) points
outside it.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import quote, unquote, urlsplit

SOURCE_SCHEME = "src"


def store_path_from_uri(uri: str) -> PurePosixPath | None:
    """Store path addressed by ``uri``, or None for foreign URIs."""
    parts = urlsplit(uri, allow_fragments=False)
    if parts.scheme == SOURCE_SCHEME:
        raw = parts.netloc + parts.path
    elif not parts.scheme and not parts.netloc:
        raw = parts.path
    else:
        return None

    if parts.query:
        raw += "?" + parts.query
    path = PurePosixPath(unquote(raw).lstrip("/"))
    if not path.parts or ".." in path.parts:
        return None
    return path


def uri_for_path(path: PurePosixPath) -> str:
    """``src://`` URI of a store path."""
    return f"{SOURCE_SCHEME}://{quote(path.as_posix())}"
