"""
State file persistence — atomic read/write of small JSON documents.

Bookkeeping that lives next to a store (derived-flag registry, trace
markers) is kept as JSON under ``.state/``.  Writes are atomic (write
to a temp file, then rename) so a crash mid-write never leaves a
truncated document behind.
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Default state directory (relative to the store root)
DEFAULT_STATE_DIR = ".state"


def state_path(root: Path, file_name: str) -> Path:
    """Get the path of a state document for a store rooted at ``root``."""
    return root / DEFAULT_STATE_DIR / file_name


def load_json(path: Path, default: Any = None) -> Any:
    """Load a JSON document.

    Args:
        path: Path to the JSON file.
        default: Returned when the file is missing or unreadable.

    Returns:
        The decoded document, or ``default``.
    """
    if not path.is_file():
        logger.debug("No state file at %s — starting fresh", path)
        return default

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        logger.warning("Corrupt state file %s: %s — starting fresh", path, e)
        return default
    except OSError as e:
        logger.warning("Cannot load state from %s: %s — starting fresh", path, e)
        return default


def save_json(data: Any, path: Path) -> None:
    """Save a JSON document (atomic write).

    Args:
        data: JSON-serializable document.
        path: Target path; parent directories are created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True) + "\n"

    try:
        _fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".state_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        try:
            with open(_fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(path)
            logger.debug("State saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except OSError as e:
        logger.error("Failed to save state to %s: %s", path, e)
        raise
