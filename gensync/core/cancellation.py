"""
Cooperative cancellation for generation passes.

The synchronizer checks the token once per call.  Nothing inside a
call is interruptible.
"""

from __future__ import annotations

import threading

from gensync.core.errors import OperationCancelledError


class CancellationToken:
    """Thread-safe cancel flag shared between a pass owner and its workers."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError("Generation pass cancelled")
