"""
Cooperative cancellation for long-running engine calls.

A token is shared between the caller and the engine. The caller sets it;
the engine polls it at iteration boundaries and aborts the current phase.
"""

import threading
import logging

from ..errors import OperationCancelledError


logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        if not self._event.is_set():
            logger.info("Cancellation requested")
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if cancellation was signalled."""
        if self._event.is_set():
            raise OperationCancelledError()


def check_cancelled(token) -> None:
    """Poll an optional token."""
    if token is not None:
        token.raise_if_cancelled()
