"""
Exception types raised by the FetchLog engine.

Per-item failures (unreadable files, corrupt archives, failed copies) are
recovered locally and never raise; only cancellation and unexpected errors
reach the caller.
"""

from typing import Optional


class FetchLogError(Exception):
    """Base class for errors surfaced by the engine."""
    pass


class OperationCancelledError(FetchLogError):
    """Raised when a cancellation signal is observed."""

    def __init__(self, message: str = "Operation was cancelled"):
        super().__init__(message)


class SearchCancelledError(OperationCancelledError):
    """Raised when a search is cancelled; no partial results are returned."""

    def __init__(self, message: str = "Search operation was cancelled"):
        super().__init__(message)


class ExportCancelledError(OperationCancelledError):
    """
    Raised when an export is cancelled.

    Files copied before the signal was observed stay on disk; their number
    is available as ``copied_count``.
    """

    def __init__(self, copied_count: int, message: Optional[str] = None):
        self.copied_count = copied_count
        super().__init__(message or f"Export was cancelled after copying {copied_count} file(s)")


class SearchError(FetchLogError):
    """Raised when a search aborts on an unexpected error."""
    pass


class ExportError(FetchLogError):
    """Raised when an export aborts on an unexpected error."""
    pass
