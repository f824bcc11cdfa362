"""
Zip archive inspection for FetchLog.

An archive is treated as a single match unit: it matches when any of its
file entries satisfies the request. Entry contents are decoded and searched
as text without binary detection.
"""

import logging
import zipfile
import zlib
from pathlib import Path
from typing import Optional, Union

from ..models.search_request import SearchRequest
from .cancellation import CancellationToken, check_cancelled
from .matcher import Matcher, extension_of, read_text


logger = logging.getLogger(__name__)

# Errors that make an archive (or one of its entries) unreadable
ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    OSError,
    EOFError,
    RuntimeError,  # encrypted entries
    NotImplementedError,  # unsupported compression
)


def entry_base_name(entry_name: str) -> str:
    """Get the file name part of an archive entry path."""
    return entry_name.replace('\\', '/').rsplit('/', 1)[-1]


class ArchiveScanner:
    """Decides whether a zip archive contains at least one matching entry."""

    def __init__(self, matcher: Optional[Matcher] = None):
        self.matcher = matcher or Matcher()
        self._stats = {
            'archives_scanned': 0,
            'entries_checked': 0,
            'archives_unreadable': 0,
        }

    def scan_archive(self, zip_path: Union[str, Path], request: SearchRequest,
                     cancel: Optional[CancellationToken] = None) -> bool:
        """
        Check the entries of a zip archive against a request.

        Args:
            zip_path: Path to the zip file
            request: Search request holding the filters
            cancel: Optional token polled before each entry

        Returns:
            True if any file entry matches; False if none does or the
            archive cannot be read

        Raises:
            OperationCancelledError: If cancellation is signalled
        """
        self._stats['archives_scanned'] += 1

        try:
            with zipfile.ZipFile(zip_path, 'r') as archive:
                for info in archive.infolist():
                    check_cancelled(cancel)

                    # Directory entries
                    if info.filename.endswith('/'):
                        continue

                    self._stats['entries_checked'] += 1
                    if self._entry_matches(archive, info, request):
                        logger.debug(f"Entry {info.filename} matched in {zip_path}")
                        return True

        except ARCHIVE_ERRORS as e:
            logger.warning(f"Skipping unreadable archive {zip_path}: {e}")
            self._stats['archives_unreadable'] += 1
            return False

        return False

    def _entry_matches(self, archive: zipfile.ZipFile, info: zipfile.ZipInfo,
                       request: SearchRequest) -> bool:
        name = entry_base_name(info.filename)
        if not name:
            return False

        def load_content() -> str:
            return read_text(archive.open(info, 'r'))

        return self.matcher.is_match(name, extension_of(name), load_content, request)

    def get_stats(self):
        """Get archive scanning counters."""
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'archives_scanned': 0,
            'entries_checked': 0,
            'archives_unreadable': 0,
        }
