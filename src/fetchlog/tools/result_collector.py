"""
Ordered accumulation of search matches.
"""

import logging
from typing import List, Set, Tuple

from ..models.match_record import MatchRecord


logger = logging.getLogger(__name__)


class ResultCollector:
    """
    Collects match records in traversal order.

    Files and archives are tracked by path so each is reported at most once
    per search, even when overlapping roots visit it again.
    """

    def __init__(self):
        self._records: List[MatchRecord] = []
        self._processed_files: Set[str] = set()
        self._processed_containers: Set[str] = set()

    def add_file(self, path: str) -> bool:
        """
        Record a matched plain file.

        Returns:
            False if the file had already been reported
        """
        if path in self._processed_files:
            logger.debug(f"File already reported: {path}")
            return False

        self._records.append(MatchRecord.for_file(path))
        self._processed_files.add(path)
        return True

    def add_archive(self, path: str) -> bool:
        """
        Record a matched archive.

        Returns:
            False if the archive had already been reported
        """
        if path in self._processed_containers:
            logger.debug(f"Archive already reported: {path}")
            return False

        self._records.append(MatchRecord.for_archive(path))
        self._processed_containers.add(path)
        return True

    def is_reported(self, path: str) -> bool:
        """Check if a file or archive has already been reported."""
        return path in self._processed_files or path in self._processed_containers

    @property
    def records(self) -> Tuple[MatchRecord, ...]:
        """Immutable snapshot of the collected records."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)
