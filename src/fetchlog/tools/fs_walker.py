"""
Filesystem walker for FetchLog.

This module enumerates the candidate files under a set of root directories,
either the full subtree or only the immediate children of each root.
Missing roots and unreadable directories are reported and skipped.
"""

import os
import logging
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, Optional


logger = logging.getLogger(__name__)

ProgressSink = Optional[Callable[[str], None]]


class DirectoryWalker:
    """
    Lazily yields file paths under one or more roots.

    The order is whatever the filesystem returns; it is not sorted.
    """

    def __init__(self, progress: ProgressSink = None):
        """
        Initialize the walker.

        Args:
            progress: Optional callable receiving human-readable status lines
        """
        self.progress = progress
        self._stats = {
            'roots_walked': 0,
            'roots_missing': 0,
            'directories_traversed': 0,
            'files_found': 0,
            'errors': 0
        }

    def walk(self, roots: Iterable[str], recursive: bool = True) -> Iterator[str]:
        """
        Walk through root directories and yield file paths.

        Args:
            roots: Root directory paths to search
            recursive: Whether to descend into subdirectories

        Yields:
            Paths of regular files
        """
        for root in roots:
            root_path = Path(root)
            if not root_path.is_dir():
                logger.warning(f"Root directory does not exist: {root_path}")
                self._stats['roots_missing'] += 1
                self._report(f"Directory not found: {root}")
                continue

            logger.info(f"Walking directory: {root_path} (recursive={recursive})")
            self._stats['roots_walked'] += 1
            self._report(f"Searching in: {root}")

            if recursive:
                yield from self._walk_tree(root_path)
            else:
                yield from self._list_directory(root_path)

    def _walk_tree(self, root_path: Path) -> Iterator[str]:
        for current_dir, _subdirs, files in os.walk(root_path, onerror=self._on_walk_error):
            self._stats['directories_traversed'] += 1
            for filename in files:
                self._stats['files_found'] += 1
                yield os.path.join(current_dir, filename)

    def _list_directory(self, root_path: Path) -> Iterator[str]:
        self._stats['directories_traversed'] += 1
        try:
            with os.scandir(root_path) as entries:
                files = [entry.path for entry in entries if self._is_file(entry)]
        except OSError as e:
            self._on_walk_error(e)
            return

        for path in files:
            self._stats['files_found'] += 1
            yield path

    @staticmethod
    def _is_file(entry: os.DirEntry) -> bool:
        try:
            return entry.is_file()
        except OSError:
            return False

    def _on_walk_error(self, error: OSError) -> None:
        logger.warning(f"Cannot read directory {getattr(error, 'filename', '')}: {error}")
        self._stats['errors'] += 1

    def _report(self, message: str) -> None:
        if self.progress is not None:
            self.progress(message)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walk.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'roots_walked': 0,
            'roots_missing': 0,
            'directories_traversed': 0,
            'files_found': 0,
            'errors': 0
        }
