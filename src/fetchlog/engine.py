"""
Search-and-export engine for FetchLog.

This module exposes the two operations a front end drives in sequence:
``search`` walks the request roots and returns the matches, ``export``
copies them into the output directory. Both run synchronously; the
``submit_*`` variants run them on a background worker and return futures.
"""

import time
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from .errors import (
    ExportError,
    FetchLogError,
    OperationCancelledError,
    SearchCancelledError,
    SearchError,
)
from .models.config import FetchLogConfig
from .models.match_record import MatchRecord
from .models.search_request import SearchRequest
from .tools.archive_scanner import ArchiveScanner
from .tools.cancellation import CancellationToken, check_cancelled
from .tools.content_sniffer import ContentSniffer
from .tools.exporter import Exporter
from .tools.fs_walker import DirectoryWalker
from .tools.matcher import Matcher
from .tools.result_collector import ResultCollector


logger = logging.getLogger(__name__)

ProgressSink = Optional[Callable[[str], None]]


class SearchEngine:
    """
    Runs search and export pipelines.

    One engine may serve many calls, but each call runs on its own
    collector and never shares state with another.
    """

    def __init__(self, config: Optional[FetchLogConfig] = None):
        """
        Initialize the engine.

        Args:
            config: Application configuration; defaults are used if omitted
        """
        self.config = config or FetchLogConfig()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._stats: Dict[str, Any] = {}
        self.reset_stats()

    def search(self, request: SearchRequest, progress: ProgressSink = None,
               cancel: Optional[CancellationToken] = None) -> Tuple[MatchRecord, ...]:
        """
        Find every file and archive matching the request.

        Args:
            request: What to search for and where
            progress: Optional callable receiving status lines
            cancel: Optional cancellation token

        Returns:
            Matches in traversal order

        Raises:
            SearchCancelledError: If cancellation is signalled; partial
                results are discarded
            SearchError: On any error outside the per-item recovery paths
        """
        self.reset_stats()
        started = time.monotonic()
        logger.info(f"Starting search: {request}")

        try:
            records = self._run_search(request, progress, cancel)
        except OperationCancelledError:
            logger.info("Search cancelled")
            raise SearchCancelledError() from None
        except FetchLogError:
            raise
        except Exception as e:
            logger.error(f"Search failed: {e}")
            raise SearchError(f"Search failed: {e}") from e
        finally:
            self._stats['elapsed_seconds'] = time.monotonic() - started

        logger.info(f"Search finished with {len(records)} match(es) "
                    f"in {self._stats['elapsed_seconds']:.2f}s")
        return records

    def _run_search(self, request: SearchRequest, progress: ProgressSink,
                    cancel: Optional[CancellationToken]) -> Tuple[MatchRecord, ...]:
        check_cancelled(cancel)

        walker = DirectoryWalker(progress)
        matcher = Matcher(ContentSniffer.from_config(self.config.sniffer))
        scanner = ArchiveScanner(matcher)
        collector = ResultCollector()

        for path in walker.walk(request.roots, request.recursive):
            check_cancelled(cancel)
            self._stats['files_scanned'] += 1
            name = Path(path).name

            if request.search_in_archives and self.config.archives.is_archive(path):
                self._stats['archives_scanned'] += 1
                if collector.is_reported(path):
                    continue
                if not scanner.scan_archive(path, request, cancel):
                    continue
                if self._collect(collector.add_archive, path):
                    _report(progress, f"Found matches in ZIP: {name}")
            elif collector.is_reported(path):
                continue
            elif matcher.match_file(path, request):
                if self._collect(collector.add_file, path):
                    _report(progress, f"Match found: {name}")

        # A signal raised after the last item still voids the search
        check_cancelled(cancel)

        walker_stats = walker.get_stats()
        self._stats['roots_missing'] = walker_stats['roots_missing']
        self._stats['directory_errors'] = walker_stats['errors']
        self._stats['archives_unreadable'] = scanner.get_stats()['archives_unreadable']
        self._stats['matches'] = len(collector)
        return collector.records

    def _collect(self, add: Callable[[str], bool], path: str) -> bool:
        try:
            return add(path)
        except OSError as e:
            # The file vanished or became unreadable between matching and stat
            logger.warning(f"Cannot record match {path}: {e}")
            self._stats['files_skipped'] += 1
            return False

    def export(self, records: Iterable[MatchRecord], output_path: Union[str, Path, None] = None,
               progress: ProgressSink = None, cancel: Optional[CancellationToken] = None) -> int:
        """
        Copy matches into the output directory.

        Args:
            records: Matches returned by ``search``
            output_path: Destination directory; defaults to the configured
                output path
            progress: Optional callable receiving status lines
            cancel: Optional cancellation token

        Returns:
            Number of files copied

        Raises:
            ExportCancelledError: If cancellation is signalled; copies made
                before the signal remain on disk
            ExportError: On any error outside the per-record recovery path
        """
        if output_path is None:
            output_path = self.config.defaults.output_path

        try:
            copied = Exporter(progress).export(records, output_path, cancel)
        except FetchLogError:
            raise
        except Exception as e:
            logger.error(f"Export to {output_path} failed: {e}")
            raise ExportError(f"Export to {output_path} failed: {e}") from e

        self._stats['files_copied'] = copied
        return copied

    def submit_search(self, request: SearchRequest, progress: ProgressSink = None,
                      cancel: Optional[CancellationToken] = None) -> 'Future[Tuple[MatchRecord, ...]]':
        """Run ``search`` on the background worker."""
        return self._get_executor().submit(self.search, request, progress, cancel)

    def submit_export(self, records: Iterable[MatchRecord], output_path: Union[str, Path, None] = None,
                      progress: ProgressSink = None,
                      cancel: Optional[CancellationToken] = None) -> 'Future[int]':
        """Run ``export`` on the background worker."""
        return self._get_executor().submit(self.export, tuple(records), output_path, progress, cancel)

    def _get_executor(self) -> ThreadPoolExecutor:
        # A single worker keeps one pipeline step running at a time
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fetchlog")
        return self._executor

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background worker, if one was started."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def __enter__(self) -> 'SearchEngine':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the last search and export.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'files_scanned': 0,
            'archives_scanned': 0,
            'archives_unreadable': 0,
            'matches': 0,
            'files_skipped': 0,
            'roots_missing': 0,
            'directory_errors': 0,
            'files_copied': 0,
            'elapsed_seconds': 0.0,
        }


def _report(progress: ProgressSink, message: str) -> None:
    if progress is not None:
        progress(message)
