"""
Search tools for FetchLog.

This package contains the components of the search-and-export pipeline:
directory walking, binary detection, name and content matching, archive
inspection, result collection and export.
"""

from .cancellation import CancellationToken
from .content_sniffer import ContentSniffer
from .glob_matcher import GlobMatcher
from .matcher import Matcher
from .archive_scanner import ArchiveScanner
from .fs_walker import DirectoryWalker
from .result_collector import ResultCollector
from .exporter import Exporter

__all__ = [
    'CancellationToken',
    'ContentSniffer',
    'GlobMatcher',
    'Matcher',
    'ArchiveScanner',
    'DirectoryWalker',
    'ResultCollector',
    'Exporter',
]
