"""
Inclusion decision for FetchLog.

The matcher combines the extension filter, exclude and include patterns and
the content filter of a request into a single yes/no answer for a plain file
or a zip entry name.
"""

import io
import logging
from pathlib import Path
from typing import Callable, Optional, Union, BinaryIO

from ..models.search_request import SearchRequest
from .content_sniffer import ContentSniffer
from .glob_matcher import GlobMatcher


logger = logging.getLogger(__name__)

ContentSource = Optional[Callable[[], str]]


class _BinaryContent(Exception):
    """Signals that a file was classified as binary during lazy loading."""
    pass


def extension_of(name: str) -> str:
    """
    Get the extension of a file name, including the leading dot.

    Dot files count as pure extensions (".bashrc"), a trailing dot yields no
    extension.
    """
    base = name.replace('\\', '/').rsplit('/', 1)[-1]
    index = base.rfind('.')
    if index == -1 or index == len(base) - 1:
        return ''
    return base[index:]


def read_text(source: Union[str, Path, BinaryIO]) -> str:
    """
    Read a file path or binary stream as UTF-8 text.

    A byte order mark is dropped and undecodable bytes are replaced.
    """
    if isinstance(source, (str, Path)):
        with open(source, 'r', encoding='utf-8-sig', errors='replace') as f:
            return f.read()

    with io.TextIOWrapper(source, encoding='utf-8-sig', errors='replace') as reader:
        return reader.read()


def contains_text(content: str, needle: str, case_sensitive: bool) -> bool:
    """Ordinal substring test, optionally ignoring case."""
    if case_sensitive:
        return needle in content
    # Upper-casing keeps the Kelvin sign and dotted capital I distinct from ASCII
    return needle.upper() in content.upper()


class Matcher:
    """
    Decides whether a file name, and if needed its content, satisfies a request.

    Checks run in a fixed order and stop at the first failure: extension,
    exclude patterns, include patterns, content.
    """

    def __init__(self, sniffer: Optional[ContentSniffer] = None):
        self.sniffer = sniffer or ContentSniffer()

    def matches_structure(self, name: str, extension: str, request: SearchRequest) -> bool:
        """
        Apply the name-only checks: extension, exclude and include patterns.

        Args:
            name: Base file name
            extension: Extension of the name, with leading dot
            request: Search request holding the filters

        Returns:
            True if the name passes every structural check
        """
        if request.extensions and extension.lower() not in request.extensions:
            return False

        for pattern in request.exclude_patterns:
            if GlobMatcher.matches(name, pattern):
                return False

        if request.include_patterns and not GlobMatcher.matches_any(name, request.include_patterns):
            return False

        return True

    def is_match(self, name: str, extension: str, content: ContentSource,
                 request: SearchRequest) -> bool:
        """
        Full inclusion decision.

        Args:
            name: Base file name
            extension: Extension of the name, with leading dot
            content: Callable returning the text to search; only invoked when
                a content filter is set and the structural checks passed
            request: Search request holding the filters

        Returns:
            True if the target matches
        """
        if not self.matches_structure(name, extension, request):
            return False

        if not request.has_content_filter():
            return True

        if content is None:
            return False

        return contains_text(content(), request.content_filter, request.case_sensitive)

    def match_file(self, path: Union[str, Path], request: SearchRequest) -> bool:
        """
        Decide whether a plain file on disk matches.

        Binary files never match a content filter. Files that cannot be read
        are reported as non-matches.
        """
        file_path = Path(path)
        name = file_path.name

        def load_content() -> str:
            if self.sniffer.is_binary(file_path):
                logger.debug(f"Skipping content scan of binary file: {file_path}")
                raise _BinaryContent()
            return read_text(file_path)

        try:
            return self.is_match(name, extension_of(name), load_content, request)
        except _BinaryContent:
            return False
        except OSError as e:
            logger.debug(f"Cannot access {file_path}, treating as non-match: {e}")
            return False
