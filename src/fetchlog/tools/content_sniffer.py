"""
Binary content detection for FetchLog.

Content filters are only applied to files that look like text. Known text
extensions skip detection entirely; everything else is classified from its
first bytes.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from ..models.config import DEFAULT_TEXT_EXTENSIONS


logger = logging.getLogger(__name__)

DEFAULT_SNIFF_BYTES = 512

# Control bytes 0x00-0x08 mark a file as binary. Tab and above never do.
_BINARY_BYTES = frozenset(range(0, 9))


class ContentSniffer:
    """
    Classifies files as text or binary before content scanning.

    The heuristic is deliberately crude: only bytes 0 through 8 in the
    sniffed window count as binary markers.
    """

    def __init__(self, text_extensions: Optional[Iterable[str]] = None,
                 sniff_bytes: int = DEFAULT_SNIFF_BYTES):
        """
        Initialize the sniffer.

        Args:
            text_extensions: Extensions always treated as text (lowercase, leading dot)
            sniff_bytes: Number of leading bytes inspected
        """
        if text_extensions is None:
            text_extensions = DEFAULT_TEXT_EXTENSIONS
        self.text_extensions = frozenset(ext.lower() for ext in text_extensions)
        self.sniff_bytes = sniff_bytes

    @classmethod
    def from_config(cls, config) -> 'ContentSniffer':
        """Create a sniffer from a SnifferConfig."""
        return cls(text_extensions=config.text_extensions, sniff_bytes=config.sniff_bytes)

    def is_binary(self, path) -> bool:
        """
        Check if a file should be treated as binary.

        Args:
            path: Path to the file

        Returns:
            True if the file is binary or cannot be read
        """
        file_path = Path(path)
        if file_path.suffix.lower() in self.text_extensions:
            return False

        try:
            with open(file_path, 'rb') as f:
                chunk = f.read(self.sniff_bytes)
        except OSError as e:
            logger.debug(f"Cannot read {file_path} for binary detection, assuming binary: {e}")
            return True

        return any(byte in _BINARY_BYTES for byte in chunk)
