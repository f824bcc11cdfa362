"""
Export of matched files into a staging directory.

Each record is copied under its display name. When that name is already
taken in the destination, a numeric suffix is inserted before the extension
(``name_1.ext``, ``name_2.ext``, ...) until a free name is found.
"""

import shutil
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from ..errors import ExportCancelledError, OperationCancelledError
from ..models.match_record import MatchRecord
from .cancellation import CancellationToken, check_cancelled
from .matcher import extension_of


logger = logging.getLogger(__name__)


def resolve_destination(output_dir: Path, file_name: str) -> Path:
    """
    Find a free destination path for ``file_name`` inside ``output_dir``.

    The directory is re-examined on every collision, so files left over from
    earlier exports are never overwritten.
    """
    destination = output_dir / file_name
    extension = extension_of(file_name)
    stem = file_name[:len(file_name) - len(extension)]

    counter = 1
    while destination.exists():
        destination = output_dir / f"{stem}_{counter}{extension}"
        counter += 1

    return destination


class Exporter:
    """Copies match records into an output directory."""

    def __init__(self, progress: Optional[Callable[[str], None]] = None):
        """
        Initialize the exporter.

        Args:
            progress: Optional callable receiving human-readable status lines
        """
        self.progress = progress

    def export(self, records: Iterable[MatchRecord], output_path: Union[str, Path],
               cancel: Optional[CancellationToken] = None) -> int:
        """
        Copy every record into the output directory.

        A failed copy is reported and skipped; the remaining records are
        still processed.

        Args:
            records: Records to copy, in order
            output_path: Destination directory, created if missing
            cancel: Optional token polled before each copy

        Returns:
            Number of files copied

        Raises:
            ExportCancelledError: If cancellation is signalled; carries the
                number of files copied so far
        """
        output_dir = Path(output_path).expanduser()
        output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Exporting matches to {output_dir}")

        copied_count = 0
        for record in records:
            try:
                check_cancelled(cancel)
            except OperationCancelledError:
                logger.info(f"Export cancelled after {copied_count} file(s)")
                raise ExportCancelledError(copied_count) from None

            try:
                destination = resolve_destination(output_dir, record.display_name)
                shutil.copyfile(record.source_path, destination)
            except OSError as e:
                logger.warning(f"Error copying {record.source_path}: {e}")
                self._report(f"Error copying {record.display_name}: {e}")
                continue

            copied_count += 1
            self._report(f"Copied: {destination.name}")

        logger.info(f"Copied {copied_count} file(s) to {output_dir}")
        return copied_count

    def _report(self, message: str) -> None:
        if self.progress is not None:
            self.progress(message)
