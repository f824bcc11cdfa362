"""
Match record data models for FetchLog.

This module defines the records produced by a search: one per matched plain
file and one per zip archive that contains at least one matching entry.
"""

from typing import Dict, Optional, Any
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


SIZE_UNITS = ['B', 'KB', 'MB', 'GB', 'TB']


def format_size(size_bytes: int) -> str:
    """
    Format a byte count with base-1024 units and at most two decimals.

    Trailing zeros are dropped, so 1024 bytes is "1 KB" and 1536 is "1.5 KB".
    """
    size = float(size_bytes)
    order = 0
    while size >= 1024 and order < len(SIZE_UNITS) - 1:
        order += 1
        size /= 1024

    number = f"{size:.2f}".rstrip('0').rstrip('.')
    return f"{number} {SIZE_UNITS[order]}"


class MatchOrigin(Enum):
    """Where a match came from."""
    PLAIN_FILE = "file"
    ARCHIVE_CONTAINER = "zip"


class MatchRecord(BaseModel):
    """
    A single file reported by a search.

    For archive matches the container is the unit of the match: the record
    carries the archive's own name, path and size, never the entry's.

    Attributes:
        display_name: File name shown to the user and used on export
        source_path: Absolute path of the file to copy
        size_bytes: File size in bytes
        origin: Whether this is a plain file or a matched archive
        container_path: Path of the archive, only for archive matches
    """

    model_config = ConfigDict(frozen=True)

    display_name: str = Field(..., min_length=1, description="File name of the match")
    source_path: str = Field(..., min_length=1, description="Path of the matched file")
    size_bytes: int = Field(..., ge=0, description="File size in bytes")
    origin: MatchOrigin = Field(MatchOrigin.PLAIN_FILE, description="Kind of match")
    container_path: Optional[str] = Field(None, description="Archive path for archive matches")

    @field_validator('origin', mode='before')
    @classmethod
    def validate_origin(cls, v) -> MatchOrigin:
        """Ensure origin is a MatchOrigin enum."""
        if isinstance(v, str):
            try:
                return MatchOrigin(v)
            except ValueError:
                raise ValueError(f"Invalid match origin: {v}")
        return v

    @model_validator(mode='after')
    def validate_container(self):
        """A container path exists exactly for archive matches and is the source."""
        if self.origin == MatchOrigin.ARCHIVE_CONTAINER:
            if not self.container_path:
                raise ValueError("Archive matches require a container path")
            if self.container_path != self.source_path:
                raise ValueError("Archive matches must use the container as source path")
        elif self.container_path is not None:
            raise ValueError("Plain file matches cannot have a container path")
        return self

    @classmethod
    def for_file(cls, path: str) -> 'MatchRecord':
        """Create a record for a plain file, reading its size from disk."""
        file_path = Path(path)
        return cls(
            display_name=file_path.name,
            source_path=str(file_path),
            size_bytes=file_path.stat().st_size,
            origin=MatchOrigin.PLAIN_FILE,
        )

    @classmethod
    def for_archive(cls, path: str) -> 'MatchRecord':
        """Create a record for a matched zip archive."""
        file_path = Path(path)
        return cls(
            display_name=file_path.name,
            source_path=str(file_path),
            size_bytes=file_path.stat().st_size,
            origin=MatchOrigin.ARCHIVE_CONTAINER,
            container_path=str(file_path),
        )

    @property
    def size_human(self) -> str:
        """File size in human-readable format."""
        return format_size(self.size_bytes)

    @property
    def file_type(self) -> str:
        """Short label for the kind of match."""
        return "ZIP" if self.is_archive() else "File"

    def is_archive(self) -> bool:
        """Check if this record is a matched archive."""
        return self.origin == MatchOrigin.ARCHIVE_CONTAINER

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to dictionary representation."""
        data = self.model_dump()
        data['origin'] = self.origin.value
        data['size_human'] = self.size_human
        data['file_type'] = self.file_type
        return data

    def __str__(self) -> str:
        """String representation of the match record."""
        return f"{self.display_name} | {self.file_type} | {self.size_human} | {self.source_path}"
