"""
Search request data model for FetchLog.

This module defines the immutable request a caller hands to the search engine:
the roots to walk, the traversal switches, and the filters every candidate
file must satisfy.
"""

import re
from typing import Dict, List, Optional, Any, Tuple
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Separators accepted when a list field is given as a single string
_LIST_SEPARATORS = re.compile(r'[,;]')


def split_list_value(value: Any) -> List[str]:
    """
    Turn a comma/semicolon separated string or a list of strings into a list
    of trimmed, non-blank items.

    Only a single string is split; list items are kept whole, so a pattern
    may itself contain a comma or semicolon.
    """
    if value is None:
        return []

    if isinstance(value, str):
        items = _LIST_SEPARATORS.split(value)
    else:
        items = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"Expected a string, got {type(item).__name__}")
            items.append(item)

    return [item.strip() for item in items if item and item.strip()]


def normalize_extension(ext: str) -> str:
    """Normalize an extension to lowercase with a single leading dot."""
    ext = ext.strip().lower()
    if not ext.startswith('.'):
        ext = '.' + ext
    return ext


class SearchRequest(BaseModel):
    """
    Represents a single search-and-export request.

    Requests are built once by the caller and never modified afterwards.

    Attributes:
        roots: Root directories to search
        recursive: Whether to descend into subdirectories
        search_in_archives: Whether zip files are opened and their entries matched
        case_sensitive: Whether the content filter comparison is case sensitive
        extensions: Lowercase extensions with a leading dot (empty = any)
        include_patterns: Glob patterns, at least one must match the file name
        exclude_patterns: Glob patterns, none may match the file name
        content_filter: Text that must appear in the file content
        output_path: Directory the matches are exported into
    """

    model_config = ConfigDict(frozen=True)

    roots: Tuple[str, ...] = Field(..., min_length=1, description="Root directories to search")
    recursive: bool = Field(True, description="Descend into subdirectories")
    search_in_archives: bool = Field(True, description="Inspect the entries of zip archives")
    case_sensitive: bool = Field(False, description="Case sensitive content comparison")
    extensions: Tuple[str, ...] = Field(default_factory=tuple, description="Extension filter")
    include_patterns: Tuple[str, ...] = Field(default_factory=tuple, description="Include glob patterns")
    exclude_patterns: Tuple[str, ...] = Field(default_factory=tuple, description="Exclude glob patterns")
    content_filter: Optional[str] = Field(None, description="Required text content")
    output_path: Optional[str] = Field(None, description="Export destination directory")

    @field_validator('roots', mode='before')
    @classmethod
    def validate_roots(cls, v: Any) -> Tuple[str, ...]:
        """Validate and normalize root directory paths."""
        if isinstance(v, (str, Path)):
            v = [v]

        normalized_roots = []
        for root in v or []:
            root = str(root)
            if not root.strip():
                continue

            # Missing roots are allowed here; the walker reports them
            root_path = str(Path(root.strip()).expanduser().absolute())
            if root_path not in normalized_roots:
                normalized_roots.append(root_path)

        if not normalized_roots:
            raise ValueError("At least one root directory must be specified")

        return tuple(normalized_roots)

    @field_validator('extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v: Any) -> Tuple[str, ...]:
        """Normalize extensions to lowercase with a leading dot."""
        extensions = []
        for ext in split_list_value(v):
            ext = normalize_extension(ext)
            if ext == '.':
                continue
            if ext not in extensions:
                extensions.append(ext)
        return tuple(extensions)

    @field_validator('include_patterns', 'exclude_patterns', mode='before')
    @classmethod
    def validate_patterns(cls, v: Any) -> Tuple[str, ...]:
        """Split and trim glob patterns, keeping their order."""
        return tuple(split_list_value(v))

    @field_validator('content_filter')
    @classmethod
    def validate_content_filter(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank content filter as no filter."""
        if v is None or not v.strip():
            return None
        return v

    @field_validator('output_path')
    @classmethod
    def validate_output_path(cls, v: Optional[str]) -> Optional[str]:
        """Expand the user directory in the output path."""
        if v is None or not v.strip():
            return None
        return str(Path(v.strip()).expanduser())

    def has_extension_filter(self) -> bool:
        """Check if this request restricts file extensions."""
        return bool(self.extensions)

    def has_content_filter(self) -> bool:
        """Check if this request requires a content match."""
        return self.content_filter is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert the request to a dictionary representation."""
        data = self.model_dump()
        for key in ('roots', 'extensions', 'include_patterns', 'exclude_patterns'):
            data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchRequest':
        """Create a SearchRequest instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the search request."""
        parts = [f"Roots: {len(self.roots)} directories"]

        if self.extensions:
            parts.append(f"Extensions: {', '.join(self.extensions)}")

        if self.include_patterns:
            parts.append(f"Include: {', '.join(self.include_patterns)}")

        if self.exclude_patterns:
            parts.append(f"Exclude: {', '.join(self.exclude_patterns)}")

        if self.has_content_filter():
            parts.append(f"Content: '{self.content_filter}'")

        parts.append("Recursive" if self.recursive else "Top level only")

        return " | ".join(parts)
