"""
Configuration data models for FetchLog.

This module defines the structures holding application configuration:
request defaults, binary detection settings, archive handling and logging.
"""

import logging
from typing import Dict, List, Optional, Any, Iterable
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError, field_validator

from .search_request import SearchRequest, normalize_extension, split_list_value


DEFAULT_TEXT_EXTENSIONS = [
    ".txt", ".log", ".xml", ".json", ".csv", ".config", ".ini", ".yaml", ".yml",
    ".md", ".cs", ".js", ".html", ".css", ".sql", ".bat", ".sh", ".ps1",
]

DEFAULT_OUTPUT_PATH = "~/Documents/FetchLog_Results"

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _normalize_extension_list(v: Any) -> List[str]:
    extensions = []
    for ext in split_list_value(v):
        ext = normalize_extension(ext)
        if ext != '.' and ext not in extensions:
            extensions.append(ext)
    return extensions


class DefaultsConfig(BaseModel):
    """
    Defaults applied to requests built from configuration.

    Attributes:
        recursive: Whether searches descend into subdirectories
        search_in_archives: Whether zip archives are inspected
        case_sensitive: Whether content comparison is case sensitive
        output_path: Directory matches are exported into
    """

    recursive: bool = Field(True, description="Descend into subdirectories")
    search_in_archives: bool = Field(True, description="Inspect zip archives")
    case_sensitive: bool = Field(False, description="Case sensitive content comparison")
    output_path: str = Field(DEFAULT_OUTPUT_PATH, description="Export destination directory")

    @field_validator('output_path')
    @classmethod
    def validate_output_path(cls, v: str) -> str:
        """Expand user path but keep relative paths relative."""
        if not v or not v.strip():
            raise ValueError("Output path cannot be empty")
        v = v.strip()
        if v.startswith('~'):
            return str(Path(v).expanduser())
        return str(Path(v))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class SnifferConfig(BaseModel):
    """
    Configuration for binary content detection.

    Attributes:
        text_extensions: Extensions always treated as text
        sniff_bytes: Number of leading bytes inspected for other files
    """

    text_extensions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TEXT_EXTENSIONS),
        description="Extensions always treated as text"
    )
    sniff_bytes: int = Field(512, gt=0, description="Leading bytes inspected for binary content")

    @field_validator('text_extensions', mode='before')
    @classmethod
    def validate_text_extensions(cls, v: Any) -> List[str]:
        """Normalize extensions to lowercase with a leading dot."""
        return _normalize_extension_list(v)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ArchiveConfig(BaseModel):
    """
    Configuration for archive inspection.

    Attributes:
        extensions: Extensions of files opened as zip archives
    """

    extensions: List[str] = Field(default_factory=lambda: [".zip"], description="Zip archive extensions")

    @field_validator('extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v: Any) -> List[str]:
        """Normalize extensions to lowercase with a leading dot."""
        return _normalize_extension_list(v)

    def is_archive(self, path: str) -> bool:
        """Check if a path has one of the archive extensions."""
        return Path(path).suffix.lower() in self.extensions

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class LoggingConfig(BaseModel):
    """
    Configuration for application logging.

    Attributes:
        level: Root log level name
        format: Log record format string
    """

    level: str = Field("WARNING", description="Log level")
    format: str = Field("%(levelname)-8s | %(name)-30s | %(message)s", description="Log format")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate the log level name."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level

    def get_level(self) -> int:
        """Get the numeric log level."""
        return getattr(logging, self.level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class FetchLogConfig(BaseModel):
    """
    Main configuration class for FetchLog.

    Attributes:
        defaults: Defaults applied to new search requests
        sniffer: Binary detection settings
        archives: Archive inspection settings
        logging: Logging settings
    """

    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig, description="Request defaults")
    sniffer: SnifferConfig = Field(default_factory=SnifferConfig, description="Binary detection settings")
    archives: ArchiveConfig = Field(default_factory=ArchiveConfig, description="Archive settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")

    def build_request(self, roots: Iterable[str], **overrides: Any) -> SearchRequest:
        """
        Build a search request from the configured defaults.

        Args:
            roots: Root directories to search
            **overrides: SearchRequest fields overriding the defaults;
                None values are ignored

        Returns:
            Validated SearchRequest
        """
        data: Dict[str, Any] = {
            'roots': list(roots),
            'recursive': self.defaults.recursive,
            'search_in_archives': self.defaults.search_in_archives,
            'case_sensitive': self.defaults.case_sensitive,
            'output_path': self.defaults.output_path,
        }
        data.update({key: value for key, value in overrides.items() if value is not None})
        return SearchRequest.model_validate(data)

    def validate_configuration(self) -> List[str]:
        """
        Check the configuration for suspicious but valid settings.

        Returns:
            List of warning messages
        """
        warnings = []

        if not self.archives.extensions:
            warnings.append("No archive extensions configured - zip archives will be treated as plain files")

        if self.sniffer.sniff_bytes > 1024 * 1024:
            warnings.append(f"Large sniff window ({self.sniffer.sniff_bytes} bytes) slows binary detection")

        output_path = Path(self.defaults.output_path).expanduser()
        if output_path.exists() and not output_path.is_dir():
            warnings.append(f"Default output path is not a directory: {output_path}")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'defaults': self.defaults.to_dict(),
            'sniffer': self.sniffer.to_dict(),
            'archives': self.archives.to_dict(),
            'logging': self.logging.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FetchLogConfig':
        """Create a FetchLogConfig instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Output: {self.defaults.output_path}"]
        parts.append(f"Recursive: {self.defaults.recursive}")
        parts.append(f"Archives: {', '.join(self.archives.extensions) or 'off'}")
        parts.append(f"Log level: {self.logging.level}")
        return " | ".join(parts)


KNOWN_SECTIONS = {'defaults', 'sniffer', 'archives', 'logging'}


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a raw configuration dictionary.

    Args:
        config_data: Configuration data, typically loaded from YAML

    Returns:
        The validated data

    Raises:
        ValueError: If unknown sections are present or values are invalid
    """
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration must be a mapping, got {type(config_data).__name__}")

    unknown = sorted(set(config_data) - KNOWN_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown configuration sections: {', '.join(unknown)}")

    for section, value in config_data.items():
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Section '{section}' must be a mapping")

    cleaned = {key: value for key, value in config_data.items() if value is not None}

    try:
        FetchLogConfig.model_validate(cleaned)
    except ValidationError as e:
        raise ValueError(str(e)) from e

    return cleaned
