"""
Data models for FetchLog.

This module contains the core data structures used throughout the system.
"""

from .search_request import SearchRequest
from .match_record import MatchRecord, MatchOrigin, format_size
from .config import FetchLogConfig

__all__ = ['SearchRequest', 'MatchRecord', 'MatchOrigin', 'format_size', 'FetchLogConfig']
