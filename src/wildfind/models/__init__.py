"""
Data models for wildfind.

This module contains all the core data structures used throughout the system.
"""

from .config import ConcurrencyConfig, DirectoryRule, FinderConfig, SearchConfig
from .search_results import DiscoveredFile, SearchResult

__all__ = [
    'ConcurrencyConfig',
    'DirectoryRule',
    'DiscoveredFile',
    'FinderConfig',
    'SearchConfig',
    'SearchResult',
]
