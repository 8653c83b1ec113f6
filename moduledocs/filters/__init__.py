"""
Filters Layer - filename pattern matching.
"""

from moduledocs.filters.patterns import FilePatternFilter, list_matching_files

__all__ = [
    "FilePatternFilter",
    "list_matching_files",
]
