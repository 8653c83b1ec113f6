"""Pathspec-based filename matching.

Document lookup works on top-level file names only (``README*``,
``*.md``), so patterns are matched against the bare name. Matching is
case-insensitive: both the patterns and the names are lower-cased before
they reach pathspec.
"""

from pathlib import Path
from typing import Iterable

import pathspec


class FilePatternFilter:
    """Case-insensitive file name filter built on git-wildmatch patterns."""

    def __init__(self, patterns: Iterable[str]):
        """
        Initialize the filter.

        Args:
            patterns: git-wildmatch patterns such as ``README*`` or ``*.md``
        """
        self._patterns = [p for p in patterns if p]
        self._spec = pathspec.PathSpec.from_lines(
            "gitwildmatch", [p.lower() for p in self._patterns]
        )

    @property
    def patterns(self) -> list[str]:
        """The patterns as given, original casing."""
        return list(self._patterns)

    def matches(self, name: str) -> bool:
        """Check whether a bare file name matches any pattern."""
        if not name:
            return False
        return self._spec.match_file(name.lower())

    def filter_names(self, names: Iterable[str]) -> list[str]:
        """Return the names that match, preserving input order."""
        return [n for n in names if self.matches(n)]


def list_matching_files(directory: Path | None, patterns: Iterable[str]) -> list[Path]:
    """
    List top-level files in a directory whose names match the patterns.

    A missing or unreadable directory yields an empty list.

    Args:
        directory: Directory to list (may be None)
        patterns: git-wildmatch patterns

    Returns:
        Matching files sorted by name (case-insensitive)
    """
    if directory is None or not directory.is_dir():
        return []

    name_filter = FilePatternFilter(patterns)
    try:
        entries = [p for p in directory.iterdir() if p.is_file()]
    except OSError:
        return []

    matched = [p for p in entries if name_filter.matches(p.name)]
    return sorted(matched, key=lambda p: (p.name.lower(), p.name))
