"""
Source resolver - locate standard documents in local folders.

Looks up README / CHANGELOG / LICENSE / UPGRADE files in the module root
and, when present, in the secondary (Internals) folder.
"""

from pathlib import Path
from typing import Optional

from moduledocs.documents.models import CHANGELOG, LICENSE, README, UPGRADE
from moduledocs.filters.patterns import list_matching_files


# ============================================================
# Constants
# ============================================================

# File name patterns per document type
DOCUMENT_PATTERNS: dict[str, str] = {
    README: "README*",
    CHANGELOG: "CHANGELOG*",
    LICENSE: "LICENSE*",
    UPGRADE: "UPGRADE*",
}


# ============================================================
# Resolver
# ============================================================

class SourceResolver:
    """Pick the best local file for a document type."""

    def pick(self, doc_type: str, directory: Optional[Path]) -> Optional[Path]:
        """
        Pick the best match in one directory.

        The shortest file name wins (``README.md`` over
        ``README.old.md``); equal lengths are ordered by name.

        Args:
            doc_type: Document type (readme, changelog, license, upgrade)
            directory: Directory to search

        Returns:
            The chosen file, or None
        """
        pattern = DOCUMENT_PATTERNS.get(doc_type)
        if not pattern:
            return None

        matches = list_matching_files(directory, [pattern])
        if not matches:
            return None
        return min(matches, key=lambda p: (len(p.name), p.name))

    def candidates(
        self,
        doc_type: str,
        root: Path,
        secondary: Optional[Path] = None,
    ) -> list[Path]:
        """
        Best file per location, root first.

        Args:
            doc_type: Document type
            root: Module root
            secondary: Secondary folder, if any

        Returns:
            Zero, one or two paths
        """
        found: list[Path] = []
        for directory in (root, secondary):
            pick = self.pick(doc_type, directory)
            if pick is not None and pick not in found:
                found.append(pick)
        return found

    def resolve(
        self,
        doc_type: str,
        root: Path,
        secondary: Optional[Path] = None,
        prefer_secondary: bool = False,
    ) -> Optional[Path]:
        """
        Resolve a single file for a document type.

        Args:
            doc_type: Document type
            root: Module root
            secondary: Secondary folder, if any
            prefer_secondary: Return the secondary pick first when it exists

        Returns:
            The chosen file, or None when nothing matches
        """
        root_pick = self.pick(doc_type, root)
        secondary_pick = self.pick(doc_type, secondary) if secondary is not None else None

        if prefer_secondary and secondary_pick is not None:
            return secondary_pick
        return root_pick or secondary_pick
