"""
Document selection data models.

Value objects exchanged between the collectors, the selection planner and
the reporters. Everything here is immutable: items are built once per
planning run and handed to the caller as-is.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from moduledocs.config import DeliveryOptions


# ============================================================
# Enumerations
# ============================================================

class DocumentKind(Enum):
    """How an item is presented by downstream sinks."""
    STANDARD = "standard"
    SCRIPT = "script"
    SUPPLEMENTAL_DOC = "doc"
    FILE = "file"


class DocumentSource(Enum):
    """Where the content of an item was found."""
    LOCAL = "local"
    REMOTE = "remote"


class MergeMode(Enum):
    """Which candidate survives when both a local and a remote copy exist."""
    PREFER_LOCAL = "PreferLocal"
    PREFER_REMOTE = "PreferRemote"
    ALL = "All"

    @classmethod
    def parse(cls, value: str) -> "MergeMode":
        """Parse a mode name case-insensitively (``preferlocal``, ``All``...)."""
        wanted = value.replace("-", "").replace("_", "").lower()
        for mode in cls:
            if mode.value.lower() == wanted:
                return mode
        raise ValueError(f"Unknown merge mode: {value}")


# Standard document types, in presentation order
README = "readme"
CHANGELOG = "changelog"
LICENSE = "license"
UPGRADE = "upgrade"
INTRO = "intro"
LINKS = "links"

STANDARD_DOC_TYPES: tuple[str, ...] = (README, CHANGELOG, LICENSE, UPGRADE)

# Document types that may also come from the remote repository
REMOTE_DOC_TYPES: tuple[str, ...] = (README, CHANGELOG, LICENSE)

DOC_LABELS: dict[str, str] = {
    README: "README",
    CHANGELOG: "CHANGELOG",
    LICENSE: "LICENSE",
    UPGRADE: "UPGRADE",
    INTRO: "Introduction",
    LINKS: "Links",
}


# ============================================================
# Data models
# ============================================================

@dataclass(frozen=True)
class DocumentItem:
    """
    A located document.

    Attributes:
        title: Display title
        kind: Presentation kind
        content: Materialized text
        file_name: Bare file name, if the item came from a file
        path: Local path or repository path
        source: Local or remote
        doc_type: Standard document type (readme, changelog...) or None
    """
    title: str
    kind: DocumentKind
    content: str
    file_name: Optional[str] = None
    path: Optional[str] = None
    source: DocumentSource = DocumentSource.LOCAL
    doc_type: Optional[str] = None

    @classmethod
    def from_path(
        cls,
        path: Path,
        title: Optional[str] = None,
        kind: DocumentKind = DocumentKind.STANDARD,
        doc_type: Optional[str] = None,
    ) -> Optional["DocumentItem"]:
        """
        Load an item from a local file.

        Args:
            path: File to read
            title: Display title (defaults to the file name)
            kind: Presentation kind
            doc_type: Standard document type

        Returns:
            The item, or None when the file is unreadable or empty
        """
        content = read_text(path)
        if not content or not content.strip():
            return None
        return cls(
            title=title or path.name,
            kind=kind,
            content=content,
            file_name=path.name,
            path=str(path),
            source=DocumentSource.LOCAL,
            doc_type=doc_type,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "title": self.title,
            "kind": self.kind.value,
            "file_name": self.file_name,
            "path": self.path,
            "source": self.source.value,
            "doc_type": self.doc_type,
            "length": len(self.content),
        }


@dataclass(frozen=True)
class DecisionNote:
    """A planner decision, keyed by the document label it concerns."""
    key: str
    message: str

    def __str__(self) -> str:
        return f"{self.key}: {self.message}"


@dataclass(frozen=True)
class SelectionRequest:
    """
    Inputs of one planning run.

    Attributes:
        root: Module root folder
        secondary: Secondary folder (the Internals folder), if any
        remote: Repository client, if a remote repository is configured
        online: Whether remote candidates are fetched for this run
        branch: Repository branch (None = provider default)
        repository_paths: Remote folders holding extra documentation
        mode: Merge preference
        show_duplicates: Keep copies with identical normalized content
        include_local: Whether local candidates take part
        prefer_secondary: Resolve from the secondary folder first
        readme / changelog / license / intro / upgrade / all: kind flags
        single_file: A specific file to include
        title_name / title_version: Title prefix parts
        delivery: Per-module delivery options
    """
    root: Path
    secondary: Optional[Path] = None
    remote: Any = None
    online: bool = False
    branch: Optional[str] = None
    repository_paths: tuple[str, ...] = ()
    mode: MergeMode = MergeMode.PREFER_LOCAL
    show_duplicates: bool = False
    include_local: bool = True
    prefer_secondary: bool = False
    readme: bool = False
    changelog: bool = False
    license: bool = False
    intro: bool = False
    upgrade: bool = False
    all: bool = False
    single_file: Optional[str] = None
    title_name: Optional[str] = None
    title_version: Optional[str] = None
    delivery: DeliveryOptions = field(default_factory=DeliveryOptions)

    @property
    def has_selectors(self) -> bool:
        """Whether the caller asked for specific documents."""
        return any((
            self.readme, self.changelog, self.license,
            self.intro, self.upgrade, self.all, bool(self.single_file),
        ))

    def build_title(self, leaf: str) -> str:
        """Prefix a title with the module name and version when configured."""
        if self.title_name:
            version = f" {self.title_version}" if self.title_version else ""
            return f"{self.title_name}{version} - {leaf}"
        return leaf


@dataclass(frozen=True)
class SelectionResult:
    """
    Outcome of one planning run.

    Attributes:
        items: Selected documents in presentation order
        used_remote: Whether any selected item came from the repository
        notes: Decisions taken while planning
    """
    items: tuple[DocumentItem, ...] = ()
    used_remote: bool = False
    notes: tuple[DecisionNote, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "items": [item.to_dict() for item in self.items],
            "used_remote": self.used_remote,
            "notes": [{"key": n.key, "message": n.message} for n in self.notes],
        }


# ============================================================
# Helpers
# ============================================================

def read_text(path: Path) -> Optional[str]:
    """Read a text file as UTF-8, falling back to latin-1; None if unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        try:
            return path.read_text(encoding="latin-1")
        except OSError:
            return None
    except OSError:
        return None


def normalize_content(text: Optional[str]) -> str:
    """
    Normalize text for duplicate detection.

    Unifies line endings, trims trailing whitespace on every line and
    drops trailing blank lines.
    """
    unified = (text or "").replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in unified.split("\n")]
    return "\n".join(lines).rstrip()
