"""
Candidate collection for the selection planner.

Gathers, without deciding anything:
1. Local candidates per standard document type (root + Internals)
2. Remote candidates per standard document type (repository client)
3. Supplemental collections: scripts, Docs folders, the links page

Provider failures are absorbed here and reported as decision notes.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from moduledocs.documents.markdown import first_heading
from moduledocs.documents.models import (
    CHANGELOG,
    DOC_LABELS,
    INTRO,
    LICENSE,
    LINKS,
    README,
    STANDARD_DOC_TYPES,
    UPGRADE,
    DecisionNote,
    DocumentItem,
    DocumentKind,
    DocumentSource,
    SelectionRequest,
    read_text,
)
from moduledocs.documents.resolver import SourceResolver
from moduledocs.filters.patterns import FilePatternFilter, list_matching_files
from moduledocs.repo.base import DEFAULT_BRANCH, RepoClient

logger = logging.getLogger(__name__)


# ============================================================
# Constants
# ============================================================

# Remote file names tried per document type, first hit wins
REMOTE_FILE_NAMES: dict[str, tuple[str, ...]] = {
    README: ("README.md", "README.MD", "Readme.md"),
    CHANGELOG: ("CHANGELOG.md", "CHANGELOG.MD", "Changelog.md"),
    LICENSE: ("LICENSE", "LICENSE.md", "LICENSE.txt"),
}

# File name given to remote standard documents
REMOTE_CANONICAL_NAMES: dict[str, str] = {
    README: "README.md",
    CHANGELOG: "CHANGELOG.md",
    LICENSE: "LICENSE",
}

LOCAL_DOC_PATTERNS: tuple[str, ...] = ("*.md", "*.markdown")

REMOTE_DOC_PATTERNS: tuple[str, ...] = ("*.md", "*.markdown", "*.txt")

SCRIPT_PATTERNS: tuple[str, ...] = ("*.ps1",)

DEFAULT_REMOTE_DOC_ROOTS: tuple[str, ...] = ("docs", "Docs")


# ============================================================
# Local candidates
# ============================================================

def collect_local_candidates(
    request: SelectionRequest,
    resolver: Optional[SourceResolver] = None,
) -> dict[str, list[DocumentItem]]:
    """
    Collect local candidates for every standard document type.

    Args:
        request: Planning request
        resolver: Source resolver

    Returns:
        Document type -> candidates (root first, then secondary)
    """
    resolver = resolver or SourceResolver()
    candidates: dict[str, list[DocumentItem]] = {}

    for doc_type in STANDARD_DOC_TYPES:
        found: list[DocumentItem] = []

        if doc_type == UPGRADE:
            configured = _configured_upgrade(request)
            if configured is not None:
                found.append(configured)

        paths = resolver.candidates(doc_type, request.root, request.secondary)
        if request.prefer_secondary:
            paths.reverse()
        for path in paths:
            item = DocumentItem.from_path(
                path,
                title=request.build_title(path.name),
                kind=DocumentKind.STANDARD,
                doc_type=doc_type,
            )
            if item is not None:
                found.append(item)

        candidates[doc_type] = found
    return candidates


def _configured_upgrade(request: SelectionRequest) -> Optional[DocumentItem]:
    """Upgrade notes from the delivery options (inline text, then file)."""
    delivery = request.delivery
    if delivery.upgrade_text:
        content = "\n".join(delivery.upgrade_text)
        if content.strip():
            return DocumentItem(
                title=request.build_title(DOC_LABELS[UPGRADE].title()),
                kind=DocumentKind.STANDARD,
                content=content,
                doc_type=UPGRADE,
            )
    if delivery.upgrade_file:
        path = request.root / delivery.upgrade_file
        if path.is_file():
            return DocumentItem.from_path(
                path,
                title=request.build_title(path.name),
                kind=DocumentKind.STANDARD,
                doc_type=UPGRADE,
            )
    return None


def build_intro(request: SelectionRequest) -> Optional[DocumentItem]:
    """Introduction page from inline text or the configured intro file."""
    delivery = request.delivery
    content = ""
    if delivery.intro_text:
        content = "\n".join(delivery.intro_text)
    elif delivery.intro_file:
        content = read_text(request.root / delivery.intro_file) or ""

    if not content.strip():
        return None
    return DocumentItem(
        title=request.build_title(DOC_LABELS[INTRO]),
        kind=DocumentKind.FILE,
        content=content,
        doc_type=INTRO,
    )


def find_single_file(request: SelectionRequest) -> Optional[DocumentItem]:
    """The explicitly requested file, looked up in root then secondary."""
    if not request.single_file:
        return None
    for base in (request.root, request.secondary):
        if base is None:
            continue
        path = base / request.single_file
        if path.is_file():
            return DocumentItem.from_path(
                path,
                title=request.build_title(path.name),
                kind=DocumentKind.FILE,
            )
    return None


# ============================================================
# Remote candidates
# ============================================================

def resolve_branch(request: SelectionRequest, client: RepoClient) -> str:
    """Requested branch, else the provider default."""
    if request.branch:
        return request.branch
    try:
        return client.get_default_branch() or DEFAULT_BRANCH
    except Exception as e:
        logger.warning(f"Cannot determine default branch, using {DEFAULT_BRANCH}: {e}")
        return DEFAULT_BRANCH


def fetch_remote_document(
    client: RepoClient,
    branch: str,
    doc_type: str,
    request: Optional[SelectionRequest] = None,
) -> Optional[DocumentItem]:
    """
    Fetch one standard document from the repository.

    Provider errors propagate; callers decide how to absorb them.

    Args:
        client: Repository client
        branch: Branch name
        doc_type: readme, changelog or license
        request: Planning request (for titles)

    Returns:
        The remote item, or None when no candidate name exists
    """
    for name in REMOTE_FILE_NAMES.get(doc_type, ()):
        content = client.get_file_content(name, branch)
        if content and content.strip():
            label = DOC_LABELS[doc_type]
            return DocumentItem(
                title=request.build_title(label) if request else label,
                kind=DocumentKind.STANDARD,
                content=content,
                file_name=REMOTE_CANONICAL_NAMES[doc_type],
                path=name,
                source=DocumentSource.REMOTE,
                doc_type=doc_type,
            )
    return None


def collect_remote_candidates(
    request: SelectionRequest,
    client: RepoClient,
    branch: str,
    doc_types: Sequence[str],
    notes: list[DecisionNote],
) -> dict[str, list[DocumentItem]]:
    """
    Collect remote candidates, one fetch per document type.

    A failing fetch yields no candidate for that type and a note.

    Returns:
        Document type -> candidates, for every consulted type
    """
    candidates: dict[str, list[DocumentItem]] = {}
    for doc_type in doc_types:
        if doc_type not in REMOTE_FILE_NAMES:
            continue
        try:
            item = fetch_remote_document(client, branch, doc_type, request)
        except Exception as e:
            logger.warning(f"Remote fetch of {doc_type} failed: {e}")
            notes.append(DecisionNote(DOC_LABELS[doc_type], f"remote fetch failed ({e})"))
            item = None
        candidates[doc_type] = [item] if item is not None else []
    return candidates


# ============================================================
# Supplemental collections
# ============================================================

def order_by_preference(names: Sequence[str], order: Sequence[str]) -> list[str]:
    """
    Sort file names: explicitly ordered names first, the rest alphabetically.

    Matching against the explicit order is case-insensitive.
    """
    rank = {name.lower(): i for i, name in enumerate(order) if name}
    return sorted(names, key=lambda n: (rank.get(n.lower(), len(rank)), n.lower()))


def collect_local_scripts(request: SelectionRequest) -> list[DocumentItem]:
    """Scripts under ``<Internals>/Scripts`` and ``<Internals>`` wrapped as fenced code."""
    if request.secondary is None or not request.secondary.is_dir():
        return []

    items: list[DocumentItem] = []
    seen: set[Path] = set()
    for folder in (request.secondary / "Scripts", request.secondary):
        for path in list_matching_files(folder, SCRIPT_PATTERNS):
            if path in seen:
                continue
            seen.add(path)
            code = read_text(path)
            if code is None or not code.strip():
                continue
            items.append(DocumentItem(
                title=path.name,
                kind=DocumentKind.SCRIPT,
                content=f"```powershell\n{code.rstrip()}\n```",
                file_name=path.name,
                path=str(path),
                source=DocumentSource.LOCAL,
            ))
    return items


def collect_local_docs(request: SelectionRequest) -> list[DocumentItem]:
    """Markdown pages under ``<Internals>/Docs``."""
    if request.secondary is None:
        return []

    docs_root = request.secondary / "Docs"
    files = {p.name: p for p in list_matching_files(docs_root, LOCAL_DOC_PATTERNS)}
    items: list[DocumentItem] = []
    for name in order_by_preference(list(files), request.delivery.documentation_order):
        content = read_text(files[name])
        if content is None or not content.strip():
            continue
        items.append(DocumentItem(
            title=first_heading(content) or name,
            kind=DocumentKind.SUPPLEMENTAL_DOC,
            content=content,
            file_name=name,
            path=str(files[name]),
            source=DocumentSource.LOCAL,
        ))
    return items


def collect_remote_docs(
    request: SelectionRequest,
    client: RepoClient,
    branch: str,
    notes: list[DecisionNote],
) -> list[DocumentItem]:
    """Documentation pages from repository folders (``docs`` by default)."""
    roots = request.repository_paths or request.delivery.repository_paths or DEFAULT_REMOTE_DOC_ROOTS
    name_filter = FilePatternFilter(REMOTE_DOC_PATTERNS)

    collected: dict[str, str] = {}
    seen_roots: set[str] = set()
    for root in roots:
        if root.lower() in seen_roots:
            continue
        seen_roots.add(root.lower())
        try:
            listing = client.list_files(root, branch)
        except Exception as e:
            logger.warning(f"Listing remote folder {root} failed: {e}")
            notes.append(DecisionNote("Docs", f"remote folder {root} unavailable ({e})"))
            continue
        for name, path in listing:
            if name_filter.matches(name) and name not in collected:
                collected[name] = path

    items: list[DocumentItem] = []
    for name in order_by_preference(list(collected), request.delivery.documentation_order):
        try:
            content = client.get_file_content(collected[name], branch)
        except Exception as e:
            logger.warning(f"Remote fetch of {collected[name]} failed: {e}")
            notes.append(DecisionNote("Docs", f"remote page {name} unavailable ({e})"))
            continue
        if not content or not content.strip():
            continue
        items.append(DocumentItem(
            title=first_heading(content) or name,
            kind=DocumentKind.SUPPLEMENTAL_DOC,
            content=content,
            file_name=name,
            path=collected[name],
            source=DocumentSource.REMOTE,
        ))
    return items


def build_links_page(request: SelectionRequest) -> Optional[DocumentItem]:
    """Markdown list of the configured important links."""
    links = request.delivery.important_links
    if not links:
        return None

    lines = ["# Links"]
    for link in links:
        if link.title:
            lines.append(f"- [{link.title}]({link.url})")
        else:
            lines.append(f"- {link.url}")
    return DocumentItem(
        title=request.build_title(DOC_LABELS[LINKS]),
        kind=DocumentKind.FILE,
        content="\n".join(lines) + "\n",
        doc_type=LINKS,
    )
