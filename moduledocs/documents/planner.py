"""
Selection planner - decide which document variants to surface.

For every standard document type the planner looks at the local and the
remote candidates, removes identical copies, and applies the merge mode:

    PreferLocal   local wins, remote only as a fallback
    PreferRemote  remote wins, local only as a fallback
    All           both, unless their content is identical

Decisions are returned as notes next to the result instead of being
printed, so the same plan can be shown, logged or ignored by the caller.
"""

import logging
from dataclasses import replace
from typing import Mapping, Optional, Sequence

from moduledocs.documents.collector import (
    build_intro,
    build_links_page,
    collect_local_candidates,
    collect_local_docs,
    collect_local_scripts,
    collect_remote_candidates,
    collect_remote_docs,
    fetch_remote_document,
    find_single_file,
    resolve_branch,
)
from moduledocs.documents.models import (
    CHANGELOG,
    DOC_LABELS,
    INTRO,
    LICENSE,
    README,
    REMOTE_DOC_TYPES,
    UPGRADE,
    DecisionNote,
    DocumentItem,
    DocumentSource,
    MergeMode,
    SelectionRequest,
    SelectionResult,
    normalize_content,
)
from moduledocs.documents.resolver import SourceResolver

logger = logging.getLogger(__name__)


class SelectionPlanner:
    """Merge local and remote document candidates into one ordered list."""

    def requested_types(self, request: SelectionRequest) -> list[str]:
        """
        Document types to resolve, in presentation order.

        Without explicit selectors every standard type is requested, plus
        the introduction when intro content is configured.
        """
        if not request.has_selectors:
            wanted = [README, CHANGELOG, LICENSE, UPGRADE]
            if request.delivery.has_intro:
                wanted.insert(0, INTRO)
            return wanted

        wanted = []
        if request.intro or request.all:
            wanted.append(INTRO)
        if request.readme or request.all:
            wanted.append(README)
        if request.changelog or request.all:
            wanted.append(CHANGELOG)
        if request.license or request.all:
            wanted.append(LICENSE)
        if request.upgrade:
            wanted.append(UPGRADE)
        return wanted

    def plan(
        self,
        request: SelectionRequest,
        local_candidates: Optional[Mapping[str, Sequence[DocumentItem]]] = None,
        remote_candidates: Optional[Mapping[str, Sequence[DocumentItem]]] = None,
        supplemental: Sequence[DocumentItem] = (),
    ) -> SelectionResult:
        """
        Select documents from already collected candidates.

        A document type missing from ``remote_candidates`` means the
        repository was not consulted for it; such a type may be backfilled
        with one fetch through ``request.remote``.

        Args:
            request: Planning request
            local_candidates: Document type -> local candidates
            remote_candidates: Document type -> remote candidates
            supplemental: Extra items appended after the standard documents

        Returns:
            Selected items and decision notes
        """
        local = _by_type(local_candidates)
        remote = _by_type(remote_candidates)
        notes: list[DecisionNote] = []
        items: list[DocumentItem] = []
        branch: Optional[str] = None

        if request.single_file:
            single = find_single_file(request)
            if single is not None:
                items.append(single)
            else:
                notes.append(DecisionNote(
                    request.single_file, "file not found under root or Internals",
                ))

        for doc_type in self.requested_types(request):
            if doc_type == INTRO:
                intro = build_intro(request)
                if intro is not None:
                    items.append(intro)
                continue

            use_remote = request.online and doc_type in remote
            selected = self.select(
                DOC_LABELS[doc_type],
                local.get(doc_type, []),
                remote.get(doc_type, []),
                mode=request.mode,
                show_duplicates=request.show_duplicates,
                use_local=request.include_local or not use_remote,
                use_remote=use_remote,
                notes=notes,
            )

            if not selected and doc_type in REMOTE_DOC_TYPES and doc_type not in remote and request.remote is not None:
                if branch is None:
                    branch = resolve_branch(request, request.remote)
                backfill = self._backfill(request, doc_type, branch, notes)
                if backfill is not None:
                    selected = [backfill]

            items.extend(selected)

        items.extend(item for item in supplemental if item.content)

        return SelectionResult(
            items=tuple(items),
            used_remote=any(item.source is DocumentSource.REMOTE for item in items),
            notes=tuple(notes),
        )

    def select(
        self,
        label: str,
        local: Sequence[DocumentItem],
        remote: Sequence[DocumentItem],
        mode: MergeMode = MergeMode.PREFER_LOCAL,
        show_duplicates: bool = False,
        use_local: bool = True,
        use_remote: bool = True,
        notes: Optional[list[DecisionNote]] = None,
    ) -> list[DocumentItem]:
        """
        Apply deduplication and the merge mode to one document type.

        Args:
            label: Document label used in notes (README...)
            local: Local candidates
            remote: Remote candidates
            mode: Merge mode
            show_duplicates: Keep identical copies
            use_local: Whether local candidates may be picked
            use_remote: Whether remote fetching is enabled
            notes: Receives decision notes

        Returns:
            Zero, one or two items
        """
        if notes is None:
            notes = []

        locals_ = [c for c in local if c.content]
        remotes = [c for c in remote if c.content]

        if not show_duplicates:
            if use_local:
                locals_ = self._dedup(label, "local", locals_, notes)
            if use_remote:
                remotes = self._dedup(label, "remote", remotes, notes)

        local_pick = locals_[0] if locals_ and use_local else None
        remote_pick = remotes[0] if remotes and use_remote else None

        if not use_remote:
            return [local_pick] if local_pick is not None else []

        equal = (
            local_pick is not None
            and remote_pick is not None
            and normalize_content(local_pick.content) == normalize_content(remote_pick.content)
        )

        if mode is MergeMode.ALL:
            if local_pick is not None and remote_pick is not None:
                if equal and not show_duplicates:
                    notes.append(DecisionNote(label, "remote identical to local, showing one (local)"))
                    return [local_pick]
                if not equal:
                    notes.append(DecisionNote(label, "local and remote differ, showing both"))
                return [local_pick, remote_pick]
            if local_pick is not None:
                return [local_pick]
            if remote_pick is not None:
                return [remote_pick]
            return []

        if mode is MergeMode.PREFER_REMOTE:
            preferred, other = remote_pick, local_pick
            preferred_name, other_name = "remote", "local"
        else:
            preferred, other = local_pick, remote_pick
            preferred_name, other_name = "local", "remote"

        if preferred is not None:
            if other is not None and equal and not show_duplicates:
                notes.append(DecisionNote(
                    label, f"hiding {other_name}, identical to {preferred_name} ({mode.value})",
                ))
            elif other is None:
                notes.append(DecisionNote(
                    label, f"using {preferred_name}; {other_name} not found",
                ))
            return [preferred]
        if other is not None:
            notes.append(DecisionNote(
                label, f"{preferred_name} missing, using {other_name} ({mode.value} fallback)",
            ))
            return [other]
        return []

    def _dedup(
        self,
        label: str,
        source_name: str,
        candidates: list[DocumentItem],
        notes: list[DecisionNote],
    ) -> list[DocumentItem]:
        """Collapse candidates whose normalized content was already seen."""
        if len(candidates) < 2:
            return candidates

        seen: set[str] = set()
        unique: list[DocumentItem] = []
        for candidate in candidates:
            key = normalize_content(candidate.content)
            if key in seen:
                continue
            seen.add(key)
            unique.append(candidate)

        removed = len(candidates) - len(unique)
        if removed:
            notes.append(DecisionNote(
                label, f"removed {removed} duplicate {source_name} copy/copies (identical content)",
            ))
        return unique

    def _backfill(
        self,
        request: SelectionRequest,
        doc_type: str,
        branch: str,
        notes: list[DecisionNote],
    ) -> Optional[DocumentItem]:
        """One remote fetch for a document type that ended up empty."""
        label = DOC_LABELS[doc_type]
        try:
            item = fetch_remote_document(request.remote, branch, doc_type, request)
        except Exception as e:
            logger.warning(f"Remote backfill of {label} failed: {e}")
            notes.append(DecisionNote(label, f"remote backfill failed ({e})"))
            return None
        if item is not None:
            notes.append(DecisionNote(label, "missing locally, backfilled from remote"))
        return item


def plan_documents(
    request: SelectionRequest,
    resolver: Optional[SourceResolver] = None,
    planner: Optional[SelectionPlanner] = None,
) -> SelectionResult:
    """
    Collect candidates and plan the document set of a module.

    Remote candidates are collected only when ``request.online`` is set
    and a repository client is configured; supplemental collections
    (scripts, Docs folders, links) are appended after the standard
    documents.

    Args:
        request: Planning request
        resolver: Source resolver
        planner: Selection planner

    Returns:
        The selection result
    """
    planner = planner or SelectionPlanner()
    notes: list[DecisionNote] = []

    local = collect_local_candidates(request, resolver)

    remote: dict[str, list[DocumentItem]] = {}
    branch: Optional[str] = None
    client = request.remote
    if client is not None:
        branch = resolve_branch(request, client)
        if request.online:
            wanted = [t for t in planner.requested_types(request) if t in REMOTE_DOC_TYPES]
            remote = collect_remote_candidates(request, client, branch, wanted, notes)

    supplemental: list[DocumentItem] = []
    supplemental.extend(collect_local_scripts(request))
    supplemental.extend(collect_local_docs(request))
    if client is not None and branch is not None:
        supplemental.extend(collect_remote_docs(request, client, branch, notes))
    links = build_links_page(request)
    if links is not None:
        supplemental.append(links)

    if request.branch is None and branch is not None:
        # Backfill fetches reuse the resolved branch
        request = replace(request, branch=branch)

    result = planner.plan(request, local, remote, supplemental)
    return SelectionResult(
        items=result.items,
        used_remote=result.used_remote,
        notes=tuple(notes) + result.notes,
    )


def _by_type(candidates: Optional[Mapping[str, Sequence[DocumentItem]]]) -> dict[str, list[DocumentItem]]:
    """Normalize candidate keys to lower-case document types."""
    if not candidates:
        return {}
    return {str(key).lower(): list(value or ()) for key, value in candidates.items()}
