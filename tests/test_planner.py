"""Tests for document selection planning."""

from dataclasses import replace

from conftest import FakeRepo, local_item, remote_item

from moduledocs.config import DeliveryOptions, ImportantLink
from moduledocs.documents.models import (
    DocumentKind,
    DocumentSource,
    MergeMode,
    SelectionRequest,
    normalize_content,
)
from moduledocs.documents.planner import SelectionPlanner, plan_documents


def _request(tmp_path, **kwargs) -> SelectionRequest:
    kwargs.setdefault("readme", True)
    kwargs.setdefault("online", True)
    return SelectionRequest(root=tmp_path, **kwargs)


def _messages(result) -> list[str]:
    return [note.message for note in result.notes]


class TestNormalizeContent:
    """Test content normalization used for duplicate detection."""

    def test_line_endings_and_trailing_whitespace(self):
        """Test that CRLF, trailing spaces and blank tail lines are ignored."""
        assert normalize_content("a  \r\nb\r\n\r\n") == normalize_content("a\nb")

    def test_leading_whitespace_kept(self):
        """Test that indentation still matters."""
        assert normalize_content("  a") != normalize_content("a")


class TestMergeModes:
    """Test the merge policy table."""

    def test_prefer_local_hides_identical_remote(self, tmp_path):
        """Test PreferLocal with equal local and remote copies."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.PREFER_LOCAL),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("A")]},
        )
        assert [(i.source, i.content) for i in result.items] == [(DocumentSource.LOCAL, "A")]
        assert any("hiding remote, identical to local" in m for m in _messages(result))
        assert result.used_remote is False

    def test_all_keeps_both_when_different(self, tmp_path):
        """Test All mode with differing copies, local first."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.ALL),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("B")]},
        )
        assert [(i.source, i.content) for i in result.items] == [
            (DocumentSource.LOCAL, "A"),
            (DocumentSource.REMOTE, "B"),
        ]
        assert any("differ" in m for m in _messages(result))
        assert result.used_remote is True

    def test_all_collapses_identical(self, tmp_path):
        """Test All mode with equal copies collapses to the local one."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.ALL),
            {"readme": [local_item("A\r\n")]},
            {"readme": [remote_item("A")]},
        )
        assert [i.source for i in result.items] == [DocumentSource.LOCAL]

    def test_all_with_show_duplicates_keeps_both(self, tmp_path):
        """Test that show_duplicates keeps equal copies in All mode."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.ALL, show_duplicates=True),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("A")]},
        )
        assert len(result.items) == 2

    def test_prefer_remote_without_local(self, tmp_path):
        """Test that PreferRemote with no local copy is not reported as a fallback."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.PREFER_REMOTE),
            {"readme": []},
            {"readme": [remote_item("A")]},
        )
        assert [(i.source, i.content) for i in result.items] == [(DocumentSource.REMOTE, "A")]
        assert "using remote; local not found" in _messages(result)
        assert not any("fallback" in m for m in _messages(result))

    def test_prefer_remote_uses_local_when_remote_missing(self, tmp_path):
        """Test the PreferRemote fallback to local."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.PREFER_REMOTE),
            {"readme": [local_item("A")]},
            {"readme": []},
        )
        assert [i.source for i in result.items] == [DocumentSource.LOCAL]
        assert any("remote missing, using local" in m for m in _messages(result))
        assert any("PreferRemote fallback" in m for m in _messages(result))

    def test_prefer_local_with_different_remote_shows_local_only(self, tmp_path):
        """Test that PreferLocal includes only the preferred copy."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.PREFER_LOCAL),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("B")]},
        )
        assert [i.content for i in result.items] == ["A"]

    def test_offline_ignores_remote_candidates(self, tmp_path):
        """Test that remote candidates are unused when not online."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.PREFER_REMOTE, online=False),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("B")]},
        )
        assert [i.content for i in result.items] == ["A"]

    def test_exclude_local(self, tmp_path):
        """Test that include_local=False drops local copies when remote is enabled."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.ALL, include_local=False),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("B")]},
        )
        assert [i.content for i in result.items] == ["B"]

    def test_plan_is_deterministic(self, tmp_path):
        """Test that repeated calls give equal results."""
        planner = SelectionPlanner()
        args = (
            _request(tmp_path, mode=MergeMode.ALL),
            {"readme": [local_item("A"), local_item("A ")]},
            {"readme": [remote_item("B")]},
        )
        assert planner.plan(*args) == planner.plan(*args)


class TestDeduplication:
    """Test intra-source duplicate removal."""

    def test_identical_local_copies_collapse(self, tmp_path):
        """Test that normalized-equal local candidates collapse to the first."""
        first = local_item("text\r\n", name="README.md")
        second = local_item("text  \n\n", name="README.txt")
        result = SelectionPlanner().plan(
            _request(tmp_path, online=False, mode=MergeMode.ALL),
            {"readme": [first, second]},
        )
        assert result.items == (first,)
        assert any("removed 1 duplicate local" in m for m in _messages(result))

    def test_show_duplicates_keeps_copies_in_selection(self, tmp_path):
        """Test that no dedup note is emitted with show_duplicates."""
        result = SelectionPlanner().plan(
            _request(tmp_path, online=False, show_duplicates=True),
            {"readme": [local_item("text"), local_item("text")]},
        )
        assert not any("duplicate" in m for m in _messages(result))

    def test_empty_candidates_dropped(self, tmp_path):
        """Test that empty content never reaches the result."""
        result = SelectionPlanner().plan(
            _request(tmp_path, mode=MergeMode.ALL),
            {"readme": [local_item("")]},
            {"readme": [remote_item("B")]},
        )
        assert [i.content for i in result.items] == ["B"]

    def test_offline_skips_remote_dedup(self, tmp_path):
        """Test that unused remote copies produce no duplicate notes."""
        result = SelectionPlanner().plan(
            _request(tmp_path, online=False),
            {"readme": [local_item("A")]},
            {"readme": [remote_item("B"), remote_item("B")]},
        )
        assert [i.content for i in result.items] == ["A"]
        assert not any("duplicate remote" in m for m in _messages(result))


class TestRequestedTypes:
    """Test the document kinds a request asks for."""

    def test_defaults_without_selectors(self, tmp_path):
        """Test the default kinds."""
        request = SelectionRequest(root=tmp_path)
        assert SelectionPlanner().requested_types(request) == ["readme", "changelog", "license", "upgrade"]

    def test_defaults_include_configured_intro(self, tmp_path):
        """Test that configured intro text adds the introduction."""
        request = SelectionRequest(root=tmp_path, delivery=DeliveryOptions(intro_text=("Hello",)))
        assert SelectionPlanner().requested_types(request)[0] == "intro"

    def test_all_flag(self, tmp_path):
        """Test that all requests intro, readme, changelog and license."""
        request = SelectionRequest(root=tmp_path, all=True)
        assert SelectionPlanner().requested_types(request) == ["intro", "readme", "changelog", "license"]


class TestBackfill:
    """Test the single remote fetch for missing documents."""

    def test_backfills_missing_document(self, tmp_path):
        """Test that a missing README is fetched once from the repository."""
        repo = FakeRepo({"README.md": "# Remote"})
        request = _request(tmp_path, remote=repo, online=False)
        result = SelectionPlanner().plan(request, {"readme": []}, {})

        assert [(i.source, i.content) for i in result.items] == [(DocumentSource.REMOTE, "# Remote")]
        assert any("backfilled from remote" in m for m in _messages(result))

    def test_no_backfill_when_remote_consulted(self, tmp_path):
        """Test that a consulted-but-empty remote is not asked again."""
        repo = FakeRepo({"README.md": "# Remote"})
        request = _request(tmp_path, remote=repo)
        result = SelectionPlanner().plan(request, {"readme": []}, {"readme": []})

        assert result.items == ()
        assert not any(call[0] == "get" for call in repo.calls)

    def test_backfill_failure_is_absorbed(self, tmp_path):
        """Test that a failing provider becomes a note."""
        repo = FakeRepo(failing=True)
        request = _request(tmp_path, remote=repo, online=False)
        result = SelectionPlanner().plan(request, {"readme": []}, {})

        assert result.items == ()
        assert any("remote backfill failed" in m for m in _messages(result))


class TestPlanDocuments:
    """Test end-to-end planning from a module folder."""

    def test_local_plan_order(self, module_dir):
        """Test standard documents followed by scripts and docs."""
        request = SelectionRequest(root=module_dir, secondary=module_dir / "Internals")
        result = plan_documents(request)

        kinds = [(i.kind, i.file_name) for i in result.items]
        assert kinds[:3] == [
            (DocumentKind.STANDARD, "README.md"),
            (DocumentKind.STANDARD, "CHANGELOG.md"),
            (DocumentKind.STANDARD, "LICENSE.txt"),
        ]
        assert (DocumentKind.SCRIPT, "Install.ps1") in kinds
        docs = [i for i in result.items if i.kind is DocumentKind.SUPPLEMENTAL_DOC]
        assert [d.title for d in docs] == ["Setup.md", "Using the module"]
        assert result.used_remote is False

    def test_script_is_fenced(self, module_dir):
        """Test that scripts are wrapped in a powershell fence."""
        request = SelectionRequest(root=module_dir, secondary=module_dir / "Internals")
        script = next(i for i in plan_documents(request).items if i.kind is DocumentKind.SCRIPT)
        assert script.content == "```powershell\nWrite-Host 'hi'\n```"

    def test_documentation_order(self, module_dir):
        """Test that the configured order puts Usage.md first."""
        request = SelectionRequest(
            root=module_dir,
            secondary=module_dir / "Internals",
            delivery=DeliveryOptions(documentation_order=("usage.md",)),
        )
        docs = [i.file_name for i in plan_documents(request).items if i.kind is DocumentKind.SUPPLEMENTAL_DOC]
        assert docs == ["Usage.md", "Setup.md"]

    def test_titles_prefixed(self, module_dir):
        """Test the module name and version title prefix."""
        request = SelectionRequest(
            root=module_dir, readme=True, title_name="MyModule", title_version="1.2.0",
        )
        result = plan_documents(request)
        assert result.items[0].title == "MyModule 1.2.0 - README.md"

    def test_intro_upgrade_and_links(self, tmp_path):
        """Test configured intro, upgrade text and the links page."""
        delivery = DeliveryOptions(
            intro_text=("Welcome",),
            upgrade_text=("Run Update-Module",),
            important_links=(ImportantLink(url="https://example.org", title="Site"),),
        )
        result = plan_documents(SelectionRequest(root=tmp_path, delivery=delivery))

        types = [i.doc_type for i in result.items]
        assert types == ["intro", "upgrade", "links"]
        assert result.items[-1].content == "# Links\n- [Site](https://example.org)\n"

    def test_single_file(self, module_dir):
        """Test the explicit file selector, searched in Internals too."""
        result = plan_documents(replace(
            SelectionRequest(root=module_dir, secondary=module_dir / "Internals"),
            single_file="LICENSE.txt",
        ))
        assert result.items[0].file_name == "LICENSE.txt"
        assert result.items[0].kind is DocumentKind.FILE

    def test_missing_single_file_is_noted(self, tmp_path):
        """Test that a missing explicit file does not raise."""
        result = plan_documents(SelectionRequest(root=tmp_path, single_file="NOPE.md"))
        assert result.items == ()
        assert any("not found" in m for m in _messages(result))

    def test_online_all_mode_with_remote_docs(self, module_dir):
        """Test remote standard documents and remote docs folders."""
        repo = FakeRepo({
            "README.md": "# Remote readme",
            "CHANGELOG.md": "# Changelog\n\n## 1.0.0\n",
            "docs/Guide.md": "# Guide\n",
            "docs/image.png": "binary",
        })
        request = SelectionRequest(
            root=module_dir,
            secondary=module_dir / "Internals",
            remote=repo,
            online=True,
            mode=MergeMode.ALL,
        )
        result = plan_documents(request)

        readmes = [i for i in result.items if i.doc_type == "readme"]
        assert [i.source for i in readmes] == [DocumentSource.LOCAL, DocumentSource.REMOTE]
        changelogs = [i for i in result.items if i.doc_type == "changelog"]
        assert [i.source for i in changelogs] == [DocumentSource.LOCAL]
        remote_docs = [
            i for i in result.items
            if i.kind is DocumentKind.SUPPLEMENTAL_DOC and i.source is DocumentSource.REMOTE
        ]
        assert [d.title for d in remote_docs] == ["Guide"]
        assert result.used_remote is True

    def test_provider_failure_is_absorbed(self, module_dir):
        """Test that a failing repository leaves the local plan intact."""
        repo = FakeRepo(failing=True)
        request = SelectionRequest(
            root=module_dir, readme=True, remote=repo, online=True, mode=MergeMode.PREFER_REMOTE,
        )
        result = plan_documents(request)

        assert [i.source for i in result.items] == [DocumentSource.LOCAL]
        assert any("remote fetch failed" in m for m in _messages(result))
