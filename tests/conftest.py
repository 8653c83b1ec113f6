"""Shared fixtures for moduledocs tests."""

from pathlib import Path
from typing import Optional

import pytest

from moduledocs.documents.models import DocumentItem, DocumentKind, DocumentSource
from moduledocs.repo.base import RepoNetworkError


class FakeRepo:
    """In-memory repository client recording every call."""

    def __init__(
        self,
        files: Optional[dict[str, str]] = None,
        default_branch: str = "main",
        failing: bool = False,
    ):
        self.files = dict(files or {})
        self.default_branch = default_branch
        self.failing = failing
        self.calls: list[tuple[str, str]] = []

    def get_default_branch(self) -> str:
        self.calls.append(("branch", ""))
        return self.default_branch

    def get_file_content(self, path: str, branch: str) -> Optional[str]:
        self.calls.append(("get", path))
        if self.failing:
            raise RepoNetworkError("connection refused")
        return self.files.get(path)

    def list_files(self, path: str, branch: str) -> list[tuple[str, str]]:
        self.calls.append(("list", path))
        if self.failing:
            raise RepoNetworkError("connection refused")
        prefix = path.strip("/") + "/"
        return [
            (name[len(prefix):], name)
            for name in sorted(self.files)
            if name.startswith(prefix) and "/" not in name[len(prefix):]
        ]

    def close(self) -> None:
        pass


def local_item(content: str, doc_type: str = "readme", name: str = "README.md") -> DocumentItem:
    return DocumentItem(
        title=name,
        kind=DocumentKind.STANDARD,
        content=content,
        file_name=name,
        path=name,
        source=DocumentSource.LOCAL,
        doc_type=doc_type,
    )


def remote_item(content: str, doc_type: str = "readme", name: str = "README.md") -> DocumentItem:
    return DocumentItem(
        title=name,
        kind=DocumentKind.STANDARD,
        content=content,
        file_name=name,
        path=name,
        source=DocumentSource.REMOTE,
        doc_type=doc_type,
    )


@pytest.fixture
def fake_repo():
    """Factory for in-memory repository clients."""
    return FakeRepo


@pytest.fixture
def module_dir(tmp_path) -> Path:
    """A module folder with root documents and an Internals folder."""
    root = tmp_path / "MyModule"
    internals = root / "Internals"
    (internals / "Docs").mkdir(parents=True)
    (internals / "Scripts").mkdir()

    (root / "README.md").write_text("# My Module\n\nRoot readme.\n", encoding="utf-8")
    (root / "README.old.md").write_text("# Old readme\n", encoding="utf-8")
    (root / "CHANGELOG.md").write_text("# Changelog\n\n## 1.0.0\n", encoding="utf-8")
    (internals / "LICENSE.txt").write_text("MIT License\n", encoding="utf-8")
    (internals / "README.md").write_text("# My Module\n\nInternals readme.\n", encoding="utf-8")
    (internals / "Docs" / "Usage.md").write_text("# Using the module\n\nText.\n", encoding="utf-8")
    (internals / "Docs" / "Setup.md").write_text("Setup without heading\n", encoding="utf-8")
    (internals / "Scripts" / "Install.ps1").write_text("Write-Host 'hi'\n", encoding="utf-8")
    return root
