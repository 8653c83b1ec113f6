"""GitHub repository client (REST contents API)."""

import base64
import binascii
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from moduledocs.repo.base import (
    DEFAULT_BRANCH,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    RepoError,
    RepoNetworkError,
    decode_json,
    http_get,
)

logger = logging.getLogger(__name__)

API_ROOT = "https://api.github.com"


class GitHubRepository:
    """
    Fetch files of a GitHub repository through the contents API.

    File payloads arrive base64-encoded; they are decoded as UTF-8.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_root: str = API_ROOT,
    ):
        self.owner = owner
        self.repo = repo
        self._token = token or None
        self._api_root = api_root.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)
        self._client.headers.update(self._headers())

    def _headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    @property
    def _repo_url(self) -> str:
        return f"{self._api_root}/repos/{quote(self.owner)}/{quote(self.repo)}"

    def get_default_branch(self) -> str:
        """Default branch, ``main`` when the repository metadata is unavailable."""
        try:
            response = http_get(self._client, self._repo_url)
        except RepoError as e:
            logger.warning(f"Cannot read default branch of {self.owner}/{self.repo}: {e}")
            return DEFAULT_BRANCH
        if response is None:
            return DEFAULT_BRANCH
        data = decode_json(response)
        branch = data.get("default_branch") if isinstance(data, dict) else None
        return branch or DEFAULT_BRANCH

    def get_file_content(self, path: str, branch: str) -> Optional[str]:
        """Decoded file content, or None when the file does not exist."""
        url = f"{self._repo_url}/contents/{quote(path.strip('/'), safe='/')}"
        response = http_get(self._client, url, params={"ref": branch or DEFAULT_BRANCH})
        if response is None:
            return None

        data = decode_json(response)
        if not isinstance(data, dict):
            # A folder listing, not a file
            return None
        if str(data.get("encoding", "")).lower() != "base64" or "content" not in data:
            return None

        raw = str(data.get("content") or "").replace("\n", "").replace("\r", "")
        try:
            return base64.b64decode(raw).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError) as e:
            raise RepoNetworkError(f"Invalid base64 payload for {path}: {e}") from e

    def list_files(self, path: str, branch: str) -> list[tuple[str, str]]:
        """Files (not folders) directly under a folder."""
        url = f"{self._repo_url}/contents/{quote(path.strip('/'), safe='/')}"
        response = http_get(self._client, url, params={"ref": branch or DEFAULT_BRANCH})
        if response is None:
            return []

        data = decode_json(response)
        if not isinstance(data, list):
            return []

        files: list[tuple[str, str]] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            if str(entry.get("type", "")).lower() != "file":
                continue
            name = entry.get("name")
            item_path = entry.get("path")
            if name and item_path:
                files.append((name, item_path))
        return files

    def close(self) -> None:
        self._client.close()
