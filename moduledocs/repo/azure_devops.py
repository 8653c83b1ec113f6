"""Azure DevOps repository client (Git items REST API)."""

import base64
import logging
from typing import Optional
from urllib.parse import quote

import httpx

from moduledocs.repo.base import (
    DEFAULT_BRANCH,
    DEFAULT_TIMEOUT,
    USER_AGENT,
    RepoError,
    decode_json,
    http_get,
)

logger = logging.getLogger(__name__)

API_ROOT = "https://dev.azure.com"

API_VERSION = "7.1-preview.1"

BRANCH_REF_PREFIX = "refs/heads/"


class AzureDevOpsRepository:
    """Fetch files of an Azure DevOps Git repository."""

    def __init__(
        self,
        organization: str,
        project: str,
        repository: str,
        pat: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        api_root: str = API_ROOT,
    ):
        self.organization = organization
        self.project = project
        self.repository = repository
        self._pat = pat or None
        self._api_root = api_root.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)
        self._client.headers.update(self._headers())

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        if self._pat:
            token = base64.b64encode(f":{self._pat}".encode("ascii")).decode("ascii")
            headers["Authorization"] = f"Basic {token}"
        return headers

    @property
    def _repo_url(self) -> str:
        return (
            f"{self._api_root}/{quote(self.organization)}/{quote(self.project)}"
            f"/_apis/git/repositories/{quote(self.repository)}"
        )

    def get_default_branch(self) -> str:
        """Default branch with the ``refs/heads/`` prefix removed."""
        try:
            response = http_get(self._client, self._repo_url, params={"api-version": API_VERSION})
        except RepoError as e:
            logger.warning(f"Cannot read default branch of {self.repository}: {e}")
            return DEFAULT_BRANCH
        if response is None:
            return DEFAULT_BRANCH

        data = decode_json(response)
        branch = data.get("defaultBranch") if isinstance(data, dict) else None
        if not branch:
            return DEFAULT_BRANCH
        if branch.lower().startswith(BRANCH_REF_PREFIX):
            return branch[len(BRANCH_REF_PREFIX):]
        return branch

    def get_file_content(self, path: str, branch: str) -> Optional[str]:
        """File content, or None when the item does not exist."""
        params = {
            "path": "/" + path.lstrip("/"),
            "version": branch or DEFAULT_BRANCH,
            "includeContent": "true",
            "api-version": API_VERSION,
        }
        response = http_get(self._client, f"{self._repo_url}/items", params=params)
        if response is None:
            return None
        data = decode_json(response)
        if isinstance(data, dict) and data.get("content") is not None:
            return str(data["content"])
        return None

    def list_files(self, path: str, branch: str) -> list[tuple[str, str]]:
        """Files (not folders) one level under a folder."""
        params = {
            "scopePath": "/" + path.strip("/"),
            "recursionLevel": "OneLevel",
            "includeContentMetadata": "true",
            "version": branch or DEFAULT_BRANCH,
            "api-version": API_VERSION,
        }
        response = http_get(self._client, f"{self._repo_url}/items", params=params)
        if response is None:
            return []

        data = decode_json(response)
        entries = data.get("value") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            return []

        files: list[tuple[str, str]] = []
        for entry in entries:
            if not isinstance(entry, dict) or entry.get("isFolder"):
                continue
            item_path = entry.get("path")
            if not item_path:
                continue
            name = item_path.rsplit("/", 1)[-1]
            files.append((name, item_path.lstrip("/")))
        return files

    def close(self) -> None:
        self._client.close()
