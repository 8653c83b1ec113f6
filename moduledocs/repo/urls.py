"""
Repository URL parsing and client factory.

Supported shapes:
1. ``https://github.com/<owner>/<repo>`` (optionally ``.git`` / deeper paths)
2. ``git@github.com:<owner>/<repo>.git``
3. ``https://dev.azure.com/<org>/<project>/_git/<repo>``
4. ``https://<org>.visualstudio.com/<project>/_git/<repo>``
5. Any other git URL (served by a shallow clone)
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from moduledocs.repo.azure_devops import AzureDevOpsRepository
from moduledocs.repo.base import DEFAULT_TIMEOUT, RepoClient
from moduledocs.repo.git_checkout import CloneConfig, GitCheckoutRepository
from moduledocs.repo.github import GitHubRepository
from moduledocs.repo.tokens import TokenStore, resolve_token


# ============================================================
# Patterns
# ============================================================

GITHUB_URL_PATTERN = re.compile(
    r'^https?://(?:www\.)?github\.com/([^/]+)/([^/?#]+?)(?:\.git)?(?:[/?#].*)?$',
    re.IGNORECASE,
)

GITHUB_SSH_PATTERN = re.compile(
    r'^git@github\.com:([^/]+)/([^/]+?)(?:\.git)?/?$',
    re.IGNORECASE,
)

AZURE_DEVOPS_PATTERN = re.compile(
    r'^https?://(?:[^@/]+@)?dev\.azure\.com/([^/]+)/([^/]+)/_git/([^/?#]+)',
    re.IGNORECASE,
)

VISUALSTUDIO_PATTERN = re.compile(
    r'^https?://(?:[^@/]+@)?([^./]+)\.visualstudio\.com/(?:DefaultCollection/)?([^/]+)/_git/([^/?#]+)',
    re.IGNORECASE,
)

HOST_PATTERN = re.compile(r'^(?:[a-z+]+://)?(?:[^@/]+@)?([^/:]+)', re.IGNORECASE)


class RepoProvider(Enum):
    GITHUB = "github"
    AZURE_DEVOPS = "azure_devops"
    GIT = "git"


@dataclass(frozen=True)
class RepoUrlInfo:
    """
    Parsed repository URL.

    Attributes:
        provider: Hosting provider
        host: Host name used for token lookup
        url: Original URL
        owner: GitHub owner, or Azure DevOps organization
        project: Azure DevOps project
        repository: Repository name
    """
    provider: RepoProvider
    host: str
    url: str
    owner: Optional[str] = None
    project: Optional[str] = None
    repository: Optional[str] = None


def parse_repo_url(url: str) -> Optional[RepoUrlInfo]:
    """
    Parse a repository URL.

    Args:
        url: Project or repository URL

    Returns:
        Parsed info, or None for blank input
    """
    url = (url or "").strip()
    if not url:
        return None

    for pattern in (GITHUB_URL_PATTERN, GITHUB_SSH_PATTERN):
        match = pattern.match(url)
        if match:
            return RepoUrlInfo(
                provider=RepoProvider.GITHUB,
                host="github.com",
                url=url,
                owner=match.group(1),
                repository=match.group(2),
            )

    match = AZURE_DEVOPS_PATTERN.match(url)
    if match:
        return RepoUrlInfo(
            provider=RepoProvider.AZURE_DEVOPS,
            host="dev.azure.com",
            url=url,
            owner=match.group(1),
            project=match.group(2),
            repository=match.group(3),
        )

    match = VISUALSTUDIO_PATTERN.match(url)
    if match:
        return RepoUrlInfo(
            provider=RepoProvider.AZURE_DEVOPS,
            host="dev.azure.com",
            url=url,
            owner=match.group(1),
            project=match.group(2),
            repository=match.group(3),
        )

    host_match = HOST_PATTERN.match(url)
    host = host_match.group(1).lower() if host_match else ""
    return RepoUrlInfo(provider=RepoProvider.GIT, host=host, url=url)


def create_repo_client(
    url: str,
    token: Optional[str] = None,
    store: Optional[TokenStore] = None,
    timeout: float = DEFAULT_TIMEOUT,
    clone_config: Optional[CloneConfig] = None,
) -> Optional[RepoClient]:
    """
    Build the repository client matching a URL.

    The token is resolved from the explicit value, the environment, then
    the persisted token store for the URL's host.

    Args:
        url: Project or repository URL
        token: Explicit token
        store: Token store (defaults to the user store)
        timeout: HTTP timeout in seconds
        clone_config: Clone settings for plain git URLs

    Returns:
        A client, or None when the URL is blank
    """
    info = parse_repo_url(url)
    if info is None:
        return None

    resolved = resolve_token(token, info.host, store)

    if info.provider is RepoProvider.GITHUB:
        return GitHubRepository(info.owner, info.repository, token=resolved, timeout=timeout)
    if info.provider is RepoProvider.AZURE_DEVOPS:
        return AzureDevOpsRepository(
            info.owner, info.project, info.repository, pat=resolved, timeout=timeout,
        )
    return GitCheckoutRepository(info.url, config=clone_config)
