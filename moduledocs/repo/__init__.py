"""
Repository Layer - remote repository clients.

The planner depends only on the :class:`RepoClient` contract; the
providers and the factory live here.
"""

from moduledocs.repo.base import (
    RepoClient,
    RepoError,
    RepoNetworkError,
    RepoTimeoutError,
    RepoAuthError,
)
from moduledocs.repo.github import GitHubRepository
from moduledocs.repo.azure_devops import AzureDevOpsRepository
from moduledocs.repo.git_checkout import GitCheckoutRepository, CloneConfig, CloneError
from moduledocs.repo.tokens import TokenStore, resolve_token
from moduledocs.repo.urls import RepoProvider, RepoUrlInfo, parse_repo_url, create_repo_client

__all__ = [
    # base
    "RepoClient",
    "RepoError",
    "RepoNetworkError",
    "RepoTimeoutError",
    "RepoAuthError",
    # providers
    "GitHubRepository",
    "AzureDevOpsRepository",
    "GitCheckoutRepository",
    "CloneConfig",
    "CloneError",
    # tokens
    "TokenStore",
    "resolve_token",
    # urls
    "RepoProvider",
    "RepoUrlInfo",
    "parse_repo_url",
    "create_repo_client",
]
