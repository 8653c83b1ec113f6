"""
Repository collaborator contract and shared HTTP plumbing.

A repository client answers three questions: which branch is the
default, what is the content of a file, and which files live in a
folder. Providers (GitHub, Azure DevOps, plain git) implement the
:class:`RepoClient` protocol; the planner only ever talks to that.
"""

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


# ============================================================
# Constants
# ============================================================

DEFAULT_BRANCH = "main"

DEFAULT_TIMEOUT = 10.0

USER_AGENT = "moduledocs/0.1"


# ============================================================
# Errors
# ============================================================

class RepoError(Exception):
    """Base class of repository provider failures."""
    pass


class RepoNetworkError(RepoError):
    """The provider could not be reached."""
    pass


class RepoTimeoutError(RepoError):
    """The provider did not answer in time."""
    pass


class RepoAuthError(RepoError):
    """The provider rejected the credentials."""
    pass


# ============================================================
# Contract
# ============================================================

@runtime_checkable
class RepoClient(Protocol):
    """Three-method repository contract."""

    def get_default_branch(self) -> str:
        """Name of the default branch."""
        ...

    def get_file_content(self, path: str, branch: str) -> Optional[str]:
        """Text of a file, or None when it does not exist."""
        ...

    def list_files(self, path: str, branch: str) -> list[tuple[str, str]]:
        """``(name, path)`` pairs of the files (not folders) under a folder."""
        ...


# ============================================================
# HTTP helpers
# ============================================================

def http_get(
    client: httpx.Client,
    url: str,
    params: Optional[dict[str, Any]] = None,
) -> Optional[httpx.Response]:
    """
    Issue a GET and map failures onto the repository error taxonomy.

    Args:
        client: httpx client
        url: Absolute URL
        params: Query parameters

    Returns:
        The successful response, or None for 404

    Raises:
        RepoTimeoutError: The request timed out
        RepoNetworkError: Connection-level failure or unexpected status
        RepoAuthError: 401 / 403
    """
    try:
        response = client.get(url, params=params)
    except httpx.TimeoutException as e:
        raise RepoTimeoutError(f"Timed out requesting {url}: {e}") from e
    except httpx.RequestError as e:
        raise RepoNetworkError(f"Request to {url} failed: {e}") from e

    if response.status_code == 404:
        return None
    if response.status_code in (401, 403):
        raise RepoAuthError(f"Access denied ({response.status_code}) for {url}")
    if response.is_error:
        raise RepoNetworkError(f"Unexpected status {response.status_code} for {url}")
    return response


def decode_json(response: httpx.Response) -> Any:
    """Decode a JSON body, raising RepoNetworkError on garbage."""
    try:
        return response.json()
    except ValueError as e:
        raise RepoNetworkError(f"Invalid JSON from {response.request.url}: {e}") from e
