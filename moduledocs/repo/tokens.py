"""
Token resolution for repository access.

Order: explicit token, then environment variables, then the persisted
per-host token store.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


# ============================================================
# Constants
# ============================================================

# Checked in order; the first non-empty value wins
TOKEN_ENV_VARS: tuple[str, ...] = (
    "PG_GITHUB_TOKEN",
    "GITHUB_TOKEN",
    "PG_AZDO_PAT",
    "AZURE_DEVOPS_EXT_PAT",
)

STORE_ENV_VAR = "MODULEDOCS_TOKEN_STORE"


def default_store_path() -> Path:
    """Token store location, overridable through ``MODULEDOCS_TOKEN_STORE``."""
    override = os.environ.get(STORE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "moduledocs" / "tokens.json"


# ============================================================
# Token store
# ============================================================

class TokenStore:
    """Per-host tokens persisted as a small JSON object."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or default_store_path()

    def _load(self) -> dict[str, str]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable token store {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k).lower(): str(v) for k, v in data.items() if v}

    def _save(self, tokens: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(tokens, indent=2, sort_keys=True), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            pass  # not supported on every platform

    def get_token(self, host: str) -> Optional[str]:
        """Token stored for a host, or None."""
        if not host:
            return None
        return self._load().get(host.lower())

    def set_token(self, host: str, token: str) -> None:
        """Store (or replace) the token of a host."""
        tokens = self._load()
        tokens[host.lower()] = token
        self._save(tokens)

    def remove_token(self, host: str) -> bool:
        """Forget the token of a host. Returns whether one was stored."""
        tokens = self._load()
        if tokens.pop(host.lower(), None) is None:
            return False
        self._save(tokens)
        return True


def resolve_token(
    explicit: Optional[str],
    host: Optional[str] = None,
    store: Optional[TokenStore] = None,
) -> Optional[str]:
    """
    Resolve the token for a repository host.

    Args:
        explicit: Token passed by the caller
        host: Repository host (for the token store lookup)
        store: Token store (defaults to the user store)

    Returns:
        The first available token, or None
    """
    if explicit:
        return explicit

    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value

    if host:
        return (store or TokenStore()).get_token(host)
    return None
