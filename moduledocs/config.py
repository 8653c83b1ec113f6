"""
Configuration - per-module delivery options.

A module may ship a ``.moduledocs.json`` file next to its manifest
describing where its documentation lives and what extra pages to show::

    {
        "internals_path": "Internals",
        "intro_text": ["Welcome!", "Read the README first."],
        "upgrade_file": "UPGRADE.md",
        "documentation_order": ["Setup.md", "Usage.md"],
        "important_links": [{"title": "Docs", "url": "https://example.org"}],
        "repository_paths": ["docs"],
        "project_uri": "https://github.com/owner/repo"
    }

Every key is optional.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


# ============================================================
# Constants
# ============================================================

CONFIG_FILE_NAME = ".moduledocs.json"

DEFAULT_INTERNALS_PATH = "Internals"


class ConfigError(Exception):
    """Raised when a delivery configuration file cannot be used."""
    pass


# ============================================================
# Data models
# ============================================================

@dataclass(frozen=True)
class ImportantLink:
    """A link listed on the generated links page."""
    url: str
    title: Optional[str] = None


@dataclass(frozen=True)
class DeliveryOptions:
    """
    Delivery options of one module.

    Attributes:
        internals_path: Secondary folder, relative to the module root
        intro_text: Inline introduction lines
        intro_file: Introduction file, relative to the module root
        upgrade_text: Inline upgrade notes
        upgrade_file: Upgrade file, relative to the module root
        documentation_order: Explicit order of supplemental doc file names
        important_links: Links for the generated links page
        repository_paths: Remote folders holding extra documentation
        project_uri: Repository URL of the module
    """
    internals_path: str = DEFAULT_INTERNALS_PATH
    intro_text: tuple[str, ...] = ()
    intro_file: Optional[str] = None
    upgrade_text: tuple[str, ...] = ()
    upgrade_file: Optional[str] = None
    documentation_order: tuple[str, ...] = ()
    important_links: tuple[ImportantLink, ...] = ()
    repository_paths: tuple[str, ...] = ()
    project_uri: Optional[str] = None

    @property
    def has_intro(self) -> bool:
        """Whether any introduction content is configured."""
        return bool(self.intro_text) or bool(self.intro_file)

    @property
    def has_upgrade_text(self) -> bool:
        return bool(self.upgrade_text)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryOptions":
        """
        Build options from a decoded JSON object.

        Raises:
            ConfigError: A file or URI option is not a string
        """
        return cls(
            internals_path=str(data.get("internals_path") or DEFAULT_INTERNALS_PATH),
            intro_text=_as_lines(data.get("intro_text")),
            intro_file=_as_optional_str(data, "intro_file"),
            upgrade_text=_as_lines(data.get("upgrade_text")),
            upgrade_file=_as_optional_str(data, "upgrade_file"),
            documentation_order=_as_lines(data.get("documentation_order")),
            important_links=_as_links(data.get("important_links")),
            repository_paths=_as_lines(data.get("repository_paths")),
            project_uri=_as_optional_str(data, "project_uri"),
        )


@dataclass(frozen=True)
class ModuleLayout:
    """Resolved folders of a module."""
    root: Path
    secondary: Optional[Path] = None
    options: DeliveryOptions = field(default_factory=DeliveryOptions)


# ============================================================
# Loading
# ============================================================

def load_delivery_options(root: Path, config_path: Optional[Path] = None) -> DeliveryOptions:
    """
    Load delivery options for a module.

    Args:
        root: Module root folder
        config_path: Explicit configuration file (defaults to
            ``<root>/.moduledocs.json``)

    Returns:
        The options; defaults when no file exists

    Raises:
        ConfigError: The file exists but is unreadable, not a JSON object,
            or has a mistyped option
    """
    path = config_path or (root / CONFIG_FILE_NAME)
    if not path.is_file():
        if config_path is not None:
            raise ConfigError(f"Configuration file not found: {path}")
        return DeliveryOptions()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")

    logger.debug(f"Loaded delivery options from {path}")
    return DeliveryOptions.from_dict(data)


def resolve_layout(root: Path, options: Optional[DeliveryOptions] = None) -> ModuleLayout:
    """
    Resolve the module root and its secondary (Internals) folder.

    The secondary folder is only reported when it exists.
    """
    root = root.resolve()
    opts = options if options is not None else load_delivery_options(root)
    candidate = root / (opts.internals_path or DEFAULT_INTERNALS_PATH)
    secondary = candidate if candidate.is_dir() else None
    return ModuleLayout(root=root, secondary=secondary, options=opts)


def _as_optional_str(data: dict[str, Any], key: str) -> Optional[str]:
    """A string option, None when absent or empty."""
    value = data.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Option '{key}' must be a string, got {type(value).__name__}")
    return value


def _as_lines(value: Any) -> tuple[str, ...]:
    """Coerce a string or a list of values to a tuple of strings."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,) if value else ()
    if isinstance(value, (list, tuple)):
        return tuple("" if v is None else str(v) for v in value)
    return (str(value),)


def _as_links(value: Any) -> tuple[ImportantLink, ...]:
    """Coerce link entries (objects with url/title, or bare URL strings)."""
    if not value:
        return ()
    entries = value if isinstance(value, (list, tuple)) else [value]
    links: list[ImportantLink] = []
    for entry in entries:
        if isinstance(entry, str):
            if entry:
                links.append(ImportantLink(url=entry))
            continue
        if isinstance(entry, dict):
            url = entry.get("url") or entry.get("Url")
            title = entry.get("title") or entry.get("Title") or entry.get("name") or entry.get("Name")
            if url:
                links.append(ImportantLink(url=str(url), title=str(title) if title else None))
    return tuple(links)
