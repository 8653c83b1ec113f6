"""
Help source - fetch command help from PowerShell.

Runs ``pwsh`` with an explicit timeout:
- ``fetch_text`` returns the ``Get-Help -Full`` text rendering
- ``fetch_structured`` returns the same help as a JSON object graph

A timeout, a missing shell or a failing command means "help
unavailable" (None); nothing here raises for those.
"""

import json
import logging
import re
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from moduledocs.help.models import CommandHelpModel, ExamplesMode
from moduledocs.help.parser import HelpContentParser

logger = logging.getLogger(__name__)


# ============================================================
# Configuration
# ============================================================

# Command names passed to the shell; anything else is refused
COMMAND_NAME_PATTERN = re.compile(r'^[\w.\-:\\/]+$')

TEXT_SCRIPT = "Get-Help -Name '{name}' -Full -ErrorAction SilentlyContinue | Out-String -Width {width}"

JSON_SCRIPT = (
    "$h = Get-Help -Name '{name}' -Full -ErrorAction SilentlyContinue; "
    "if ($h) {{ $h | ConvertTo-Json -Depth {depth} -Compress }}"
)


@dataclass(frozen=True)
class HelpSourceConfig:
    """
    Help source configuration.

    Attributes:
        shell: PowerShell executable
        timeout: Seconds allowed per invocation
        width: Output width of the text rendering
        json_depth: ConvertTo-Json depth
    """
    shell: str = "pwsh"
    timeout: int = 5
    width: int = 4096
    json_depth: int = 8


class PowerShellHelpSource:
    """Fetch help through a PowerShell child process."""

    def __init__(self, config: Optional[HelpSourceConfig] = None):
        self.config = config or HelpSourceConfig()

    def is_valid_command(self, command: str) -> bool:
        return bool(command) and bool(COMMAND_NAME_PATTERN.match(command))

    def _run(self, script: str) -> Optional[str]:
        args = [self.config.shell, "-NoProfile", "-NonInteractive", "-Command", script]
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=max(1, self.config.timeout),
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Help lookup timed out after {self.config.timeout} seconds")
            return None
        except OSError as e:
            logger.warning(f"Cannot start {self.config.shell}: {e}")
            return None

        if result.returncode != 0:
            logger.warning(f"Help lookup failed ({result.returncode}): {result.stderr.strip()[:200]}")
            return None
        return result.stdout

    def fetch_text(self, command: str) -> Optional[str]:
        """Raw text help of a command, or None."""
        if not self.is_valid_command(command):
            logger.warning(f"Refusing help lookup for {command!r}")
            return None
        text = self._run(TEXT_SCRIPT.format(name=command, width=self.config.width))
        if text is None or not text.strip():
            return None
        return text

    def fetch_structured(self, command: str) -> Optional[Any]:
        """Structured help of a command (decoded JSON), or None."""
        if not self.is_valid_command(command):
            logger.warning(f"Refusing help lookup for {command!r}")
            return None
        output = self._run(JSON_SCRIPT.format(name=command, depth=self.config.json_depth))
        if output is None or not output.strip():
            return None
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            logger.warning(f"Structured help of {command} is not valid JSON: {e}")
            return None


# ============================================================
# Loading
# ============================================================

def load_command_help(
    command: str,
    source: Optional[PowerShellHelpSource] = None,
    parser: Optional[HelpContentParser] = None,
    examples_mode: ExamplesMode = ExamplesMode.AUTO,
    structured: bool = True,
) -> Optional[CommandHelpModel]:
    """
    Fetch and parse the help of one command.

    Args:
        command: Command name
        source: Help source
        parser: Help parser
        examples_mode: Where example bodies come from
        structured: Also fetch the structured snapshot

    Returns:
        The model, or None when help is unavailable
    """
    source = source or PowerShellHelpSource()
    parser = parser or HelpContentParser()

    raw = None
    if examples_mode is not ExamplesMode.STRUCTURED or not structured:
        raw = source.fetch_text(command)
    snapshot = source.fetch_structured(command) if structured else None

    if snapshot is None and raw is None:
        logger.debug(f"No help available for {command}")
        return None
    return parser.parse(snapshot, raw_dump=raw, examples_mode=examples_mode, fallback_name=command)


def load_many(
    commands: Iterable[str],
    workers: int = 4,
    source: Optional[PowerShellHelpSource] = None,
    parser: Optional[HelpContentParser] = None,
    examples_mode: ExamplesMode = ExamplesMode.AUTO,
    structured: bool = True,
) -> list[tuple[str, Optional[CommandHelpModel]]]:
    """
    Load the help of several commands in parallel.

    Returns:
        (command, model) pairs in input order
    """
    names = list(commands)
    source = source or PowerShellHelpSource()
    parser = parser or HelpContentParser()

    def load(name: str) -> Optional[CommandHelpModel]:
        return load_command_help(name, source, parser, examples_mode, structured)

    with ThreadPoolExecutor(max_workers=max(1, workers)) as executor:
        models = list(executor.map(load, names))
    return list(zip(names, models))
