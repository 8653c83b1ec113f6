"""
CLI Layer - command line interface.
"""

from moduledocs.cli.app import app, plan, help_command, version

__all__ = [
    "app",
    "plan",
    "help_command",
    "version",
]
