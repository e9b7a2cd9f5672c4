"""Subcommands of the ``ship`` CLI.

    - setup: store API keys (keyring or config file)
    - configure: choose the PR merge strategy
"""

from git_ship.cli.configure import configure_command
from git_ship.cli.setup import setup_command

__all__ = ["configure_command", "setup_command"]
