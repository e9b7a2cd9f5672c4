"""Git and GitHub CLI adapters.

Example:
    >>> from git_ship.git import CommandRunner, GitDiscovery, GitInspector
    >>> discovery = GitDiscovery()
    >>> runner = CommandRunner(discovery.root)
    >>> inspector = GitInspector(runner, trunk=discovery.detect_trunk())
"""

from git_ship.git.commands import CommandResult, CommandRunner
from git_ship.git.discovery import GitDiscovery
from git_ship.git.inspector import GitInspector

__all__ = [
    "CommandResult",
    "CommandRunner",
    "GitDiscovery",
    "GitInspector",
]
