"""Command adapter for ``git`` and ``gh``.

``CommandRunner`` exposes the few ways the workflow needs to run an external
command, all rooted at the repository top level:

    - ``output``: captured, trimmed stdout; exit status ignored
    - ``succeeds``: whether the exit status is zero
    - ``stream``: output goes to the terminal; non-zero exit raises
    - ``require``: captured stdout; non-zero exit raises
    - ``capture``: stdout, stderr and exit code for callers that interpret
      failure themselves

Example:
    >>> runner = CommandRunner("/path/to/repo")
    >>> branch = await runner.output("git", "branch", "--show-current")
    >>> if not await runner.succeeds("git", "diff", "--quiet"):
    ...     print("unstaged changes")
"""

from dataclasses import dataclass
from pathlib import Path

import structlog

from git_ship.exceptions import CommandFailedError
from git_ship.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one command."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands in the repository root."""

    def __init__(self, cwd: Path | str | None = None) -> None:
        """Initialize the runner.

        Args:
            cwd: Directory every command runs in. ``None`` uses the current
                working directory.
        """
        self.cwd = cwd

    async def capture(self, *args: str) -> CommandResult:
        """Run a command and capture everything, never raising on failure.

        Raises:
            CommandNotFoundError: If the executable is not installed
        """
        stdout, stderr, returncode = await run_command(*args, cwd=self.cwd, check=False)
        log.debug("command_finished", command=list(args), returncode=returncode)
        return CommandResult(stdout=stdout, stderr=stderr, returncode=returncode)

    async def output(self, *args: str) -> str:
        """Captured stdout with surrounding whitespace trimmed."""
        result = await self.capture(*args)
        return result.stdout.strip()

    async def succeeds(self, *args: str) -> bool:
        result = await self.capture(*args)
        return result.ok

    async def require(self, *args: str) -> str:
        """Captured, trimmed stdout of a command that must succeed.

        Raises:
            CommandFailedError: If the command exits non-zero
        """
        result = await self.capture(*args)
        if not result.ok:
            raise CommandFailedError(list(args), result.returncode, result.stderr)
        return result.stdout.strip()

    async def stream(self, *args: str) -> None:
        """Run a command with its output shown on the terminal.

        Raises:
            CommandFailedError: If the command exits non-zero
        """
        log.debug("command_streaming", command=list(args))
        await run_command(*args, cwd=self.cwd, check=True, capture_output=False)
