"""Async subprocess utilities.

Runs ``git`` and ``gh`` without blocking the event loop. Output is either
captured and decoded, or passed straight through to the controlling
terminal so that push and pull progress stays visible to the user.

Example:
    >>> from git_ship.utils.async_subprocess import run_command
    >>> stdout, stderr, code = await run_command("git", "status", "--porcelain", check=False)
    >>> if code == 0:
    ...     print(stdout)
"""

import asyncio
from pathlib import Path

from git_ship.exceptions import CommandFailedError, CommandNotFoundError


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = None,
    capture_output: bool = True,
) -> tuple[str, str, int]:
    """Run a command asynchronously without shell interpolation.

    Args:
        *args: Executable followed by its arguments,
            e.g. ``"git", "commit", "-m", "message"``
        cwd: Working directory. ``None`` uses the current directory.
        check: Raise ``CommandFailedError`` when the exit code is non-zero.
        timeout: Seconds to wait before the process is killed and
            ``TimeoutError`` is raised. ``None`` waits indefinitely.
        capture_output: Capture stdout and stderr. When False the child
            inherits the parent's streams and the returned strings are empty.

    Returns:
        Tuple of (stdout, stderr, return_code). Output is decoded as UTF-8
        with replacement for invalid bytes.

    Raises:
        CommandNotFoundError: If the executable is not on PATH.
        CommandFailedError: If check=True and the command exits non-zero.
        TimeoutError: If the timeout is exceeded.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE if capture_output else None,
            stderr=asyncio.subprocess.PIPE if capture_output else None,
        )
    except FileNotFoundError as e:
        raise CommandNotFoundError(args[0]) from e

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout,
        )
    except TimeoutError:
        process.kill()
        await process.wait()
        raise

    stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")
    returncode = process.returncode or 0

    if check and returncode != 0:
        raise CommandFailedError(list(args), returncode, stderr)

    return stdout, stderr, returncode
