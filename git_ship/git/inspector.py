"""Read-only repository queries used by the effect executor.

``GitInspector`` answers questions about the working tree, the local branch
and the remote without changing anything except remote-tracking refs
(``git fetch``). Writes (staging, committing, pushing) stay in the executor.

Example:
    >>> inspector = GitInspector(CommandRunner(root), trunk="main")
    >>> context = await inspector.capture_context()
    >>> if context.has_changes:
    ...     files = await inspector.collect_files(context)
"""

import structlog

from git_ship.engine.models import FileEntry, GitContext
from git_ship.enums import FileStatus
from git_ship.git.commands import CommandRunner
from git_ship.utils.helpers import parse_count, split_lines

log = structlog.get_logger(__name__)


class GitInspector:
    """Builds ``GitContext`` snapshots and other read-only views.

    Attributes:
        commands: Adapter used to run ``git`` and ``gh``
        trunk: Name of the trunk branch (e.g. ``main``)
    """

    def __init__(self, commands: CommandRunner, trunk: str = "main") -> None:
        self.commands = commands
        self.trunk = trunk

    @property
    def remote_trunk(self) -> str:
        return f"origin/{self.trunk}"

    async def capture_context(self) -> GitContext:
        """Capture a fresh snapshot of repository state.

        Counts are taken against the remote: ``unpushed_count`` against the
        branch's own remote ref when it exists, otherwise against remote
        trunk; ``unmerged_count`` always against remote trunk. Both are zero
        on trunk itself.

        Returns:
            Immutable snapshot used for every routing decision of the run
        """
        run = self.commands
        current_branch = await run.output("git", "branch", "--show-current")
        on_main = current_branch == self.trunk
        has_staged = not await run.succeeds("git", "diff", "--cached", "--quiet")
        has_unstaged = not await run.succeeds("git", "diff", "--quiet")
        untracked_raw = await run.output("git", "ls-files", "--others", "--exclude-standard")
        has_untracked = bool(untracked_raw)

        has_upstream = False
        unpushed_count = 0
        unmerged_count = 0
        if not on_main:
            has_upstream = await run.succeeds("git", "rev-parse", "--verify", f"origin/{current_branch}")
            base = f"origin/{current_branch}" if has_upstream else self.remote_trunk
            unpushed_count = parse_count(await run.output("git", "rev-list", "--count", f"{base}..HEAD"))
            unmerged_count = parse_count(
                await run.output("git", "rev-list", "--count", f"{self.remote_trunk}..HEAD")
            )

        context = GitContext(
            current_branch=current_branch,
            on_main=on_main,
            has_staged=has_staged,
            has_unstaged=has_unstaged,
            has_untracked=has_untracked,
            has_changes=has_staged or has_unstaged or has_untracked,
            has_upstream=has_upstream,
            unpushed_count=unpushed_count,
            unmerged_count=unmerged_count,
            untracked_raw=untracked_raw,
        )
        log.debug(
            "git_context_captured",
            branch=current_branch,
            on_main=on_main,
            has_changes=context.has_changes,
            unpushed=unpushed_count,
            unmerged=unmerged_count,
        )
        return context

    async def collect_files(self, git: GitContext) -> tuple[FileEntry, ...]:
        """List changed files, each path once.

        Staged files come first, then unstaged modifications, then untracked
        files. A path already listed keeps its first status.

        Args:
            git: Snapshot deciding which sources are consulted

        Returns:
            Changed files in display order
        """
        sources: list[tuple[FileStatus, list[str]]] = []
        if git.has_staged:
            staged = await self.commands.output("git", "diff", "--cached", "--name-only")
            sources.append((FileStatus.STAGED, split_lines(staged)))
        if git.has_unstaged:
            modified = await self.commands.output("git", "diff", "--name-only")
            sources.append((FileStatus.MODIFIED, split_lines(modified)))
        if git.has_untracked:
            sources.append((FileStatus.NEW, split_lines(git.untracked_raw)))

        files: list[FileEntry] = []
        seen: set[str] = set()
        for status, paths in sources:
            for path in paths:
                if path not in seen:
                    files.append(FileEntry(path=path, status=status))
                    seen.add(path)
        return tuple(files)

    async def behind_count(self, branch: str) -> int:
        """Fetch ``branch`` and count remote commits missing locally."""
        await self.commands.succeeds("git", "fetch", "origin", branch, "--quiet")
        return parse_count(await self.commands.output("git", "rev-list", "--count", f"HEAD..origin/{branch}"))

    async def commit_log(self) -> str:
        """One-line log of commits not yet on remote trunk."""
        return await self.commands.output("git", "log", "--oneline", f"{self.remote_trunk}..HEAD")

    async def trunk_diff(self) -> str:
        return await self.commands.output("git", "diff", f"{self.remote_trunk}..HEAD")

    async def staged_diff(self) -> str:
        return await self.commands.output("git", "diff", "--cached")

    async def staged_short_stat(self) -> str:
        return await self.commands.output("git", "diff", "--cached", "--shortstat")

    async def find_pr_url(self, branch: str) -> str | None:
        """URL of the open pull request for ``branch``, if any."""
        if not await self.commands.succeeds("gh", "pr", "view", branch, "--json", "url"):
            return None
        url = await self.commands.output("gh", "pr", "view", branch, "--json", "url", "-q", ".url")
        return url or None
