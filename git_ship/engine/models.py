"""
Data model for the ship workflow.

These immutable values describe the repository and the artifacts produced
along the way (file lists, generated commit and PR text, stack plans). They
are created by the effect executor or by generation providers and then
travel, unchanged, inside states, events and effects.

Example:
    Building a plan and checking it covers the working change set::

        plan = StackPlan(
            groups=(
                StackGroup(files=("src/db.py",), commit_message="feat: add db layer"),
                StackGroup(files=("src/api.py",), commit_message="feat: expose api"),
            ),
            branch_name="feat-db-api",
            pr_title="feat: db and api",
            pr_body="## Summary\\n- db\\n- api",
        )
        assert plan.covers(["src/db.py", "src/api.py"])
"""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, replace

from git_ship.enums import FileStatus, Goal


@dataclass(frozen=True)
class GitContext:
    """Snapshot of repository state at decision time.

    Captured once by the ``check_tools`` effect and re-captured from scratch
    after a successful pull. Never patched incrementally except for
    ``on_main`` once a branch has been created.
    """

    current_branch: str
    on_main: bool
    has_staged: bool = False
    has_unstaged: bool = False
    has_untracked: bool = False
    has_changes: bool = False
    has_upstream: bool = False
    unpushed_count: int = 0
    """Local commits not yet on the remote tracking branch."""

    unmerged_count: int = 0
    """Local commits not yet merged into trunk."""

    untracked_raw: str = ""
    """Raw ``git ls-files --others --exclude-standard`` output."""

    def with_branch_created(self, branch_name: str) -> "GitContext":
        """Return a copy checked out on ``branch_name`` instead of trunk."""
        return replace(self, on_main=False, current_branch=branch_name)


@dataclass(frozen=True)
class FileEntry:
    """A changed file offered for staging."""

    path: str
    status: FileStatus


@dataclass(frozen=True)
class PrDetails:
    """Pull request title and body."""

    pr_title: str
    pr_body: str


@dataclass(frozen=True)
class CommitDetails:
    """Everything needed to commit and open a pull request."""

    branch_name: str
    commit_message: str
    pr_title: str
    pr_body: str

    def pr_details(self) -> PrDetails:
        """Project onto the PR-only fields."""
        return PrDetails(pr_title=self.pr_title, pr_body=self.pr_body)


@dataclass(frozen=True)
class StackGroup:
    """One atomic commit inside a stack plan."""

    files: tuple[str, ...]
    commit_message: str


@dataclass(frozen=True)
class StackPlan:
    """Ordered commits sharing one branch and one pull request.

    Group order is commit order. A valid plan assigns every file of the
    working change set to exactly one group.
    """

    groups: tuple[StackGroup, ...]
    branch_name: str
    pr_title: str
    pr_body: str

    def covers(self, paths: Iterable[str]) -> bool:
        """Check that every path appears in exactly one non-empty group."""
        expected = set(paths)
        counts = Counter(path for group in self.groups for path in group.files)
        if not self.groups or any(not group.files for group in self.groups):
            return False
        if any(count != 1 for count in counts.values()):
            return False
        return set(counts) == expected

    def combined_message(self) -> str:
        """All group commit messages joined in commit order."""
        return "\n".join(group.commit_message for group in self.groups)

    def to_commit_details(self, branch_name: str) -> CommitDetails:
        """Summarize the whole stack as a single set of commit details."""
        return CommitDetails(
            branch_name=branch_name,
            commit_message=self.combined_message(),
            pr_title=self.pr_title,
            pr_body=self.pr_body,
        )


@dataclass(frozen=True)
class RunMode:
    """How the run is driven.

    ``goal`` is ``None`` for interactive runs. ``stack`` is only meaningful
    for the ``push`` and ``pr`` goals.
    """

    goal: Goal | None = None
    stack: bool = False

    @property
    def is_auto(self) -> bool:
        return self.goal is not None

    @property
    def is_stack(self) -> bool:
        return self.is_auto and self.stack

    @property
    def label(self) -> str:
        """Flags as the user typed them, for the intro banner."""
        if self.goal is None:
            return ""
        return f"--{self.goal.value}" + (" --stack" if self.stack else "")
