"""
Workflow states.

Each variant of the ``State`` union is a frozen dataclass carrying exactly
the context accumulated so far on its path. The ``kind`` class attribute is
the stable tag used in diagnostics and logs.

Paths:
    - Preflight: ``Preflight``
    - Pull check: ``CheckingRemote`` -> ``ConfirmingPull`` -> ``Pulling``
    - Fast path (commits exist, tree clean): ``FastPath*``
    - Full path (uncommitted changes): ``CollectingFiles`` ... ``Merging``
    - Stacked commits: ``StackCommitting``
    - Terminal: ``Done``, ``Cancelled``, ``Error``, ``NothingToShip``,
      ``MergeConflict``
"""

from dataclasses import dataclass
from typing import ClassVar

from git_ship.engine.models import (
    CommitDetails,
    FileEntry,
    GitContext,
    PrDetails,
    StackPlan,
)
from git_ship.enums import PostPush

# -----------------------------------------------------------------------------
# Preflight and pull check
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Preflight:
    kind: ClassVar[str] = "preflight"


@dataclass(frozen=True)
class CheckingRemote:
    kind: ClassVar[str] = "checking_remote"
    git: GitContext


@dataclass(frozen=True)
class ConfirmingPull:
    kind: ClassVar[str] = "confirming_pull"
    git: GitContext
    behind: int


@dataclass(frozen=True)
class Pulling:
    kind: ClassVar[str] = "pulling"
    git: GitContext


# -----------------------------------------------------------------------------
# Fast path
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class FastPathLogging:
    kind: ClassVar[str] = "fast_path_logging"
    git: GitContext


@dataclass(frozen=True)
class FastPathPushing:
    kind: ClassVar[str] = "fast_path_pushing"
    git: GitContext
    commit_log: str


@dataclass(frozen=True)
class FastPathCheckingPr:
    kind: ClassVar[str] = "fast_path_checking_pr"
    git: GitContext


@dataclass(frozen=True)
class FastPathGeneratingPr:
    """Fetching the trunk diff, then generating PR details from it."""

    kind: ClassVar[str] = "fast_path_generating_pr"
    git: GitContext
    diff: str = ""


@dataclass(frozen=True)
class FastPathConfirmingPr:
    kind: ClassVar[str] = "fast_path_confirming_pr"
    git: GitContext
    pr_details: PrDetails


@dataclass(frozen=True)
class FastPathCreatingPr:
    kind: ClassVar[str] = "fast_path_creating_pr"
    git: GitContext
    pr_details: PrDetails


@dataclass(frozen=True)
class FastPathConfirmingMerge:
    kind: ClassVar[str] = "fast_path_confirming_merge"
    git: GitContext
    pr_url: str


@dataclass(frozen=True)
class FastPathMerging:
    kind: ClassVar[str] = "fast_path_merging"
    git: GitContext
    pr_url: str


# -----------------------------------------------------------------------------
# Full path
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CollectingFiles:
    kind: ClassVar[str] = "collecting_files"
    git: GitContext


@dataclass(frozen=True)
class PickingFiles:
    kind: ClassVar[str] = "picking_files"
    git: GitContext
    files: tuple[FileEntry, ...]


@dataclass(frozen=True)
class StagingFiles:
    kind: ClassVar[str] = "staging_files"
    git: GitContext
    selected_files: tuple[str, ...]


@dataclass(frozen=True)
class GettingDiff:
    kind: ClassVar[str] = "getting_diff"
    git: GitContext


@dataclass(frozen=True)
class GeneratingDetails:
    kind: ClassVar[str] = "generating_details"
    git: GitContext
    diff: str


@dataclass(frozen=True)
class ConfirmingBranch:
    kind: ClassVar[str] = "confirming_branch"
    git: GitContext
    details: CommitDetails


@dataclass(frozen=True)
class ConfirmingCommit:
    kind: ClassVar[str] = "confirming_commit"
    git: GitContext
    details: CommitDetails
    branch_name: str


@dataclass(frozen=True)
class EditingCommit:
    kind: ClassVar[str] = "editing_commit"
    git: GitContext
    details: CommitDetails
    branch_name: str


@dataclass(frozen=True)
class Committing:
    kind: ClassVar[str] = "committing"
    git: GitContext
    details: CommitDetails
    branch_name: str
    commit_message: str


@dataclass(frozen=True)
class PostCommitCheckingPr:
    kind: ClassVar[str] = "post_commit_checking_pr"
    git: GitContext
    details: CommitDetails
    branch_name: str


@dataclass(frozen=True)
class PostCommit:
    """Re-entrant hub offered once a commit exists."""

    kind: ClassVar[str] = "post_commit"
    git: GitContext
    details: CommitDetails
    branch_name: str
    pr_url: str | None = None


@dataclass(frozen=True)
class Pushing:
    kind: ClassVar[str] = "pushing"
    git: GitContext
    details: CommitDetails
    branch_name: str
    post_push: PostPush


@dataclass(frozen=True)
class CheckingPr:
    kind: ClassVar[str] = "checking_pr"
    git: GitContext
    details: CommitDetails
    branch_name: str


@dataclass(frozen=True)
class ConfirmingPr:
    kind: ClassVar[str] = "confirming_pr"
    git: GitContext
    details: CommitDetails
    branch_name: str


@dataclass(frozen=True)
class CreatingPr:
    kind: ClassVar[str] = "creating_pr"
    git: GitContext
    details: CommitDetails
    branch_name: str


@dataclass(frozen=True)
class ConfirmingMerge:
    kind: ClassVar[str] = "confirming_merge"
    git: GitContext
    branch_name: str
    pr_url: str


@dataclass(frozen=True)
class Merging:
    kind: ClassVar[str] = "merging"
    git: GitContext
    branch_name: str
    pr_url: str


@dataclass(frozen=True)
class StackCommitting:
    kind: ClassVar[str] = "stack_committing"
    git: GitContext
    plan: StackPlan
    current_index: int


# -----------------------------------------------------------------------------
# Terminal
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Done:
    kind: ClassVar[str] = "done"
    message: str


@dataclass(frozen=True)
class Cancelled:
    kind: ClassVar[str] = "cancelled"
    message: str


@dataclass(frozen=True)
class Error:
    kind: ClassVar[str] = "error"
    message: str


@dataclass(frozen=True)
class NothingToShip:
    kind: ClassVar[str] = "nothing_to_ship"


@dataclass(frozen=True)
class MergeConflict:
    kind: ClassVar[str] = "merge_conflict"
    git: GitContext
    message: str


State = (
    Preflight
    | CheckingRemote
    | ConfirmingPull
    | Pulling
    | FastPathLogging
    | FastPathPushing
    | FastPathCheckingPr
    | FastPathGeneratingPr
    | FastPathConfirmingPr
    | FastPathCreatingPr
    | FastPathConfirmingMerge
    | FastPathMerging
    | CollectingFiles
    | PickingFiles
    | StagingFiles
    | GettingDiff
    | GeneratingDetails
    | ConfirmingBranch
    | ConfirmingCommit
    | EditingCommit
    | Committing
    | PostCommitCheckingPr
    | PostCommit
    | Pushing
    | CheckingPr
    | ConfirmingPr
    | CreatingPr
    | ConfirmingMerge
    | Merging
    | StackCommitting
    | Done
    | Cancelled
    | Error
    | NothingToShip
    | MergeConflict
)

TERMINAL_STATES: tuple[type, ...] = (Done, Cancelled, Error, NothingToShip, MergeConflict)


def is_terminal(state: State) -> bool:
    """Check whether the run loop must stop at this state."""
    return isinstance(state, TERMINAL_STATES)
