"""
Workflow events.

An event is the outcome of performing one effect list: a tool check result,
a diff, generated text, a user answer, or a completion signal. Events are
produced only by the effect executor and consumed only by the transition
function.
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
from git_ship.enums import CommitAction, PostCommitChoice


@dataclass(frozen=True)
class ToolsOk:
    kind: ClassVar[str] = "tools_ok"
    git: GitContext


@dataclass(frozen=True)
class CommitLogReady:
    kind: ClassVar[str] = "commit_log_ready"
    commit_log: str


@dataclass(frozen=True)
class PushDone:
    kind: ClassVar[str] = "push_done"


@dataclass(frozen=True)
class PrExists:
    kind: ClassVar[str] = "pr_exists"
    pr_url: str


@dataclass(frozen=True)
class NoPr:
    kind: ClassVar[str] = "no_pr"


@dataclass(frozen=True)
class DiffReady:
    kind: ClassVar[str] = "diff_ready"
    diff: str


@dataclass(frozen=True)
class PrDetailsGenerated:
    kind: ClassVar[str] = "pr_details_generated"
    pr_details: PrDetails


@dataclass(frozen=True)
class PrDetailsFailed:
    kind: ClassVar[str] = "pr_details_failed"


@dataclass(frozen=True)
class ConfirmPr:
    kind: ClassVar[str] = "confirm_pr"
    accepted: bool


@dataclass(frozen=True)
class PrCreated:
    kind: ClassVar[str] = "pr_created"
    pr_url: str


@dataclass(frozen=True)
class ConfirmMerge:
    kind: ClassVar[str] = "confirm_merge"
    accepted: bool


@dataclass(frozen=True)
class MergeDone:
    kind: ClassVar[str] = "merge_done"
    pr_url: str


@dataclass(frozen=True)
class FilesCollected:
    kind: ClassVar[str] = "files_collected"
    files: tuple[FileEntry, ...]


@dataclass(frozen=True)
class FilesPicked:
    kind: ClassVar[str] = "files_picked"
    selected_files: tuple[str, ...]


@dataclass(frozen=True)
class FilesStaged:
    kind: ClassVar[str] = "files_staged"
    short_stat: str


@dataclass(frozen=True)
class DetailsGenerated:
    kind: ClassVar[str] = "details_generated"
    details: CommitDetails


@dataclass(frozen=True)
class DetailsFailed:
    kind: ClassVar[str] = "details_failed"


@dataclass(frozen=True)
class BranchConfirmed:
    kind: ClassVar[str] = "branch_confirmed"
    branch_name: str


@dataclass(frozen=True)
class CommitActionChosen:
    kind: ClassVar[str] = "commit_action"
    action: CommitAction


@dataclass(frozen=True)
class CommitEdited:
    kind: ClassVar[str] = "commit_edited"
    commit_message: str


@dataclass(frozen=True)
class CommitDone:
    kind: ClassVar[str] = "commit_done"


@dataclass(frozen=True)
class UserCancelled:
    """The user backed out, or a precondition forced cancellation.

    ``reason`` becomes the message of the ``cancelled`` state where the
    transition has no more specific wording (e.g. a missing tool).
    """

    kind: ClassVar[str] = "user_cancelled"
    reason: str = "Cancelled."


@dataclass(frozen=True)
class RemoteStatus:
    kind: ClassVar[str] = "remote_status"
    behind: int


@dataclass(frozen=True)
class ConfirmPull:
    kind: ClassVar[str] = "confirm_pull"
    accepted: bool


@dataclass(frozen=True)
class PullDone:
    kind: ClassVar[str] = "pull_done"


@dataclass(frozen=True)
class PullConflict:
    kind: ClassVar[str] = "pull_conflict"
    message: str


@dataclass(frozen=True)
class PostCommitChosen:
    kind: ClassVar[str] = "post_commit_choice"
    choice: PostCommitChoice


@dataclass(frozen=True)
class StackPlanGenerated:
    kind: ClassVar[str] = "stack_plan_generated"
    plan: StackPlan


@dataclass(frozen=True)
class StackCommitDone:
    kind: ClassVar[str] = "stack_commit_done"
    next_index: int


Event = (
    ToolsOk
    | CommitLogReady
    | PushDone
    | PrExists
    | NoPr
    | DiffReady
    | PrDetailsGenerated
    | PrDetailsFailed
    | ConfirmPr
    | PrCreated
    | ConfirmMerge
    | MergeDone
    | FilesCollected
    | FilesPicked
    | FilesStaged
    | DetailsGenerated
    | DetailsFailed
    | BranchConfirmed
    | CommitActionChosen
    | CommitEdited
    | CommitDone
    | UserCancelled
    | RemoteStatus
    | ConfirmPull
    | PullDone
    | PullConflict
    | PostCommitChosen
    | StackPlanGenerated
    | StackCommitDone
)
