"""
Workflow effects.

Effects are inert descriptions of externally observable actions. The
transition function returns them; only the effect executor interprets them.
Each effect carries every piece of data the executor needs, so executing it
never requires looking at the current state.
"""

from dataclasses import dataclass
from typing import ClassVar

from git_ship.engine.models import (
    FileEntry,
    GitContext,
    PrDetails,
    StackGroup,
)
from git_ship.enums import PrAnnouncement


@dataclass(frozen=True)
class CheckTools:
    kind: ClassVar[str] = "check_tools"


@dataclass(frozen=True)
class LogInfo:
    kind: ClassVar[str] = "log_info"
    message: str


@dataclass(frozen=True)
class ShowCommitLog:
    kind: ClassVar[str] = "show_commit_log"
    git: GitContext


@dataclass(frozen=True)
class PushBranch:
    kind: ClassVar[str] = "push_branch"
    branch: str


@dataclass(frozen=True)
class CheckExistingPr:
    kind: ClassVar[str] = "check_existing_pr"
    branch: str


@dataclass(frozen=True)
class GetDiffMain:
    """Diff of the current branch against trunk on the remote."""

    kind: ClassVar[str] = "get_diff_main"


@dataclass(frozen=True)
class GeneratePrDetails:
    kind: ClassVar[str] = "generate_pr_details"
    diff: str


@dataclass(frozen=True)
class PromptConfirmPr:
    """Show the PR title/body and ask whether to open it."""

    kind: ClassVar[str] = "prompt_confirm_pr"
    pr_details: PrDetails


@dataclass(frozen=True)
class CreatePr:
    kind: ClassVar[str] = "create_pr"
    branch: str
    pr_details: PrDetails


@dataclass(frozen=True)
class AnnouncePr:
    kind: ClassVar[str] = "announce_pr"
    pr_url: str
    status: PrAnnouncement


@dataclass(frozen=True)
class PromptConfirmMerge:
    kind: ClassVar[str] = "prompt_confirm_merge"
    pr_url: str


@dataclass(frozen=True)
class MergeAndCleanup:
    kind: ClassVar[str] = "merge_and_cleanup"
    pr_url: str
    on_main: bool


@dataclass(frozen=True)
class CollectFiles:
    kind: ClassVar[str] = "collect_files"
    git: GitContext


@dataclass(frozen=True)
class PromptFilePicker:
    kind: ClassVar[str] = "prompt_file_picker"
    files: tuple[FileEntry, ...]


@dataclass(frozen=True)
class StageFiles:
    kind: ClassVar[str] = "stage_files"
    selected_files: tuple[str, ...]


@dataclass(frozen=True)
class GetStagedDiff:
    kind: ClassVar[str] = "get_staged_diff"


@dataclass(frozen=True)
class GenerateCommitDetails:
    kind: ClassVar[str] = "generate_commit_details"
    diff: str


@dataclass(frozen=True)
class PromptBranchName:
    kind: ClassVar[str] = "prompt_branch_name"
    suggestion: str


@dataclass(frozen=True)
class ShowCommitMessage:
    kind: ClassVar[str] = "show_commit_message"
    commit_message: str


@dataclass(frozen=True)
class PromptCommitAction:
    kind: ClassVar[str] = "prompt_commit_action"


@dataclass(frozen=True)
class OpenEditor:
    kind: ClassVar[str] = "open_editor"
    commit_message: str


@dataclass(frozen=True)
class CommitOnly:
    """Commit the staged changes, creating the branch first when on trunk."""

    kind: ClassVar[str] = "commit_only"
    branch_name: str
    commit_message: str
    on_main: bool


@dataclass(frozen=True)
class ShowMergeHint:
    kind: ClassVar[str] = "show_merge_hint"
    pr_url: str
    branch_name: str


@dataclass(frozen=True)
class ShowPrHint:
    kind: ClassVar[str] = "show_pr_hint"
    branch_name: str


@dataclass(frozen=True)
class UnstageAll:
    """Compensating action: drop everything from the index."""

    kind: ClassVar[str] = "unstage_all"


@dataclass(frozen=True)
class CheckRemoteStatus:
    kind: ClassVar[str] = "check_remote_status"
    branch: str


@dataclass(frozen=True)
class PromptConfirmPull:
    kind: ClassVar[str] = "prompt_confirm_pull"
    behind: int


@dataclass(frozen=True)
class PullRemote:
    kind: ClassVar[str] = "pull_remote"
    branch: str


@dataclass(frozen=True)
class PromptPostCommit:
    kind: ClassVar[str] = "prompt_post_commit"
    pr_url: str | None = None


@dataclass(frozen=True)
class ExecuteStackCommit:
    """Stage one group's files and commit them with the group's message."""

    kind: ClassVar[str] = "execute_stack_commit"
    group: StackGroup
    branch_name: str
    is_first: bool
    on_main: bool
    index: int


Effect = (
    CheckTools
    | LogInfo
    | ShowCommitLog
    | PushBranch
    | CheckExistingPr
    | GetDiffMain
    | GeneratePrDetails
    | PromptConfirmPr
    | CreatePr
    | AnnouncePr
    | PromptConfirmMerge
    | MergeAndCleanup
    | CollectFiles
    | PromptFilePicker
    | StageFiles
    | GetStagedDiff
    | GenerateCommitDetails
    | PromptBranchName
    | ShowCommitMessage
    | PromptCommitAction
    | OpenEditor
    | CommitOnly
    | ShowMergeHint
    | ShowPrHint
    | UnstageAll
    | CheckRemoteStatus
    | PromptConfirmPull
    | PullRemote
    | PromptPostCommit
    | ExecuteStackCommit
)
