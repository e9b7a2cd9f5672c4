"""
Pure transition function for the ship workflow.

``transition(state, event)`` returns the next state plus the ordered effects
to perform before the next event is awaited. It performs no I/O, never
raises, and is deterministic: every failure, including an event the current
state cannot handle, is returned as a state value.

Dispatch goes through ``_HANDLERS``, a table from state class to handler.
A handler returns ``None`` for events it does not accept, which maps to the
generic invalid-transition ``Error`` state. Terminal states have no handler,
so they reject every event.

Example:
    >>> from git_ship.engine.states import Preflight
    >>> from git_ship.engine.events import ToolsOk
    >>> result = transition(Preflight(), ToolsOk(git=context))
    >>> result.state.kind
    'collecting_files'
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from git_ship.engine import effects as fx
from git_ship.engine import events as ev
from git_ship.engine import states as st
from git_ship.engine.models import CommitDetails, GitContext, StackPlan
from git_ship.enums import CommitAction, PostCommitChoice, PostPush, PrAnnouncement


@dataclass(frozen=True)
class Transition:
    """Next state and the effects to perform on the way there."""

    state: st.State
    effects: tuple[fx.Effect, ...] = ()


INITIAL = Transition(st.Preflight(), (fx.CheckTools(),))
"""Where every run, and every restart after a pull, begins."""


def transition(state: st.State, event: ev.Event) -> Transition:
    """Compute the next state and effects for ``event`` arriving in ``state``.

    Args:
        state: Current workflow state
        event: Outcome of the effects emitted by the previous transition

    Returns:
        The next state and its effects. Unexpected events yield an ``Error``
        state naming both the event and the state.
    """
    handler = _HANDLERS.get(type(state))
    if handler is None:
        return _invalid(state, event)
    result = handler(state, event)
    return result if result is not None else _invalid(state, event)


def _invalid(state: st.State, event: ev.Event) -> Transition:
    return Transition(st.Error(message=f'Unexpected event "{event.kind}" in state "{state.kind}"'))


def _unstaged_cancel(message: str) -> Transition:
    # Leave the index empty on any full-path cancellation.
    return Transition(st.Cancelled(message=message), (fx.UnstageAll(),))


# -----------------------------------------------------------------------------
# Preflight and pull check
# -----------------------------------------------------------------------------


def _nothing_pending(git: GitContext) -> bool:
    return not git.has_changes and git.unpushed_count == 0 and git.unmerged_count == 0


def _continue_after_pull_check(git: GitContext) -> Transition:
    if _nothing_pending(git):
        return Transition(st.NothingToShip())
    if not git.has_changes:
        return Transition(st.FastPathLogging(git=git), (fx.ShowCommitLog(git=git),))
    return Transition(st.CollectingFiles(git=git), (fx.CollectFiles(git=git),))


def _on_preflight(state: st.Preflight, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return Transition(st.Cancelled(message=event.reason))
    if not isinstance(event, ev.ToolsOk):
        return None
    git = event.git
    if _nothing_pending(git):
        return Transition(st.NothingToShip())
    if not git.on_main and git.has_upstream:
        return Transition(
            st.CheckingRemote(git=git),
            (fx.CheckRemoteStatus(branch=git.current_branch),),
        )
    return _continue_after_pull_check(git)


def _on_checking_remote(state: st.CheckingRemote, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.RemoteStatus):
        return None
    if event.behind > 0:
        return Transition(
            st.ConfirmingPull(git=state.git, behind=event.behind),
            (fx.PromptConfirmPull(behind=event.behind),),
        )
    return _continue_after_pull_check(state.git)


def _on_confirming_pull(state: st.ConfirmingPull, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.ConfirmPull):
        return None
    if event.accepted:
        return Transition(
            st.Pulling(git=state.git),
            (fx.PullRemote(branch=state.git.current_branch),),
        )
    return _continue_after_pull_check(state.git)


def _on_pulling(state: st.Pulling, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.PullDone):
        # Everything captured so far may be stale; start over.
        return INITIAL
    if isinstance(event, ev.PullConflict):
        return Transition(st.MergeConflict(git=state.git, message=event.message))
    return None


# -----------------------------------------------------------------------------
# Fast path
# -----------------------------------------------------------------------------


def _fast_path_check_pr(git: GitContext) -> Transition:
    return Transition(
        st.FastPathCheckingPr(git=git),
        (fx.CheckExistingPr(branch=git.current_branch),),
    )


def _fast_path_confirm_merge(git: GitContext, pr_url: str, announcement: PrAnnouncement) -> Transition:
    return Transition(
        st.FastPathConfirmingMerge(git=git, pr_url=pr_url),
        (
            fx.AnnouncePr(pr_url=pr_url, status=announcement),
            fx.PromptConfirmMerge(pr_url=pr_url),
        ),
    )


def _on_fast_path_logging(state: st.FastPathLogging, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.CommitLogReady):
        return None
    git = state.git
    if git.unpushed_count > 0:
        return Transition(
            st.FastPathPushing(git=git, commit_log=event.commit_log),
            (fx.PushBranch(branch=git.current_branch),),
        )
    return _fast_path_check_pr(git)


def _on_fast_path_pushing(state: st.FastPathPushing, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return Transition(st.Cancelled(message=event.reason))
    if not isinstance(event, ev.PushDone):
        return None
    return _fast_path_check_pr(state.git)


def _on_fast_path_checking_pr(state: st.FastPathCheckingPr, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.PrExists):
        return _fast_path_confirm_merge(state.git, event.pr_url, PrAnnouncement.FOUND)
    if isinstance(event, ev.NoPr):
        return Transition(st.FastPathGeneratingPr(git=state.git), (fx.GetDiffMain(),))
    return None


def _on_fast_path_generating_pr(state: st.FastPathGeneratingPr, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.DiffReady):
        return Transition(
            st.FastPathGeneratingPr(git=state.git, diff=event.diff),
            (fx.GeneratePrDetails(diff=event.diff),),
        )
    if isinstance(event, ev.PrDetailsGenerated):
        return Transition(
            st.FastPathConfirmingPr(git=state.git, pr_details=event.pr_details),
            (fx.PromptConfirmPr(pr_details=event.pr_details),),
        )
    if isinstance(event, ev.PrDetailsFailed | ev.UserCancelled):
        return Transition(
            st.Done(message="Branch pushed. Create PR manually."),
            (fx.ShowPrHint(branch_name=state.git.current_branch),),
        )
    return None


def _on_fast_path_confirming_pr(state: st.FastPathConfirmingPr, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return Transition(st.Cancelled(message=event.reason))
    if not isinstance(event, ev.ConfirmPr):
        return None
    if not event.accepted:
        return Transition(
            st.Done(message="Branch pushed."),
            (fx.ShowPrHint(branch_name=state.git.current_branch),),
        )
    return Transition(
        st.FastPathCreatingPr(git=state.git, pr_details=state.pr_details),
        (fx.CreatePr(branch=state.git.current_branch, pr_details=state.pr_details),),
    )


def _on_fast_path_creating_pr(state: st.FastPathCreatingPr, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.PrCreated):
        return None
    return _fast_path_confirm_merge(state.git, event.pr_url, PrAnnouncement.CREATED)


def _on_fast_path_confirming_merge(state: st.FastPathConfirmingMerge, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return Transition(st.Cancelled(message=event.reason))
    if not isinstance(event, ev.ConfirmMerge):
        return None
    if not event.accepted:
        return Transition(
            st.Done(message=f"PR open: {state.pr_url}"),
            (fx.ShowMergeHint(pr_url=state.pr_url, branch_name=state.git.current_branch),),
        )
    return Transition(
        st.FastPathMerging(git=state.git, pr_url=state.pr_url),
        (fx.MergeAndCleanup(pr_url=state.pr_url, on_main=state.git.on_main),),
    )


def _on_fast_path_merging(state: st.FastPathMerging, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.MergeDone):
        return None
    return Transition(st.Done(message=f"Shipped! {event.pr_url}"))


# -----------------------------------------------------------------------------
# Full path
# -----------------------------------------------------------------------------


def _confirm_commit(
    state: st.GeneratingDetails | st.ConfirmingBranch, details: CommitDetails, branch_name: str
) -> Transition:
    return Transition(
        st.ConfirmingCommit(git=state.git, details=details, branch_name=branch_name),
        (
            fx.ShowCommitMessage(commit_message=details.commit_message),
            fx.PromptCommitAction(),
        ),
    )


def _commit(state: st.ConfirmingCommit | st.EditingCommit, commit_message: str) -> Transition:
    return Transition(
        st.Committing(
            git=state.git,
            details=state.details,
            branch_name=state.branch_name,
            commit_message=commit_message,
        ),
        (
            fx.CommitOnly(
                branch_name=state.branch_name,
                commit_message=commit_message,
                on_main=state.git.on_main,
            ),
        ),
    )


def _on_collecting_files(state: st.CollectingFiles, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.FilesCollected):
        return None
    return Transition(
        st.PickingFiles(git=state.git, files=event.files),
        (fx.PromptFilePicker(files=event.files),),
    )


def _on_picking_files(state: st.PickingFiles, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return Transition(st.Cancelled(message=event.reason))
    if isinstance(event, ev.StackPlanGenerated):
        return _start_stack_committing(state.git, event.plan)
    if not isinstance(event, ev.FilesPicked):
        return None
    return Transition(
        st.StagingFiles(git=state.git, selected_files=event.selected_files),
        (fx.StageFiles(selected_files=event.selected_files),),
    )


def _on_staging_files(state: st.StagingFiles, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.FilesStaged):
        return None
    return Transition(
        st.GettingDiff(git=state.git),
        (fx.LogInfo(message=event.short_stat), fx.GetStagedDiff()),
    )


def _on_getting_diff(state: st.GettingDiff, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.DiffReady):
        return None
    return Transition(
        st.GeneratingDetails(git=state.git, diff=event.diff),
        (fx.GenerateCommitDetails(diff=event.diff),),
    )


def _on_generating_details(state: st.GeneratingDetails, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.DetailsGenerated):
        details = event.details
        if state.git.on_main:
            return Transition(
                st.ConfirmingBranch(git=state.git, details=details),
                (fx.PromptBranchName(suggestion=details.branch_name),),
            )
        return _confirm_commit(state, details, state.git.current_branch)
    if isinstance(event, ev.DetailsFailed | ev.UserCancelled):
        return _unstaged_cancel("Aborted.")
    return None


def _on_confirming_branch(state: st.ConfirmingBranch, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return _unstaged_cancel("Cancelled.")
    if not isinstance(event, ev.BranchConfirmed):
        return None
    return _confirm_commit(state, state.details, event.branch_name)


def _on_confirming_commit(state: st.ConfirmingCommit, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return _unstaged_cancel("Cancelled.")
    if not isinstance(event, ev.CommitActionChosen):
        return None
    if event.action is CommitAction.CANCEL:
        return _unstaged_cancel("Aborted.")
    if event.action is CommitAction.EDIT:
        return Transition(
            st.EditingCommit(git=state.git, details=state.details, branch_name=state.branch_name),
            (fx.OpenEditor(commit_message=state.details.commit_message),),
        )
    return _commit(state, state.details.commit_message)


def _on_editing_commit(state: st.EditingCommit, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return _unstaged_cancel("Cancelled.")
    if not isinstance(event, ev.CommitEdited):
        return None
    return _commit(state, event.commit_message)


def _check_pr_after_commit(git: GitContext, details: CommitDetails, branch_name: str) -> Transition:
    return Transition(
        st.PostCommitCheckingPr(git=git, details=details, branch_name=branch_name),
        (fx.CheckExistingPr(branch=branch_name),),
    )


def _on_committing(state: st.Committing, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.CommitDone):
        return None
    # The commit created the branch if there was none.
    git = state.git.with_branch_created(state.branch_name)
    return _check_pr_after_commit(git, state.details, state.branch_name)


def _on_post_commit_checking_pr(state: st.PostCommitCheckingPr, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.PrExists):
        pr_url: str | None = event.pr_url
    elif isinstance(event, ev.NoPr):
        pr_url = None
    else:
        return None
    return Transition(
        st.PostCommit(git=state.git, details=state.details, branch_name=state.branch_name, pr_url=pr_url),
        (fx.PromptPostCommit(pr_url=pr_url),),
    )


# -----------------------------------------------------------------------------
# Post-commit hub, push, PR and merge
# -----------------------------------------------------------------------------


def _on_post_commit(state: st.PostCommit, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.PostCommitChosen):
        return None
    if event.choice is PostCommitChoice.COMMIT_MORE:
        return Transition(st.CollectingFiles(git=state.git), (fx.CollectFiles(git=state.git),))
    if event.choice is PostCommitChoice.DONE:
        return Transition(st.Done(message="Committed locally."))
    post_push = PostPush.CHECK_PR if event.choice is PostCommitChoice.CREATE_PR else PostPush.DONE
    return Transition(
        st.Pushing(
            git=state.git,
            details=state.details,
            branch_name=state.branch_name,
            post_push=post_push,
        ),
        (fx.PushBranch(branch=state.branch_name),),
    )


def _on_pushing(state: st.Pushing, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return _unstaged_cancel("Push cancelled. Commit kept locally.")
    if not isinstance(event, ev.PushDone):
        return None
    if state.post_push is PostPush.DONE:
        return Transition(st.Done(message="Pushed."))
    return Transition(
        st.CheckingPr(git=state.git, details=state.details, branch_name=state.branch_name),
        (fx.CheckExistingPr(branch=state.branch_name),),
    )


def _confirm_merge(git: GitContext, branch_name: str, pr_url: str, announcement: PrAnnouncement) -> Transition:
    return Transition(
        st.ConfirmingMerge(git=git, branch_name=branch_name, pr_url=pr_url),
        (
            fx.AnnouncePr(pr_url=pr_url, status=announcement),
            fx.PromptConfirmMerge(pr_url=pr_url),
        ),
    )


def _on_checking_pr(state: st.CheckingPr, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.PrExists):
        return _confirm_merge(state.git, state.branch_name, event.pr_url, PrAnnouncement.UPDATED)
    if isinstance(event, ev.NoPr):
        return Transition(
            st.ConfirmingPr(git=state.git, details=state.details, branch_name=state.branch_name),
            (fx.PromptConfirmPr(pr_details=state.details.pr_details()),),
        )
    return None


def _on_confirming_pr(state: st.ConfirmingPr, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return _unstaged_cancel("Cancelled.")
    if not isinstance(event, ev.ConfirmPr):
        return None
    if not event.accepted:
        return Transition(st.Done(message="Done."), (fx.ShowPrHint(branch_name=state.branch_name),))
    return Transition(
        st.CreatingPr(git=state.git, details=state.details, branch_name=state.branch_name),
        (fx.CreatePr(branch=state.branch_name, pr_details=state.details.pr_details()),),
    )


def _on_creating_pr(state: st.CreatingPr, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.PrCreated):
        return None
    return _confirm_merge(state.git, state.branch_name, event.pr_url, PrAnnouncement.CREATED)


def _on_confirming_merge(state: st.ConfirmingMerge, event: ev.Event) -> Transition | None:
    if isinstance(event, ev.UserCancelled):
        return _unstaged_cancel("Cancelled.")
    if not isinstance(event, ev.ConfirmMerge):
        return None
    if not event.accepted:
        return Transition(
            st.Done(message=f"PR open: {state.pr_url}"),
            (fx.ShowMergeHint(pr_url=state.pr_url, branch_name=state.branch_name),),
        )
    return Transition(
        st.Merging(git=state.git, branch_name=state.branch_name, pr_url=state.pr_url),
        (fx.MergeAndCleanup(pr_url=state.pr_url, on_main=state.git.on_main),),
    )


def _on_merging(state: st.Merging, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.MergeDone):
        return None
    return Transition(st.Done(message=f"Shipped! {event.pr_url}"))


# -----------------------------------------------------------------------------
# Stacked commits
# -----------------------------------------------------------------------------


def _start_stack_committing(git: GitContext, plan: StackPlan) -> Transition:
    if not plan.groups:
        return Transition(st.Error(message="Stack plan has no commit groups"))
    return Transition(
        st.StackCommitting(git=git, plan=plan, current_index=0),
        (
            fx.ExecuteStackCommit(
                group=plan.groups[0],
                branch_name=plan.branch_name,
                is_first=True,
                on_main=git.on_main,
                index=0,
            ),
        ),
    )


def _on_stack_committing(state: st.StackCommitting, event: ev.Event) -> Transition | None:
    if not isinstance(event, ev.StackCommitDone):
        return None
    if event.next_index != state.current_index + 1:
        return _invalid(state, event)
    plan = state.plan
    if event.next_index < len(plan.groups):
        return Transition(
            st.StackCommitting(git=state.git, plan=plan, current_index=event.next_index),
            (
                fx.ExecuteStackCommit(
                    group=plan.groups[event.next_index],
                    branch_name=plan.branch_name,
                    is_first=False,
                    on_main=False,
                    index=event.next_index,
                ),
            ),
        )
    branch_name = plan.branch_name if state.git.on_main else state.git.current_branch
    return _check_pr_after_commit(
        state.git.with_branch_created(branch_name),
        plan.to_commit_details(branch_name),
        branch_name,
    )


_HANDLERS: dict[type, Callable[[Any, ev.Event], Transition | None]] = {
    st.Preflight: _on_preflight,
    st.CheckingRemote: _on_checking_remote,
    st.ConfirmingPull: _on_confirming_pull,
    st.Pulling: _on_pulling,
    st.FastPathLogging: _on_fast_path_logging,
    st.FastPathPushing: _on_fast_path_pushing,
    st.FastPathCheckingPr: _on_fast_path_checking_pr,
    st.FastPathGeneratingPr: _on_fast_path_generating_pr,
    st.FastPathConfirmingPr: _on_fast_path_confirming_pr,
    st.FastPathCreatingPr: _on_fast_path_creating_pr,
    st.FastPathConfirmingMerge: _on_fast_path_confirming_merge,
    st.FastPathMerging: _on_fast_path_merging,
    st.CollectingFiles: _on_collecting_files,
    st.PickingFiles: _on_picking_files,
    st.StagingFiles: _on_staging_files,
    st.GettingDiff: _on_getting_diff,
    st.GeneratingDetails: _on_generating_details,
    st.ConfirmingBranch: _on_confirming_branch,
    st.ConfirmingCommit: _on_confirming_commit,
    st.EditingCommit: _on_editing_commit,
    st.Committing: _on_committing,
    st.PostCommitCheckingPr: _on_post_commit_checking_pr,
    st.PostCommit: _on_post_commit,
    st.Pushing: _on_pushing,
    st.CheckingPr: _on_checking_pr,
    st.ConfirmingPr: _on_confirming_pr,
    st.CreatingPr: _on_creating_pr,
    st.ConfirmingMerge: _on_confirming_merge,
    st.Merging: _on_merging,
    st.StackCommitting: _on_stack_committing,
}


def handled_states() -> frozenset[type]:
    """State classes that accept at least one event."""
    return frozenset(_HANDLERS)
