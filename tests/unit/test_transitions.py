"""Tests for git_ship/engine/transitions.py - the pure workflow transition function."""

from dataclasses import replace

import pytest

from git_ship.engine import effects as fx
from git_ship.engine import events as ev
from git_ship.engine import states as st
from git_ship.engine.models import CommitDetails, GitContext, PrDetails, StackGroup, StackPlan
from git_ship.engine.transitions import INITIAL, handled_states, transition
from git_ship.enums import CommitAction, PostCommitChoice, PostPush, PrAnnouncement


def effect_kinds(result) -> list[str]:
    return [effect.kind for effect in result.effects]


def drive(state, events) -> list:
    """Feed events in order, returning every transition taken."""
    results = []
    for event in events:
        result = transition(state, event)
        results.append(result)
        state = result.state
    return results


# Every non-terminal state paired with an event it does not accept.
def non_terminal_samples(git: GitContext, details: CommitDetails, pr: PrDetails, plan: StackPlan) -> list:
    return [
        st.Preflight(),
        st.CheckingRemote(git=git),
        st.ConfirmingPull(git=git, behind=2),
        st.Pulling(git=git),
        st.FastPathLogging(git=git),
        st.FastPathPushing(git=git, commit_log="abc fix"),
        st.FastPathCheckingPr(git=git),
        st.FastPathGeneratingPr(git=git),
        st.FastPathConfirmingPr(git=git, pr_details=pr),
        st.FastPathCreatingPr(git=git, pr_details=pr),
        st.FastPathConfirmingMerge(git=git, pr_url="https://pr/1"),
        st.FastPathMerging(git=git, pr_url="https://pr/1"),
        st.CollectingFiles(git=git),
        st.PickingFiles(git=git, files=()),
        st.StagingFiles(git=git, selected_files=("a.py",)),
        st.GettingDiff(git=git),
        st.GeneratingDetails(git=git, diff="diff"),
        st.ConfirmingBranch(git=git, details=details),
        st.ConfirmingCommit(git=git, details=details, branch_name="b"),
        st.EditingCommit(git=git, details=details, branch_name="b"),
        st.Committing(git=git, details=details, branch_name="b", commit_message="m"),
        st.PostCommitCheckingPr(git=git, details=details, branch_name="b"),
        st.PostCommit(git=git, details=details, branch_name="b"),
        st.Pushing(git=git, details=details, branch_name="b", post_push=PostPush.DONE),
        st.CheckingPr(git=git, details=details, branch_name="b"),
        st.ConfirmingPr(git=git, details=details, branch_name="b"),
        st.CreatingPr(git=git, details=details, branch_name="b"),
        st.ConfirmingMerge(git=git, branch_name="b", pr_url="https://pr/1"),
        st.Merging(git=git, branch_name="b", pr_url="https://pr/1"),
        st.StackCommitting(git=git, plan=plan, current_index=0),
    ]


class TestScenarios:
    """End-to-end examples of single transitions."""

    def test_changes_on_main_go_to_file_collection(self):
        """Should collect files when on trunk with uncommitted changes."""
        git = GitContext(current_branch="main", on_main=True, has_changes=True, has_unstaged=True)

        result = transition(st.Preflight(), ev.ToolsOk(git=git))

        assert isinstance(result.state, st.CollectingFiles)
        assert result.effects == (fx.CollectFiles(git=git),)

    def test_unpushed_commits_without_upstream_take_fast_path(self):
        """Should log commits when only unpushed commits exist and there is no upstream."""
        git = GitContext(current_branch="feat", on_main=False, unpushed_count=3, has_upstream=False)

        result = transition(st.Preflight(), ev.ToolsOk(git=git))

        assert isinstance(result.state, st.FastPathLogging)
        assert effect_kinds(result) == ["show_commit_log"]

    def test_declined_merge_on_fast_path_reports_url(self, branch_context):
        """Should finish with the PR URL when the merge is declined."""
        state = st.FastPathConfirmingMerge(git=branch_context, pr_url="https://pr/1")

        result = transition(state, ev.ConfirmMerge(accepted=False))

        assert isinstance(result.state, st.Done)
        assert "https://pr/1" in result.state.message
        assert effect_kinds(result) == ["show_merge_hint"]

    def test_cancel_action_unstages(self, main_context, commit_details):
        """Should cancel and unstage when the commit action is cancel."""
        state = st.ConfirmingCommit(git=main_context, details=commit_details, branch_name="feat-add-login")

        result = transition(state, ev.CommitActionChosen(action=CommitAction.CANCEL))

        assert isinstance(result.state, st.Cancelled)
        assert "unstage_all" in effect_kinds(result)

    def test_pull_conflict_keeps_message(self, branch_context):
        """Should carry the exact conflict message into merge_conflict."""
        result = transition(st.Pulling(git=branch_context), ev.PullConflict(message="CONFLICT in file.ts"))

        assert isinstance(result.state, st.MergeConflict)
        assert result.state.message == "CONFLICT in file.ts"
        assert result.state.git == branch_context

    def test_commit_more_reenters_file_collection(self, branch_context, commit_details):
        """Should loop back to collecting files after choosing commit more."""
        state = st.PostCommit(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.PostCommitChosen(choice=PostCommitChoice.COMMIT_MORE))

        assert isinstance(result.state, st.CollectingFiles)
        assert effect_kinds(result) == ["collect_files"]


class TestPreflight:
    """Tests for the preflight state."""

    def test_nothing_to_ship(self):
        """Should stop when there are no changes and no pending commits."""
        git = GitContext(current_branch="main", on_main=True)

        result = transition(st.Preflight(), ev.ToolsOk(git=git))

        assert result.state == st.NothingToShip()
        assert result.effects == ()

    def test_nothing_to_ship_skips_remote_check(self):
        """Should not query the remote when nothing is pending, even with an upstream."""
        git = GitContext(current_branch="feat", on_main=False, has_upstream=True)

        result = transition(st.Preflight(), ev.ToolsOk(git=git))

        assert isinstance(result.state, st.NothingToShip)

    def test_branch_with_upstream_checks_remote(self, branch_context):
        """Should check the remote before anything else on a tracked branch."""
        result = transition(st.Preflight(), ev.ToolsOk(git=branch_context))

        assert isinstance(result.state, st.CheckingRemote)
        assert result.effects == (fx.CheckRemoteStatus(branch="feat-login"),)

    def test_on_main_never_checks_remote(self):
        """Should skip the remote check on trunk even with an upstream."""
        git = GitContext(current_branch="main", on_main=True, has_changes=True, has_upstream=True)

        result = transition(st.Preflight(), ev.ToolsOk(git=git))

        assert isinstance(result.state, st.CollectingFiles)

    def test_unmerged_only_takes_fast_path(self):
        """Should take the fast path when commits are pushed but not merged."""
        git = GitContext(current_branch="feat", on_main=False, unmerged_count=2)

        result = transition(st.Preflight(), ev.ToolsOk(git=git))

        assert isinstance(result.state, st.FastPathLogging)

    def test_missing_tool_cancels(self):
        """Should cancel with the reason given by the tool check."""
        result = transition(st.Preflight(), ev.UserCancelled(reason="gh CLI is not installed."))

        assert result.state == st.Cancelled(message="gh CLI is not installed.")


class TestPullCheck:
    """Tests for the remote status, pull confirmation and pull states."""

    def test_behind_prompts_for_pull(self, branch_context):
        """Should ask before pulling when the branch is behind."""
        result = transition(st.CheckingRemote(git=branch_context), ev.RemoteStatus(behind=2))

        assert result.state == st.ConfirmingPull(git=branch_context, behind=2)
        assert result.effects == (fx.PromptConfirmPull(behind=2),)

    def test_up_to_date_continues(self, branch_context):
        """Should continue to file collection when not behind."""
        result = transition(st.CheckingRemote(git=branch_context), ev.RemoteStatus(behind=0))

        assert isinstance(result.state, st.CollectingFiles)

    def test_accepted_pull_pulls_current_branch(self, branch_context):
        """Should pull the current branch when accepted."""
        state = st.ConfirmingPull(git=branch_context, behind=2)

        result = transition(state, ev.ConfirmPull(accepted=True))

        assert result.state == st.Pulling(git=branch_context)
        assert result.effects == (fx.PullRemote(branch="feat-login"),)

    def test_declined_pull_continues(self, branch_context):
        """Should continue as if up to date when the pull is declined."""
        state = st.ConfirmingPull(git=branch_context, behind=2)

        result = transition(state, ev.ConfirmPull(accepted=False))

        assert isinstance(result.state, st.CollectingFiles)

    def test_declined_pull_with_only_commits_takes_fast_path(self):
        """Should take the fast path after a declined pull when there are no changes."""
        git = GitContext(current_branch="feat", on_main=False, has_upstream=True, unpushed_count=1)

        result = transition(st.ConfirmingPull(git=git, behind=1), ev.ConfirmPull(accepted=False))

        assert isinstance(result.state, st.FastPathLogging)

    def test_successful_pull_restarts(self, branch_context):
        """Should restart from preflight with a fresh tool check after a pull."""
        result = transition(st.Pulling(git=branch_context), ev.PullDone())

        assert result == INITIAL
        assert result.state == st.Preflight()
        assert result.effects == (fx.CheckTools(),)


class TestFastPath:
    """Tests for pushing existing commits and opening a PR for them."""

    @pytest.fixture
    def git(self) -> GitContext:
        return GitContext(current_branch="feat", on_main=False, unpushed_count=2, unmerged_count=2)

    def test_unpushed_commits_are_pushed(self, git):
        """Should push when there are unpushed commits."""
        result = transition(st.FastPathLogging(git=git), ev.CommitLogReady(commit_log="abc one\ndef two"))

        assert result.state == st.FastPathPushing(git=git, commit_log="abc one\ndef two")
        assert result.effects == (fx.PushBranch(branch="feat"),)

    def test_pushed_commits_skip_push(self):
        """Should go straight to the PR check when everything is pushed."""
        git = GitContext(current_branch="feat", on_main=False, unmerged_count=1)

        result = transition(st.FastPathLogging(git=git), ev.CommitLogReady(commit_log="abc one"))

        assert isinstance(result.state, st.FastPathCheckingPr)
        assert result.effects == (fx.CheckExistingPr(branch="feat"),)

    def test_push_done_checks_pr(self, git):
        """Should check for a PR after pushing."""
        result = transition(st.FastPathPushing(git=git, commit_log=""), ev.PushDone())

        assert isinstance(result.state, st.FastPathCheckingPr)

    def test_declined_trunk_push_cancels(self, git):
        """Should cancel with the given reason when the push is declined."""
        result = transition(
            st.FastPathPushing(git=git, commit_log=""), ev.UserCancelled(reason="Push to main declined.")
        )

        assert result.state == st.Cancelled(message="Push to main declined.")

    def test_existing_pr_is_announced_as_found(self, git):
        """Should announce a found PR and ask to merge."""
        result = transition(st.FastPathCheckingPr(git=git), ev.PrExists(pr_url="https://pr/7"))

        assert result.state == st.FastPathConfirmingMerge(git=git, pr_url="https://pr/7")
        assert result.effects == (
            fx.AnnouncePr(pr_url="https://pr/7", status=PrAnnouncement.FOUND),
            fx.PromptConfirmMerge(pr_url="https://pr/7"),
        )

    def test_no_pr_requests_trunk_diff(self, git):
        """Should fetch the trunk diff when no PR exists."""
        result = transition(st.FastPathCheckingPr(git=git), ev.NoPr())

        assert result.state == st.FastPathGeneratingPr(git=git)
        assert result.effects == (fx.GetDiffMain(),)

    def test_diff_triggers_generation(self, git):
        """Should stay in the generating state and generate from the diff."""
        result = transition(st.FastPathGeneratingPr(git=git), ev.DiffReady(diff="+x"))

        assert result.state == st.FastPathGeneratingPr(git=git, diff="+x")
        assert result.effects == (fx.GeneratePrDetails(diff="+x"),)

    def test_generated_details_are_confirmed(self, git, pr_details):
        """Should ask to confirm the generated PR."""
        result = transition(st.FastPathGeneratingPr(git=git, diff="+x"), ev.PrDetailsGenerated(pr_details=pr_details))

        assert result.state == st.FastPathConfirmingPr(git=git, pr_details=pr_details)
        assert result.effects == (fx.PromptConfirmPr(pr_details=pr_details),)

    @pytest.mark.parametrize("event", [ev.PrDetailsFailed(), ev.UserCancelled()])
    def test_generation_failure_leaves_branch_pushed(self, git, event):
        """Should finish with a manual PR hint when generation fails or is cancelled."""
        result = transition(st.FastPathGeneratingPr(git=git, diff="+x"), event)

        assert result.state == st.Done(message="Branch pushed. Create PR manually.")
        assert result.effects == (fx.ShowPrHint(branch_name="feat"),)

    def test_declined_pr(self, git, pr_details):
        """Should finish with a hint when the PR is declined."""
        result = transition(st.FastPathConfirmingPr(git=git, pr_details=pr_details), ev.ConfirmPr(accepted=False))

        assert result.state == st.Done(message="Branch pushed.")
        assert effect_kinds(result) == ["show_pr_hint"]

    def test_accepted_pr_is_created(self, git, pr_details):
        """Should create the PR for the current branch."""
        result = transition(st.FastPathConfirmingPr(git=git, pr_details=pr_details), ev.ConfirmPr(accepted=True))

        assert result.state == st.FastPathCreatingPr(git=git, pr_details=pr_details)
        assert result.effects == (fx.CreatePr(branch="feat", pr_details=pr_details),)

    def test_created_pr_is_announced(self, git, pr_details):
        """Should announce the created PR and ask to merge."""
        result = transition(st.FastPathCreatingPr(git=git, pr_details=pr_details), ev.PrCreated(pr_url="https://pr/8"))

        assert isinstance(result.state, st.FastPathConfirmingMerge)
        assert result.effects[0] == fx.AnnouncePr(pr_url="https://pr/8", status=PrAnnouncement.CREATED)

    def test_accepted_merge(self, git):
        """Should merge with the trunk flag taken from the context."""
        result = transition(st.FastPathConfirmingMerge(git=git, pr_url="https://pr/1"), ev.ConfirmMerge(accepted=True))

        assert result.state == st.FastPathMerging(git=git, pr_url="https://pr/1")
        assert result.effects == (fx.MergeAndCleanup(pr_url="https://pr/1", on_main=False),)

    def test_merge_done(self, git):
        """Should finish with the shipped message."""
        result = transition(st.FastPathMerging(git=git, pr_url="https://pr/1"), ev.MergeDone(pr_url="https://pr/1"))

        assert result.state == st.Done(message="Shipped! https://pr/1")


class TestFullPath:
    """Tests for staging, generating, confirming and committing."""

    def test_files_are_offered_to_picker(self, main_context, sample_files):
        """Should show the picker with the collected files."""
        result = transition(st.CollectingFiles(git=main_context), ev.FilesCollected(files=sample_files))

        assert result.state == st.PickingFiles(git=main_context, files=sample_files)
        assert result.effects == (fx.PromptFilePicker(files=sample_files),)

    def test_picked_files_are_staged(self, main_context, sample_files):
        """Should stage exactly the picked files."""
        state = st.PickingFiles(git=main_context, files=sample_files)

        result = transition(state, ev.FilesPicked(selected_files=("src/app.py",)))

        assert result.state == st.StagingFiles(git=main_context, selected_files=("src/app.py",))
        assert result.effects == (fx.StageFiles(selected_files=("src/app.py",)),)

    def test_picker_cancel_does_not_unstage(self, main_context, sample_files):
        """Should cancel without touching the index before anything was staged."""
        result = transition(st.PickingFiles(git=main_context, files=sample_files), ev.UserCancelled())

        assert result.state == st.Cancelled(message="Cancelled.")
        assert result.effects == ()

    def test_staged_logs_short_stat_then_diffs(self, main_context):
        """Should log the short stat before fetching the staged diff."""
        state = st.StagingFiles(git=main_context, selected_files=("a.py",))

        result = transition(state, ev.FilesStaged(short_stat="1 file changed"))

        assert result.state == st.GettingDiff(git=main_context)
        assert result.effects == (fx.LogInfo(message="1 file changed"), fx.GetStagedDiff())

    def test_diff_triggers_commit_generation(self, main_context):
        """Should generate commit details from the staged diff."""
        result = transition(st.GettingDiff(git=main_context), ev.DiffReady(diff="+line"))

        assert result.state == st.GeneratingDetails(git=main_context, diff="+line")
        assert result.effects == (fx.GenerateCommitDetails(diff="+line"),)

    def test_on_main_confirms_branch_name(self, main_context, commit_details):
        """Should ask for a branch name when committing from trunk."""
        state = st.GeneratingDetails(git=main_context, diff="+line")

        result = transition(state, ev.DetailsGenerated(details=commit_details))

        assert result.state == st.ConfirmingBranch(git=main_context, details=commit_details)
        assert result.effects == (fx.PromptBranchName(suggestion="feat-add-login"),)

    def test_on_branch_uses_current_branch(self, branch_context, commit_details):
        """Should skip the branch prompt and commit on the current branch."""
        state = st.GeneratingDetails(git=branch_context, diff="+line")

        result = transition(state, ev.DetailsGenerated(details=commit_details))

        assert result.state == st.ConfirmingCommit(
            git=branch_context, details=commit_details, branch_name="feat-login"
        )
        assert effect_kinds(result) == ["show_commit_message", "prompt_commit_action"]

    @pytest.mark.parametrize("event", [ev.DetailsFailed(), ev.UserCancelled()])
    def test_generation_failure_aborts_and_unstages(self, main_context, event):
        """Should abort and unstage when generation fails."""
        result = transition(st.GeneratingDetails(git=main_context, diff="+line"), event)

        assert result.state == st.Cancelled(message="Aborted.")
        assert result.effects == (fx.UnstageAll(),)

    def test_branch_confirmed(self, main_context, commit_details):
        """Should use the confirmed branch name for the commit."""
        state = st.ConfirmingBranch(git=main_context, details=commit_details)

        result = transition(state, ev.BranchConfirmed(branch_name="feat-custom"))

        assert result.state == st.ConfirmingCommit(git=main_context, details=commit_details, branch_name="feat-custom")
        assert result.effects[0] == fx.ShowCommitMessage(commit_message="feat: add login form")

    def test_accept_commits_generated_message(self, main_context, commit_details):
        """Should commit with the generated message on accept."""
        state = st.ConfirmingCommit(git=main_context, details=commit_details, branch_name="feat-add-login")

        result = transition(state, ev.CommitActionChosen(action=CommitAction.ACCEPT))

        assert isinstance(result.state, st.Committing)
        assert result.effects == (
            fx.CommitOnly(branch_name="feat-add-login", commit_message="feat: add login form", on_main=True),
        )

    def test_edit_opens_editor(self, main_context, commit_details):
        """Should open the editor with the generated message."""
        state = st.ConfirmingCommit(git=main_context, details=commit_details, branch_name="feat-add-login")

        result = transition(state, ev.CommitActionChosen(action=CommitAction.EDIT))

        assert result.state == st.EditingCommit(git=main_context, details=commit_details, branch_name="feat-add-login")
        assert result.effects == (fx.OpenEditor(commit_message="feat: add login form"),)

    def test_edited_message_is_committed(self, main_context, commit_details):
        """Should commit with the edited message."""
        state = st.EditingCommit(git=main_context, details=commit_details, branch_name="feat-add-login")

        result = transition(state, ev.CommitEdited(commit_message="fix: better words"))

        assert result.state.commit_message == "fix: better words"
        assert result.effects[0].commit_message == "fix: better words"

    def test_commit_done_marks_branch_created(self, main_context, commit_details):
        """Should check for a PR on the new branch after committing."""
        state = st.Committing(
            git=main_context, details=commit_details, branch_name="feat-add-login", commit_message="m"
        )

        result = transition(state, ev.CommitDone())

        assert isinstance(result.state, st.PostCommitCheckingPr)
        assert result.state.git.on_main is False
        assert result.state.git.current_branch == "feat-add-login"
        assert result.effects == (fx.CheckExistingPr(branch="feat-add-login"),)

    def test_existing_pr_is_offered_to_post_commit(self, branch_context, commit_details):
        """Should pass the existing PR URL to the post-commit prompt."""
        state = st.PostCommitCheckingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.PrExists(pr_url="https://pr/3"))

        assert result.state.pr_url == "https://pr/3"
        assert result.effects == (fx.PromptPostCommit(pr_url="https://pr/3"),)

    def test_no_pr_post_commit(self, branch_context, commit_details):
        """Should prompt without a PR URL when none exists."""
        state = st.PostCommitCheckingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.NoPr())

        assert result.state.pr_url is None
        assert result.effects == (fx.PromptPostCommit(pr_url=None),)


class TestPostCommit:
    """Tests for the post-commit hub, push, PR and merge."""

    @pytest.fixture
    def post_commit(self, branch_context, commit_details) -> st.PostCommit:
        return st.PostCommit(git=branch_context, details=commit_details, branch_name="feat-login")

    @staticmethod
    def second_commit_then_pr(sample_files, commit_details) -> list:
        """Events for commit more, a second accepted commit, then push for a PR."""
        return [
            ev.PostCommitChosen(choice=PostCommitChoice.COMMIT_MORE),
            ev.FilesCollected(files=sample_files),
            ev.FilesPicked(selected_files=("src/db.py",)),
            ev.FilesStaged(short_stat="1 file changed, 3 insertions(+)"),
            ev.DiffReady(diff="diff --git a/src/db.py b/src/db.py"),
            ev.DetailsGenerated(details=commit_details),
            ev.CommitActionChosen(action=CommitAction.ACCEPT),
            ev.CommitDone(),
            ev.NoPr(),
            ev.PostCommitChosen(choice=PostCommitChoice.CREATE_PR),
            ev.PushDone(),
        ]

    def test_commit_more_stays_on_branch_created_from_trunk(self, main_context, commit_details, sample_files):
        """Should keep targeting the new branch on a second commit after leaving trunk."""
        first = [ev.CommitActionChosen(action=CommitAction.ACCEPT), ev.CommitDone(), ev.NoPr()]
        state = st.ConfirmingCommit(git=main_context, details=commit_details, branch_name="feat-x")

        results = drive(state, first + self.second_commit_then_pr(sample_files, commit_details))

        confirming = [r.state for r in results if isinstance(r.state, st.ConfirmingCommit)]
        effects = [effect for r in results for effect in r.effects]
        assert [c.branch_name for c in confirming] == ["feat-x"]
        assert confirming[0].git.current_branch == "feat-x"
        assert not any(isinstance(e, fx.PromptBranchName) for e in effects)
        assert [e.branch for e in effects if isinstance(e, fx.CheckExistingPr)] == ["feat-x"] * 3
        assert [e.branch for e in effects if isinstance(e, fx.PushBranch)] == ["feat-x"]
        assert isinstance(results[-1].state, st.CheckingPr)
        assert results[-1].state.branch_name == "feat-x"

    def test_commit_more_after_stack_stays_on_plan_branch(
        self, main_context, stack_plan, commit_details, sample_files
    ):
        """Should keep targeting the plan's branch on a commit after a stack from trunk."""
        first = [ev.StackCommitDone(next_index=2), ev.NoPr()]
        state = st.StackCommitting(git=main_context, plan=stack_plan, current_index=1)

        results = drive(state, first + self.second_commit_then_pr(sample_files, commit_details))

        confirming = [r.state for r in results if isinstance(r.state, st.ConfirmingCommit)]
        effects = [effect for r in results for effect in r.effects]
        assert [c.branch_name for c in confirming] == ["feat-db-api"]
        assert [e.branch for e in effects if isinstance(e, fx.CheckExistingPr)] == ["feat-db-api"] * 3
        assert [e.branch for e in effects if isinstance(e, fx.PushBranch)] == ["feat-db-api"]
        assert effects[-1] == fx.CheckExistingPr(branch="feat-db-api")

    def test_done_commits_locally(self, post_commit):
        """Should finish locally on done."""
        result = transition(post_commit, ev.PostCommitChosen(choice=PostCommitChoice.DONE))

        assert result.state == st.Done(message="Committed locally.")

    @pytest.mark.parametrize(
        ("choice", "post_push"),
        [(PostCommitChoice.CREATE_PR, PostPush.CHECK_PR), (PostCommitChoice.PUSH_ONLY, PostPush.DONE)],
    )
    def test_push_choices(self, post_commit, choice, post_push):
        """Should push and remember what follows the push."""
        result = transition(post_commit, ev.PostCommitChosen(choice=choice))

        assert isinstance(result.state, st.Pushing)
        assert result.state.post_push is post_push
        assert result.effects == (fx.PushBranch(branch="feat-login"),)

    def test_push_only_finishes(self, branch_context, commit_details):
        """Should finish after pushing when no PR was requested."""
        state = st.Pushing(
            git=branch_context, details=commit_details, branch_name="feat-login", post_push=PostPush.DONE
        )

        result = transition(state, ev.PushDone())

        assert result.state == st.Done(message="Pushed.")

    def test_push_then_check_pr(self, branch_context, commit_details):
        """Should check for a PR after pushing when one was requested."""
        state = st.Pushing(
            git=branch_context, details=commit_details, branch_name="feat-login", post_push=PostPush.CHECK_PR
        )

        result = transition(state, ev.PushDone())

        assert isinstance(result.state, st.CheckingPr)
        assert result.effects == (fx.CheckExistingPr(branch="feat-login"),)

    def test_declined_push_keeps_commit(self, branch_context, commit_details):
        """Should report the commit as kept locally when the push is declined."""
        state = st.Pushing(git=branch_context, details=commit_details, branch_name="main", post_push=PostPush.DONE)

        result = transition(state, ev.UserCancelled(reason="Push to main declined."))

        assert result.state == st.Cancelled(message="Push cancelled. Commit kept locally.")
        assert result.effects == (fx.UnstageAll(),)

    def test_existing_pr_was_updated_by_push(self, branch_context, commit_details):
        """Should announce that the push updated the PR."""
        state = st.CheckingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.PrExists(pr_url="https://pr/4"))

        assert result.state == st.ConfirmingMerge(git=branch_context, branch_name="feat-login", pr_url="https://pr/4")
        assert result.effects[0] == fx.AnnouncePr(pr_url="https://pr/4", status=PrAnnouncement.UPDATED)

    def test_no_pr_confirms_generated_pr(self, branch_context, commit_details):
        """Should confirm the PR built from the commit details."""
        state = st.CheckingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.NoPr())

        assert isinstance(result.state, st.ConfirmingPr)
        assert result.effects == (fx.PromptConfirmPr(pr_details=commit_details.pr_details()),)

    def test_declined_pr(self, branch_context, commit_details):
        """Should finish with a PR hint when declined."""
        state = st.ConfirmingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.ConfirmPr(accepted=False))

        assert result.state == st.Done(message="Done.")
        assert result.effects == (fx.ShowPrHint(branch_name="feat-login"),)

    def test_accepted_pr(self, branch_context, commit_details):
        """Should create the PR for the committed branch."""
        state = st.ConfirmingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.ConfirmPr(accepted=True))

        assert isinstance(result.state, st.CreatingPr)
        assert result.effects == (fx.CreatePr(branch="feat-login", pr_details=commit_details.pr_details()),)

    def test_created_pr(self, branch_context, commit_details):
        """Should announce the created PR."""
        state = st.CreatingPr(git=branch_context, details=commit_details, branch_name="feat-login")

        result = transition(state, ev.PrCreated(pr_url="https://pr/5"))

        assert result.effects[0] == fx.AnnouncePr(pr_url="https://pr/5", status=PrAnnouncement.CREATED)
        assert result.effects[1] == fx.PromptConfirmMerge(pr_url="https://pr/5")

    def test_declined_merge(self, branch_context):
        """Should leave the PR open."""
        state = st.ConfirmingMerge(git=branch_context, branch_name="feat-login", pr_url="https://pr/5")

        result = transition(state, ev.ConfirmMerge(accepted=False))

        assert result.state == st.Done(message="PR open: https://pr/5")
        assert result.effects == (fx.ShowMergeHint(pr_url="https://pr/5", branch_name="feat-login"),)

    def test_merge(self, branch_context):
        """Should merge and then report shipped."""
        state = st.ConfirmingMerge(git=branch_context, branch_name="feat-login", pr_url="https://pr/5")

        merging = transition(state, ev.ConfirmMerge(accepted=True))
        done = transition(merging.state, ev.MergeDone(pr_url="https://pr/5"))

        assert merging.effects == (fx.MergeAndCleanup(pr_url="https://pr/5", on_main=False),)
        assert done.state == st.Done(message="Shipped! https://pr/5")


class TestStack:
    """Tests for stacked commits."""

    def test_plan_starts_first_commit(self, main_context, sample_files, stack_plan):
        """Should commit the first group as the branch-creating commit."""
        state = st.PickingFiles(git=main_context, files=sample_files)

        result = transition(state, ev.StackPlanGenerated(plan=stack_plan))

        assert result.state == st.StackCommitting(git=main_context, plan=stack_plan, current_index=0)
        assert result.effects == (
            fx.ExecuteStackCommit(
                group=stack_plan.groups[0], branch_name="feat-db-api", is_first=True, on_main=True, index=0
            ),
        )

    def test_next_group_is_committed(self, main_context, stack_plan):
        """Should commit the following group on the already created branch."""
        state = st.StackCommitting(git=main_context, plan=stack_plan, current_index=0)

        result = transition(state, ev.StackCommitDone(next_index=1))

        assert result.state.current_index == 1
        assert result.effects == (
            fx.ExecuteStackCommit(
                group=stack_plan.groups[1], branch_name="feat-db-api", is_first=False, on_main=False, index=1
            ),
        )

    def test_last_group_moves_to_pr_check(self, main_context, stack_plan):
        """Should check for a PR on the plan's branch once every group is committed."""
        state = st.StackCommitting(git=main_context, plan=stack_plan, current_index=1)

        result = transition(state, ev.StackCommitDone(next_index=2))

        assert isinstance(result.state, st.PostCommitCheckingPr)
        assert result.state.branch_name == "feat-db-api"
        assert result.state.git.on_main is False
        assert result.state.git.current_branch == "feat-db-api"
        assert result.state.details.commit_message == "feat: add db layer\nfeat: expose api"
        assert result.effects == (fx.CheckExistingPr(branch="feat-db-api"),)

    def test_stack_on_branch_keeps_current_branch(self, branch_context, stack_plan):
        """Should stay on the current branch when stacking off trunk."""
        state = st.StackCommitting(git=branch_context, plan=stack_plan, current_index=1)

        result = transition(state, ev.StackCommitDone(next_index=2))

        assert result.state.branch_name == "feat-login"

    def test_out_of_order_group_is_an_error(self, main_context, stack_plan):
        """Should reject a completion that skips a group."""
        three = replace(
            stack_plan,
            groups=stack_plan.groups + (StackGroup(files=("docs.md",), commit_message="docs: explain"),),
        )
        state = st.StackCommitting(git=main_context, plan=three, current_index=0)

        result = transition(state, ev.StackCommitDone(next_index=2))

        assert result.state == st.Error(
            message='Unexpected event "stack_commit_done" in state "stack_committing"'
        )
        assert result.effects == ()

    def test_empty_plan_is_an_error(self, main_context, sample_files):
        """Should refuse a plan without groups."""
        plan = StackPlan(groups=(), branch_name="b", pr_title="t", pr_body="")

        result = transition(st.PickingFiles(git=main_context, files=sample_files), ev.StackPlanGenerated(plan=plan))

        assert isinstance(result.state, st.Error)

    def test_groups_are_committed_in_order(self, main_context, stack_plan):
        """Should emit exactly one commit per group, in plan order."""
        three = replace(
            stack_plan,
            groups=stack_plan.groups + (StackGroup(files=("docs.md",), commit_message="docs: explain"),),
        )
        result = transition(st.PickingFiles(git=main_context, files=()), ev.StackPlanGenerated(plan=three))
        committed = []
        while isinstance(result.state, st.StackCommitting):
            effect = result.effects[0]
            committed.append(effect.group.files)
            result = transition(result.state, ev.StackCommitDone(next_index=effect.index + 1))

        assert committed == [("src/db.py",), ("src/api.py",), ("docs.md",)]


class TestInvariants:
    """Properties that hold across the whole table."""

    @pytest.fixture
    def samples(self, branch_context, commit_details, pr_details, stack_plan) -> list:
        return non_terminal_samples(branch_context, commit_details, pr_details, stack_plan)

    def test_every_non_terminal_state_is_handled(self, samples):
        """Should have a handler for every non-terminal state."""
        assert {type(state) for state in samples} == set(handled_states())
        assert not any(st.is_terminal(state) for state in samples)

    @pytest.mark.parametrize(
        "terminal",
        [
            st.Done(message="Done."),
            st.Cancelled(message="Cancelled."),
            st.Error(message="boom"),
            st.NothingToShip(),
        ],
    )
    def test_terminal_states_reject_everything(self, terminal):
        """Should return an error for any event in a terminal state."""
        result = transition(terminal, ev.PushDone())

        assert isinstance(result.state, st.Error)
        assert result.effects == ()

    def test_merge_conflict_is_terminal(self, branch_context):
        """Should treat merge_conflict as a sink."""
        result = transition(st.MergeConflict(git=branch_context, message="x"), ev.PullDone())

        assert isinstance(result.state, st.Error)

    def test_invalid_event_message(self):
        """Should name both the event and the state."""
        result = transition(st.Preflight(), ev.PushDone())

        assert result.state == st.Error(message='Unexpected event "push_done" in state "preflight"')

    def test_unexpected_event_in_every_state_is_an_error(self, samples):
        """Should never raise on an unexpected event."""
        for state in samples:
            result = transition(state, ev.StackCommitDone(next_index=99))
            assert isinstance(result.state, st.Error), state.kind

    def test_pull_only_from_remote_check(self, samples):
        """Should only emit pull_remote from confirming_pull."""
        accepted = ev.ConfirmPull(accepted=True)
        for state in samples:
            result = transition(state, accepted)
            if "pull_remote" in effect_kinds(result):
                assert isinstance(state, st.ConfirmingPull)

    def test_cancellations_after_staging_unstage(self, main_context, commit_details):
        """Should include unstage_all for every cancellation after files were staged."""
        staged_states = [
            st.GeneratingDetails(git=main_context, diff="+x"),
            st.ConfirmingBranch(git=main_context, details=commit_details),
            st.ConfirmingCommit(git=main_context, details=commit_details, branch_name="b"),
            st.EditingCommit(git=main_context, details=commit_details, branch_name="b"),
        ]
        for state in staged_states:
            result = transition(state, ev.UserCancelled())

            assert isinstance(result.state, st.Cancelled), state.kind
            assert fx.UnstageAll() in result.effects, state.kind

    def test_transition_is_deterministic(self, main_context):
        """Should return equal results for equal inputs."""
        event = ev.ToolsOk(git=main_context)

        assert transition(st.Preflight(), event) == transition(st.Preflight(), event)
