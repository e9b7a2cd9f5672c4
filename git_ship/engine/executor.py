"""
Effect executor: the only component of the workflow with side effects.

``EffectExecutor.execute`` performs one effect and returns the event it
produced, or ``None`` for pure presentation effects. In autonomous mode
every question is answered from the run goal instead of prompting.

Dispatch is a table from effect class to handler method, so adding an
effect without a handler fails loudly with ``WorkflowError``.

Prompt cancellation policy:
    - ``prompt_confirm_pull``: treated as "don't pull"
    - ``prompt_post_commit``: treated as "done"
    - anything else: ``user_cancelled``
"""

import shutil
from collections.abc import Awaitable, Callable
from typing import Any

import click
import structlog

from git_ship.engine import effects as fx
from git_ship.engine import events as ev
from git_ship.engine.models import FileEntry, RunMode
from git_ship.enums import CommitAction, FileStatus, Goal, MergeStrategy, PostCommitChoice, PrAnnouncement
from git_ship.exceptions import CommandFailedError, PromptCancelledError, WorkflowError
from git_ship.git.commands import CommandRunner
from git_ship.git.inspector import GitInspector
from git_ship.providers.base import GenerationProvider
from git_ship.providers.manual import ManualProvider
from git_ship.utils.console import Console
from git_ship.utils.helpers import first_line, normalize_branch_name, normalize_text, split_lines
from git_ship.utils.interactive import Prompter

log = structlog.get_logger(__name__)

REQUIRED_TOOLS = ("git", "gh")
PROTECTED_BRANCHES = ("main", "master")
CONFLICT_MARKERS = ("CONFLICT", "merge conflict")

_AUTO_POST_COMMIT = {
    Goal.LOCAL: PostCommitChoice.DONE,
    Goal.PUSH: PostCommitChoice.PUSH_ONLY,
    Goal.PR: PostCommitChoice.CREATE_PR,
}

_STATUS_COLORS = {
    FileStatus.STAGED: "green",
    FileStatus.MODIFIED: "yellow",
    FileStatus.NEW: "bright_black",
}


class EffectExecutor:
    """Performs workflow effects against git, gh, the provider and the user.

    Attributes:
        commands: Adapter for external commands
        inspector: Read-only repository queries
        provider: Text-generation provider for this run
        mode: Interactive or autonomous run mode
        prompter: Interactive prompt surface
        console: Terminal output
        trunk: Trunk branch name
        merge_strategy: Strategy passed to ``gh pr merge``
    """

    def __init__(
        self,
        commands: CommandRunner,
        inspector: GitInspector,
        provider: GenerationProvider,
        mode: RunMode,
        prompter: Prompter,
        console: Console,
        trunk: str = "main",
        merge_strategy: MergeStrategy = MergeStrategy.SQUASH,
    ) -> None:
        self.commands = commands
        self.inspector = inspector
        self.provider = provider
        self.mode = mode
        self.prompter = prompter
        self.console = console
        self.trunk = trunk
        self.merge_strategy = merge_strategy
        self._manual = provider if isinstance(provider, ManualProvider) else ManualProvider(prompter)

        self._handlers: dict[type, Callable[[Any], Awaitable[ev.Event | None]]] = {
            fx.CheckTools: self._check_tools,
            fx.LogInfo: self._log_info,
            fx.ShowCommitLog: self._show_commit_log,
            fx.PushBranch: self._push_branch,
            fx.CheckExistingPr: self._check_existing_pr,
            fx.GetDiffMain: self._get_diff_main,
            fx.GeneratePrDetails: self._generate_pr_details,
            fx.PromptConfirmPr: self._prompt_confirm_pr,
            fx.CreatePr: self._create_pr,
            fx.AnnouncePr: self._announce_pr,
            fx.PromptConfirmMerge: self._prompt_confirm_merge,
            fx.MergeAndCleanup: self._merge_and_cleanup,
            fx.CollectFiles: self._collect_files,
            fx.PromptFilePicker: self._prompt_file_picker,
            fx.StageFiles: self._stage_files,
            fx.GetStagedDiff: self._get_staged_diff,
            fx.GenerateCommitDetails: self._generate_commit_details,
            fx.PromptBranchName: self._prompt_branch_name,
            fx.ShowCommitMessage: self._show_commit_message,
            fx.PromptCommitAction: self._prompt_commit_action,
            fx.OpenEditor: self._open_editor,
            fx.CommitOnly: self._commit_only,
            fx.ShowMergeHint: self._show_merge_hint,
            fx.ShowPrHint: self._show_pr_hint,
            fx.UnstageAll: self._unstage_all,
            fx.CheckRemoteStatus: self._check_remote_status,
            fx.PromptConfirmPull: self._prompt_confirm_pull,
            fx.PullRemote: self._pull_remote,
            fx.PromptPostCommit: self._prompt_post_commit,
            fx.ExecuteStackCommit: self._execute_stack_commit,
        }

    def handled_effects(self) -> frozenset[type]:
        """Effect classes this executor can perform."""
        return frozenset(self._handlers)

    async def execute(self, effect: fx.Effect) -> ev.Event | None:
        """Perform one effect.

        Args:
            effect: Effect emitted by the transition function

        Returns:
            The resulting event, or None for presentation-only effects

        Raises:
            WorkflowError: If no handler exists for the effect
            GitOperationError: If a command that must succeed fails
        """
        handler = self._handlers.get(type(effect))
        if handler is None:
            raise WorkflowError(f"Unhandled effect: {effect.kind}")

        log.debug("effect_executing", effect=effect.kind)
        try:
            return await handler(effect)
        except PromptCancelledError:
            log.debug("prompt_cancelled", effect=effect.kind)
            if isinstance(effect, fx.PromptConfirmPull):
                return ev.ConfirmPull(accepted=False)
            if isinstance(effect, fx.PromptPostCommit):
                return ev.PostCommitChosen(choice=PostCommitChoice.DONE)
            return ev.UserCancelled()

    # -------------------------------------------------------------------------
    # Preflight and remote
    # -------------------------------------------------------------------------

    async def _check_tools(self, effect: fx.CheckTools) -> ev.Event:
        for tool in REQUIRED_TOOLS:
            if shutil.which(tool) is None:
                log.warning("tool_missing", tool=tool)
                self.console.error(f"{tool} CLI is not installed.")
                return ev.UserCancelled(reason=f"{tool} CLI is not installed.")
        return ev.ToolsOk(git=await self.inspector.capture_context())

    async def _check_remote_status(self, effect: fx.CheckRemoteStatus) -> ev.Event:
        return ev.RemoteStatus(behind=await self.inspector.behind_count(effect.branch))

    async def _prompt_confirm_pull(self, effect: fx.PromptConfirmPull) -> ev.Event:
        if self.mode.is_auto:
            return ev.ConfirmPull(accepted=True)
        self.console.warn(f"Branch is {effect.behind} commit(s) behind remote.")
        return ev.ConfirmPull(accepted=self.prompter.confirm("Pull latest changes?", default=True))

    async def _pull_remote(self, effect: fx.PullRemote) -> ev.Event:
        args = ("git", "pull", "origin", effect.branch)
        result = await self.commands.capture(*args)
        if result.ok:
            log.info("pull_done", branch=effect.branch)
            return ev.PullDone()

        output = "\n".join(part for part in (result.stdout.strip(), result.stderr.strip()) if part)
        if any(marker in output for marker in CONFLICT_MARKERS):
            log.warning("pull_conflict", branch=effect.branch)
            return ev.PullConflict(message=output)
        raise CommandFailedError(list(args), result.returncode, result.stderr)

    async def _push_branch(self, effect: fx.PushBranch) -> ev.Event:
        if effect.branch == self.trunk or effect.branch in PROTECTED_BRANCHES:
            if not self.mode.is_auto:
                self.console.warn(f"You're about to push directly to {effect.branch}.")
                if not self.prompter.confirm(f"Push to {effect.branch}?", default=False):
                    return ev.UserCancelled(reason=f"Push to {effect.branch} declined.")
            else:
                log.warning("pushing_to_trunk", branch=effect.branch)
        await self.commands.stream("git", "push", "-u", "origin", effect.branch)
        log.info("branch_pushed", branch=effect.branch)
        return ev.PushDone()

    # -------------------------------------------------------------------------
    # Pull requests
    # -------------------------------------------------------------------------

    async def _check_existing_pr(self, effect: fx.CheckExistingPr) -> ev.Event:
        pr_url = await self.inspector.find_pr_url(effect.branch)
        return ev.PrExists(pr_url=pr_url) if pr_url else ev.NoPr()

    async def _get_diff_main(self, effect: fx.GetDiffMain) -> ev.Event:
        return ev.DiffReady(diff=await self.inspector.trunk_diff())

    async def _generate_pr_details(self, effect: fx.GeneratePrDetails) -> ev.Event:
        if self.provider is not self._manual:
            self.console.info("Generating PR details...")
        result = await self.provider.generate_pr_details(effect.diff)
        if result is not None:
            return ev.PrDetailsGenerated(pr_details=result)
        if self.mode.is_auto or self.provider is self._manual:
            return ev.PrDetailsFailed()

        self.console.warn("Generation failed. Falling back to manual input.")
        manual = await self._manual.generate_pr_details(effect.diff)
        return ev.PrDetailsGenerated(pr_details=manual) if manual else ev.PrDetailsFailed()

    async def _prompt_confirm_pr(self, effect: fx.PromptConfirmPr) -> ev.Event:
        if self.mode.is_auto:
            return ev.ConfirmPr(accepted=True)
        details = effect.pr_details
        self.console.note(f"{click.style(details.pr_title, bold=True)}\n\n{details.pr_body}", "Pull Request")
        return ev.ConfirmPr(accepted=self.prompter.confirm("Create PR with this?", default=True))

    async def _create_pr(self, effect: fx.CreatePr) -> ev.Event:
        output = await self.commands.require(
            "gh",
            "pr",
            "create",
            "--title",
            effect.pr_details.pr_title,
            "--body",
            effect.pr_details.pr_body,
            "--base",
            self.trunk,
            "--head",
            effect.branch,
        )
        # gh prints progress before the URL; the URL is the last line.
        lines = split_lines(output)
        pr_url = lines[-1].strip() if lines else ""
        log.info("pr_created", branch=effect.branch, pr_url=pr_url)
        return ev.PrCreated(pr_url=pr_url)

    async def _announce_pr(self, effect: fx.AnnouncePr) -> None:
        url = click.style(effect.pr_url, underline=True)
        if effect.status is PrAnnouncement.FOUND:
            self.console.success(f"PR found: {url}")
        elif effect.status is PrAnnouncement.CREATED:
            self.console.success(f"PR created: {url}")
        else:
            self.console.success(f"PR already exists: {url}")
            self.console.info("Push updated the PR automatically.")
        return None

    async def _prompt_confirm_merge(self, effect: fx.PromptConfirmMerge) -> ev.Event:
        if self.mode.is_auto:
            # No goal authorizes a merge.
            return ev.ConfirmMerge(accepted=False)
        return ev.ConfirmMerge(accepted=self.prompter.confirm("Merge this PR now?", default=True))

    async def _merge_and_cleanup(self, effect: fx.MergeAndCleanup) -> ev.Event:
        await self.commands.stream(
            "gh", "pr", "merge", effect.pr_url, f"--{self.merge_strategy.value}", "--delete-branch"
        )
        if effect.on_main:
            await self.commands.stream("git", "checkout", self.trunk)
        await self.commands.stream("git", "pull", "origin", self.trunk)
        log.info("pr_merged", pr_url=effect.pr_url, strategy=self.merge_strategy.value)
        return ev.MergeDone(pr_url=effect.pr_url)

    async def _show_merge_hint(self, effect: fx.ShowMergeHint) -> None:
        self.console.info(f"To check out the branch: git checkout {effect.branch_name}")
        self.console.info(f"To merge later:          gh pr merge {effect.pr_url} --{self.merge_strategy.value}")
        return None

    async def _show_pr_hint(self, effect: fx.ShowPrHint) -> None:
        self.console.info(f"Create the PR manually: gh pr create --head {effect.branch_name}")
        return None

    # -------------------------------------------------------------------------
    # Fast path log
    # -------------------------------------------------------------------------

    async def _log_info(self, effect: fx.LogInfo) -> None:
        if effect.message:
            self.console.info(effect.message)
        return None

    async def _show_commit_log(self, effect: fx.ShowCommitLog) -> ev.Event:
        git = effect.git
        if git.unpushed_count > 0:
            self.console.info(f"{git.unpushed_count} unpushed commit(s) on {git.current_branch}")
        else:
            self.console.info(f"{git.unmerged_count} commit(s) on {git.current_branch} not yet merged to {self.trunk}")
        commit_log = await self.inspector.commit_log()
        self.console.note(commit_log, "Commits to ship")
        return ev.CommitLogReady(commit_log=commit_log)

    # -------------------------------------------------------------------------
    # Files, staging and generation
    # -------------------------------------------------------------------------

    async def _collect_files(self, effect: fx.CollectFiles) -> ev.Event:
        return ev.FilesCollected(files=await self.inspector.collect_files(effect.git))

    async def _prompt_file_picker(self, effect: fx.PromptFilePicker) -> ev.Event:
        paths = tuple(entry.path for entry in effect.files)
        if self.mode.is_auto:
            if self.mode.is_stack:
                return await self._plan_stack(effect.files)
            return ev.FilesPicked(selected_files=paths)

        pick_mode = self.prompter.select(
            "Select files to include",
            [("all", f"All files ({len(paths)})"), ("pick", "Pick individually")],
            default="all",
        )
        if pick_mode == "all":
            return ev.FilesPicked(selected_files=paths)

        options = [
            (entry.path, f"{click.style(entry.status.value.ljust(8), fg=_STATUS_COLORS[entry.status])}  {entry.path}")
            for entry in effect.files
        ]
        initial = [entry.path for entry in effect.files if entry.status is FileStatus.STAGED]
        selected = self.prompter.multiselect("Select files to include", options, initial=initial)
        return ev.FilesPicked(selected_files=tuple(selected))

    async def _plan_stack(self, files: tuple[FileEntry, ...]) -> ev.Event:
        """Stage everything, ask for a stack plan, then unstage again."""
        paths = [entry.path for entry in files]
        await self._stage(paths)
        diff = await self.inspector.staged_diff()

        self.console.info("Generating stack plan...")
        plan = await self.provider.generate_stack_plan(files, diff)
        await self._unstage()

        if plan is None or not plan.covers(paths):
            log.warning("stack_plan_rejected", generated=plan is not None, files=len(paths))
            self.console.error("Stack plan generation failed.")
            return ev.UserCancelled(reason="Stack plan generation failed.")

        self.console.success(f"Stack plan: {len(plan.groups)} commit(s) on {plan.branch_name}")
        return ev.StackPlanGenerated(plan=plan)

    async def _stage_files(self, effect: fx.StageFiles) -> ev.Event:
        await self._stage(effect.selected_files)
        return ev.FilesStaged(short_stat=await self.inspector.staged_short_stat())

    async def _get_staged_diff(self, effect: fx.GetStagedDiff) -> ev.Event:
        return ev.DiffReady(diff=await self.inspector.staged_diff())

    async def _generate_commit_details(self, effect: fx.GenerateCommitDetails) -> ev.Event:
        if self.provider is not self._manual:
            self.console.info("Generating commit details...")
        result = await self.provider.generate_commit_details(effect.diff)
        if result is not None:
            return ev.DetailsGenerated(details=result)
        if self.mode.is_auto or self.provider is self._manual:
            return ev.DetailsFailed()

        self.console.warn("Generation failed. Falling back to manual input.")
        manual = await self._manual.generate_commit_details(effect.diff)
        return ev.DetailsGenerated(details=manual) if manual else ev.DetailsFailed()

    async def _unstage_all(self, effect: fx.UnstageAll) -> None:
        await self._unstage()
        return None

    async def _stage(self, paths: tuple[str, ...] | list[str]) -> None:
        await self._unstage()
        for path in paths:
            await self.commands.stream("git", "add", "--", path)

    async def _unstage(self) -> None:
        await self.commands.succeeds("git", "reset", "HEAD", "--quiet")

    # -------------------------------------------------------------------------
    # Branch and commit
    # -------------------------------------------------------------------------

    async def _prompt_branch_name(self, effect: fx.PromptBranchName) -> ev.Event:
        if self.mode.is_auto:
            return ev.BranchConfirmed(branch_name=effect.suggestion)
        answer = self.prompter.text("Branch name", default=effect.suggestion)
        branch_name = normalize_branch_name(answer) or effect.suggestion
        return ev.BranchConfirmed(branch_name=branch_name)

    async def _show_commit_message(self, effect: fx.ShowCommitMessage) -> None:
        self.console.note(effect.commit_message, "Commit message")
        return None

    async def _prompt_commit_action(self, effect: fx.PromptCommitAction) -> ev.Event:
        if self.mode.is_auto:
            return ev.CommitActionChosen(action=CommitAction.ACCEPT)
        action = self.prompter.select(
            "Use this commit message?",
            [
                (CommitAction.ACCEPT, "Yes, use it"),
                (CommitAction.EDIT, "Edit in $EDITOR"),
                (CommitAction.CANCEL, "Cancel"),
            ],
            default=CommitAction.ACCEPT,
        )
        return ev.CommitActionChosen(action=action)

    async def _open_editor(self, effect: fx.OpenEditor) -> ev.Event:
        edited = self.prompter.edit(effect.commit_message)
        if edited is None:
            # Editor closed without saving.
            return ev.CommitEdited(commit_message=effect.commit_message)
        message = normalize_text(edited)
        if not message:
            return ev.UserCancelled(reason="Empty commit message.")
        return ev.CommitEdited(commit_message=message)

    async def _commit_only(self, effect: fx.CommitOnly) -> ev.Event:
        if effect.on_main:
            await self.commands.stream("git", "checkout", "-b", effect.branch_name)
        await self.commands.stream("git", "commit", "-m", effect.commit_message)
        log.info("committed", branch=effect.branch_name, subject=first_line(effect.commit_message))
        return ev.CommitDone()

    async def _execute_stack_commit(self, effect: fx.ExecuteStackCommit) -> ev.Event:
        await self._stage(effect.group.files)
        if effect.is_first and effect.on_main:
            await self.commands.stream("git", "checkout", "-b", effect.branch_name)
        await self.commands.stream("git", "commit", "-m", effect.group.commit_message)
        self.console.success(f"Commit {effect.index + 1}: {first_line(effect.group.commit_message)}")
        return ev.StackCommitDone(next_index=effect.index + 1)

    # -------------------------------------------------------------------------
    # Post-commit hub
    # -------------------------------------------------------------------------

    async def _prompt_post_commit(self, effect: fx.PromptPostCommit) -> ev.Event:
        if self.mode.goal is not None:
            return ev.PostCommitChosen(choice=_AUTO_POST_COMMIT[self.mode.goal])
        choice = self.prompter.select(
            "What next?",
            [
                (PostCommitChoice.CREATE_PR, "Push & update PR" if effect.pr_url else "Create PR"),
                (PostCommitChoice.PUSH_ONLY, "Push"),
                (PostCommitChoice.COMMIT_MORE, "Add more changes"),
                (PostCommitChoice.DONE, "Done (local only)"),
            ],
            default=PostCommitChoice.CREATE_PR,
        )
        return ev.PostCommitChosen(choice=choice)
