"""Manual provider: the user types every field."""

from collections.abc import Sequence

import structlog

from git_ship.engine.models import CommitDetails, FileEntry, PrDetails, StackPlan
from git_ship.exceptions import PromptCancelledError
from git_ship.providers.base import GenerationProvider
from git_ship.utils.helpers import normalize_branch_name, normalize_text
from git_ship.utils.interactive import Prompter

log = structlog.get_logger(__name__)


class ManualProvider(GenerationProvider):
    """Collects commit and PR text from the user.

    Used when no API key is available in interactive mode, and as the
    fallback after a failed generation. Cancelling any prompt yields None.
    Stack plans are not supported.
    """

    name = "manual"

    def __init__(self, prompter: Prompter):
        self.prompter = prompter

    async def generate_commit_details(self, diff: str) -> CommitDetails | None:
        try:
            branch_name = self.prompter.text("Branch name")
            commit_message = self.prompter.text("Commit message")
            pr_title = self.prompter.text("PR title", default=commit_message.split("\n", 1)[0])
            pr_body = self.prompter.text("PR body", default="")
        except PromptCancelledError:
            log.debug("manual_input_cancelled", field="commit_details")
            return None

        return CommitDetails(
            branch_name=normalize_branch_name(branch_name),
            commit_message=normalize_text(commit_message),
            pr_title=normalize_text(pr_title),
            pr_body=normalize_text(pr_body),
        )

    async def generate_pr_details(self, diff: str) -> PrDetails | None:
        try:
            pr_title = self.prompter.text("PR title")
            pr_body = self.prompter.text("PR body", default="")
        except PromptCancelledError:
            log.debug("manual_input_cancelled", field="pr_details")
            return None

        return PrDetails(pr_title=normalize_text(pr_title), pr_body=normalize_text(pr_body))

    async def generate_stack_plan(self, files: Sequence[FileEntry], diff: str) -> StackPlan | None:
        return None
