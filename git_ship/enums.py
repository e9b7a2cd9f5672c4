"""Enumerations for git-ship goals, providers and workflow choices."""

from enum import Enum


class Goal(str, Enum):
    """Autonomous run goals selected on the command line.

    - local: commit only, never touch the remote
    - push: commit and push the branch
    - pr: commit, push and open (or update) a pull request
    """

    LOCAL = "local"
    PUSH = "push"
    PR = "pr"

    def __str__(self) -> str:
        return self.value


class ProviderType(str, Enum):
    """Text-generation providers supported by git-ship.

    - auto: first provider with a resolvable API key (Groq, Anthropic, OpenAI),
      falling back to manual input in interactive mode
    - groq: Groq's OpenAI-compatible endpoint
    - openai: OpenAI chat completions
    - openai-compatible: any OpenAI-compatible server (vLLM, LM Studio, ...)
    - anthropic: Anthropic messages API
    - ollama: local Ollama server
    - manual: the user types every field
    """

    AUTO = "auto"
    GROQ = "groq"
    OPENAI = "openai"
    OPENAI_COMPATIBLE = "openai-compatible"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"
    MANUAL = "manual"

    def __str__(self) -> str:
        return self.value

    @property
    def needs_api_key(self) -> bool:
        """Check if this provider authenticates with an API key."""
        return self in (ProviderType.GROQ, ProviderType.OPENAI, ProviderType.ANTHROPIC)

    @property
    def api_key_env_var(self) -> str | None:
        """Environment variable conventionally holding this provider's key."""
        return {
            ProviderType.GROQ: "GROQ_API_KEY",
            ProviderType.OPENAI: "OPENAI_API_KEY",
            ProviderType.ANTHROPIC: "ANTHROPIC_API_KEY",
        }.get(self)


class MergeStrategy(str, Enum):
    """How ``gh pr merge`` lands a pull request."""

    MERGE = "merge"
    SQUASH = "squash"
    REBASE = "rebase"

    def __str__(self) -> str:
        return self.value


class FileStatus(str, Enum):
    """Working-tree status of a changed file."""

    STAGED = "staged"
    MODIFIED = "modified"
    NEW = "new"


class CommitAction(str, Enum):
    """Answer to "use this commit message?"."""

    ACCEPT = "accept"
    EDIT = "edit"
    CANCEL = "cancel"


class PostCommitChoice(str, Enum):
    """Choices offered once a commit exists."""

    CREATE_PR = "create_pr"
    PUSH_ONLY = "push_only"
    COMMIT_MORE = "commit_more"
    DONE = "done"


class PostPush(str, Enum):
    """What the ``pushing`` state does once the push completes."""

    CHECK_PR = "check_pr"
    DONE = "done"


class PrAnnouncement(str, Enum):
    """How a pull request URL is announced to the user."""

    FOUND = "found"
    CREATED = "created"
    UPDATED = "updated"
