"""Custom exception hierarchy for git-ship.

This module defines the exceptions raised by the impure edges of the tool:
configuration loading, credential lookup, external command invocation and
interactive prompts. The workflow transition function never raises; it
models every failure as a terminal state instead. The run loop converts any
``ShipError`` raised while performing an effect into the ``error`` state.

Exception Hierarchy:
    ShipError (base)
    ├── ConfigurationError
    ├── CredentialError
    │   ├── CredentialNotFoundError
    │   └── BackendNotAvailableError
    ├── GitOperationError
    │   ├── CommandFailedError
    │   ├── CommandNotFoundError
    │   └── NotGitRepositoryError
    ├── GenerationError
    ├── PromptCancelledError
    └── WorkflowError

Example Usage:
    >>> from git_ship.exceptions import ConfigurationError
    >>> try:
    ...     settings = ShipSettings.from_yaml(path)
    ... except yaml.YAMLError as e:
    ...     raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e
"""

from collections.abc import Sequence


class ShipError(Exception):
    """Base exception for all git-ship errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(ShipError):
    """Configuration-related errors.

    Examples:
        - Invalid YAML syntax in the config file
        - Unknown provider type or merge strategy
        - Autonomous mode requested without a usable generation provider
    """

    pass


class CredentialError(ShipError):
    """Credential-related errors.

    Attributes:
        message: Human-readable error description
        reference: The credential reference that failed (e.g., "@keyring:groq/api_key")
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: The credential reference that failed
            suggestion: Optional suggestion for resolution
        """
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (reference: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class CredentialNotFoundError(CredentialError):
    """Credential reference points at a value that does not exist."""

    pass


class BackendNotAvailableError(CredentialError):
    """Requested credential backend is not available on this system."""

    pass


class GitOperationError(ShipError):
    """Errors raised while driving ``git`` or ``gh``."""

    pass


class CommandFailedError(GitOperationError):
    """An external command exited with a non-zero status.

    Raised only by adapter operations that are not designed to interpret
    failure. The run loop surfaces it as the ``error`` terminal state.

    Attributes:
        command: Argument vector that was executed
        returncode: Process exit status
        stderr: Captured standard error (empty when output was streamed)
    """

    def __init__(self, command: Sequence[str], returncode: int, stderr: str = "") -> None:
        """Initialize exception.

        Args:
            command: Argument vector that was executed
            returncode: Process exit status
            stderr: Captured standard error, if any
        """
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr

        message = f"Command failed: {' '.join(self.command)}"
        detail = stderr.strip()
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class CommandNotFoundError(GitOperationError):
    """The executable of an external command is not installed."""

    def __init__(self, executable: str) -> None:
        self.executable = executable
        super().__init__(f"Command not found: {executable}")


class NotGitRepositoryError(GitOperationError):
    """The working directory is not inside a git repository."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class GenerationError(ShipError):
    """A text-generation provider could not produce a usable result.

    Providers never let this escape their public methods; it is raised and
    caught inside the provider boundary so the failure can be logged with
    context before ``None`` is returned.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        full_message = f"{message} (provider: {provider})" if provider else message
        super().__init__(full_message)
        self.message = message


class PromptCancelledError(ShipError):
    """The user aborted an interactive prompt (Ctrl-C or end of input)."""

    def __init__(self, message: str = "Cancelled.") -> None:
        super().__init__(message)


class WorkflowError(ShipError):
    """The run loop detected a broken cause-and-effect sequence.

    Examples:
        - An effect list produced more than one event
        - An effect list produced no event for a non-terminal state
    """

    pass
