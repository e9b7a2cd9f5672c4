"""Environment variable credential backend."""

import logging
import os

logger = logging.getLogger(__name__)


class EnvironmentBackend:
    """Reads API keys exported in the shell, e.g. ``GROQ_API_KEY``.

    Example:
        >>> os.environ["GROQ_API_KEY"] = "gsk_abc123"
        >>> EnvironmentBackend().get("GROQ_API_KEY")
        'gsk_abc123'
    """

    @property
    def name(self) -> str:
        return "environment"

    @property
    def available(self) -> bool:
        """Environment backend is always available."""
        return True

    def get(self, service: str, key: str | None = None) -> str | None:
        """Retrieve a credential from an environment variable.

        Args:
            service: Environment variable name
            key: Unused; environment variables have no sub-keys

        Returns:
            The variable's value, or None if it is unset or empty
        """
        value = os.getenv(service)
        if not value:
            return None
        logger.debug(f"Retrieved credential from environment: {service}")
        return value

    def set(self, service: str, key: str, value: str) -> None:
        """Export a variable for this process and its children only."""
        if not value:
            raise ValueError("Credential value cannot be empty")
        os.environ[service] = value
        logger.debug(f"Set environment variable: {service}")
