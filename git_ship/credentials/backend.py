"""Protocol for credential storage backends."""

from typing import Protocol


class CredentialBackend(Protocol):
    """Interface shared by the keyring and environment backends.

    The environment backend addresses a credential by variable name alone;
    it receives the variable name as ``service`` and ignores ``key``.
    """

    @property
    def name(self) -> str:
        """Backend identifier (e.g., 'keyring', 'environment')."""
        ...

    @property
    def available(self) -> bool:
        """Check if this backend is usable on the current system."""
        ...

    def get(self, service: str, key: str | None = None) -> str | None:
        """Retrieve a credential.

        Args:
            service: Service identifier (e.g., 'groq') or variable name
            key: Key within the service (e.g., 'api_key')

        Returns:
            Credential value or None if not found

        Raises:
            BackendNotAvailableError: If backend is not available
        """
        ...

    def set(self, service: str, key: str, value: str) -> None:
        """Store a credential.

        Raises:
            BackendNotAvailableError: If backend is not available
        """
        ...
