"""OS keyring backend.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker
"""

import logging
from typing import cast

import keyring
from keyring.backends.fail import Keyring as FailKeyring
from keyring.errors import KeyringError

from git_ship.exceptions import BackendNotAvailableError, CredentialError

logger = logging.getLogger(__name__)

NAMESPACE = "ship"


class KeyringBackend:
    """API keys stored in the system keyring.

    Entries live under the keyring service ``ship/<service>``, so the Groq
    key is stored as service ``ship/groq``, username ``api_key``.

    Example:
        >>> backend = KeyringBackend()
        >>> backend.set("groq", "api_key", "gsk_abc123")
        >>> backend.get("groq", "api_key")
        'gsk_abc123'
    """

    @property
    def name(self) -> str:
        return "keyring"

    @property
    def available(self) -> bool:
        """Check if a working keyring is configured.

        Headless machines often only have keyring's fail backend, which
        raises on every call; that counts as unavailable.
        """
        try:
            return not isinstance(keyring.get_keyring(), FailKeyring)
        except KeyringError as e:
            logger.debug(f"Keyring not available: {e}")
            return False

    def get(self, service: str, key: str | None = None) -> str | None:
        """Retrieve a credential from the OS keyring.

        Args:
            service: Service identifier (e.g., 'groq')
            key: Key within service (e.g., 'api_key')

        Returns:
            Credential value or None if not found

        Raises:
            BackendNotAvailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        self._require_available()
        key = key or "api_key"
        try:
            credential = cast(str | None, keyring.get_password(f"{NAMESPACE}/{service}", key))
        except KeyringError as e:
            raise CredentialError(f"Keyring operation failed: {e}", reference=f"@keyring:{service}/{key}") from e

        if credential is not None:
            logger.debug(f"Retrieved credential from keyring: {service}/{key}")
        return credential

    def set(self, service: str, key: str, value: str) -> None:
        """Store a credential in the OS keyring.

        Raises:
            BackendNotAvailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        self._require_available()
        if not value:
            raise ValueError("Credential value cannot be empty")

        try:
            keyring.set_password(f"{NAMESPACE}/{service}", key, value)
        except KeyringError as e:
            raise CredentialError(f"Failed to store credential: {e}", reference=f"@keyring:{service}/{key}") from e
        logger.info(f"Stored credential in keyring: {service}/{key}")

    def _require_available(self) -> None:
        if not self.available:
            raise BackendNotAvailableError(
                "Keyring backend is not available",
                suggestion="Export the key as an environment variable instead",
            )
