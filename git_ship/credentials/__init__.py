"""API key storage and lookup.

Example:
    >>> from git_ship.credentials import CredentialResolver
    >>> CredentialResolver().resolve("${GROQ_API_KEY}")
"""

from .environment_backend import EnvironmentBackend
from .exceptions import BackendNotAvailableError, CredentialError, CredentialNotFoundError
from .keyring_backend import KeyringBackend
from .resolver import CredentialResolver

__all__ = [
    "CredentialResolver",
    "EnvironmentBackend",
    "KeyringBackend",
    "CredentialError",
    "CredentialNotFoundError",
    "BackendNotAvailableError",
]
