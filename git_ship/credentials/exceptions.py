"""Credential-related exceptions.

Re-exports credential exceptions from git_ship.exceptions so the
credentials package can be used on its own.
"""

from git_ship.exceptions import (
    BackendNotAvailableError,
    CredentialError,
    CredentialNotFoundError,
)

__all__ = [
    "CredentialError",
    "CredentialNotFoundError",
    "BackendNotAvailableError",
]
