"""Credential reference resolution.

Config values for API keys may be written three ways:

1. ``@keyring:service/key`` - OS keyring
2. ``${VAR_NAME}`` - environment variable
3. anything else - the key itself (not recommended)
"""

import logging
import re
from collections.abc import Sequence

from .backend import CredentialBackend
from .environment_backend import EnvironmentBackend
from .exceptions import BackendNotAvailableError, CredentialError, CredentialNotFoundError
from .keyring_backend import KeyringBackend

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Resolve credential references to actual values.

    Example:
        >>> resolver = CredentialResolver()
        >>> resolver.resolve("@keyring:groq/api_key")
        'gsk_...'
        >>> resolver.resolve("${ANTHROPIC_API_KEY}")
        'sk-ant-...'
        >>> resolver.resolve("literal-value")
        'literal-value'
    """

    KEYRING_PATTERN = re.compile(r"^@keyring:([^/]+)/(.+)$")
    ENV_PATTERN = re.compile(r"^\$\{([A-Z_][A-Z0-9_]*)\}$")

    def __init__(self, backends: Sequence[CredentialBackend] | None = None) -> None:
        """Initialize credential resolver.

        Args:
            backends: Backends to resolve against, matched by ``name``.
                Defaults to the environment and keyring backends.
        """
        self.backends: tuple[CredentialBackend, ...] = (
            tuple(backends) if backends else (EnvironmentBackend(), KeyringBackend())
        )

    def resolve(self, value: str) -> str:
        """Resolve a credential reference.

        Args:
            value: Credential reference or direct value

        Returns:
            Resolved credential value

        Raises:
            CredentialNotFoundError: If the referenced credential doesn't exist
            BackendNotAvailableError: If the required backend is unavailable
        """
        keyring_match = self.KEYRING_PATTERN.match(value)
        if keyring_match:
            service, key = keyring_match.group(1), keyring_match.group(2)
            credential = self._backend("keyring", value).get(service, key)
            if credential is None:
                raise CredentialNotFoundError(
                    f"Credential not found in keyring: {service}/{key}",
                    reference=value,
                    suggestion="Store the key with: ship setup",
                )
            logger.debug(f"Resolved keyring credential: {service}/{key}")
            return credential

        env_match = self.ENV_PATTERN.match(value)
        if env_match:
            var_name = env_match.group(1)
            credential = self._backend("environment", value).get(var_name)
            if credential is None:
                raise CredentialNotFoundError(
                    f"Environment variable not set: {var_name}",
                    reference=value,
                    suggestion=f"Set the environment variable:\n  export {var_name}='your-key-here'",
                )
            logger.debug(f"Resolved environment credential: {var_name}")
            return credential

        return value

    def lookup(self, backend_name: str, service: str, key: str | None = None) -> str | None:
        """Best-effort lookup that treats every failure as "not found".

        Args:
            backend_name: ``keyring`` or ``environment``
            service: Service identifier or variable name
            key: Key within the service

        Returns:
            Credential value, or None when missing or the backend is unusable
        """
        for backend in self.backends:
            if backend.name != backend_name or not backend.available:
                continue
            try:
                return backend.get(service, key)
            except CredentialError as e:
                logger.debug(f"Credential lookup failed for {backend_name}:{service}: {e.message}")
                return None
        return None

    def _backend(self, backend_name: str, reference: str) -> CredentialBackend:
        for backend in self.backends:
            if backend.name != backend_name:
                continue
            if not backend.available:
                raise BackendNotAvailableError(
                    f"{backend_name.capitalize()} backend is not available on this system",
                    reference=reference,
                    suggestion="Use an environment variable reference: ${VAR_NAME}",
                )
            return backend
        raise BackendNotAvailableError(f"No {backend_name} backend configured", reference=reference)
