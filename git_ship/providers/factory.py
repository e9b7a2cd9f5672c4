"""Generation provider selection.

``create_generation_provider`` turns settings plus the run mode into a ready
provider. API keys are looked up in this order:

    1. The provider's environment variable (``GROQ_API_KEY``, ...)
    2. The config value, which may be a credential reference
    3. The keyring entry written by ``ship setup``
"""

import structlog

from git_ship.config.settings import ShipSettings
from git_ship.credentials import CredentialResolver
from git_ship.engine.models import RunMode
from git_ship.enums import ProviderType
from git_ship.exceptions import ConfigurationError, CredentialError
from git_ship.providers.anthropic import AnthropicProvider
from git_ship.providers.base import GenerationProvider
from git_ship.providers.manual import ManualProvider
from git_ship.providers.ollama import OLLAMA_BASE_URL, OLLAMA_DEFAULT_MODEL, OllamaProvider
from git_ship.providers.openai_compatible import (
    GROQ_BASE_URL,
    GROQ_DEFAULT_MODEL,
    OPENAI_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OpenAICompatibleProvider,
)
from git_ship.utils.interactive import Prompter

log = structlog.get_logger(__name__)

AUTO_ORDER = (ProviderType.GROQ, ProviderType.ANTHROPIC, ProviderType.OPENAI)


def keyring_service(provider: ProviderType) -> str:
    """Keyring service name holding ``provider``'s API key."""
    return ProviderType.OPENAI.value if provider is ProviderType.OPENAI_COMPATIBLE else provider.value


def resolve_api_key(provider: ProviderType, settings: ShipSettings, resolver: CredentialResolver) -> str | None:
    """Find the API key for ``provider``.

    Args:
        provider: Provider whose key is wanted
        settings: Loaded settings
        resolver: Resolver for credential references and keyring lookups

    Returns:
        The key, or None if none is configured anywhere

    Raises:
        CredentialError: If the config value is a reference that cannot be
            resolved
    """
    env_var = provider.api_key_env_var
    if env_var:
        from_env = resolver.lookup("environment", env_var)
        if from_env:
            return from_env

    configured = settings.api_key_for(provider)
    if configured:
        return resolver.resolve(configured)

    return resolver.lookup("keyring", keyring_service(provider), "api_key")


def create_generation_provider(
    settings: ShipSettings,
    mode: RunMode,
    prompter: Prompter,
    resolver: CredentialResolver | None = None,
) -> GenerationProvider:
    """Build the provider for this run.

    Args:
        settings: Loaded settings
        mode: Interactive or autonomous run mode
        prompter: Prompt surface handed to the manual provider
        resolver: Credential resolver (default: environment + keyring)

    Returns:
        Ready-to-use provider

    Raises:
        ConfigurationError: If the configured provider cannot be used in
            this mode, or its API key is missing
    """
    resolver = resolver or CredentialResolver()
    kind = settings.provider

    if kind is ProviderType.AUTO:
        for candidate in AUTO_ORDER:
            try:
                api_key = resolve_api_key(candidate, settings, resolver)
            except CredentialError as e:
                log.warning("api_key_unresolved", provider=candidate.value, error=e.message)
                continue
            if api_key:
                log.info("provider_selected", provider=candidate.value, source="auto")
                return _build(candidate, settings, api_key)
        if mode.is_auto:
            raise ConfigurationError(
                "Autonomous mode requires an API key. "
                "Set GROQ_API_KEY, ANTHROPIC_API_KEY or OPENAI_API_KEY, or run: ship setup"
            )
        log.info("provider_selected", provider=ProviderType.MANUAL.value, source="auto")
        return ManualProvider(prompter)

    if kind is ProviderType.MANUAL:
        if mode.is_auto:
            raise ConfigurationError("Autonomous mode cannot use the manual provider")
        return ManualProvider(prompter)

    if kind is ProviderType.OLLAMA:
        return _build(kind, settings, None)

    try:
        api_key = resolve_api_key(kind, settings, resolver)
    except CredentialError as e:
        raise ConfigurationError(f"Cannot resolve API key for {kind.value}: {e.message}") from e
    if kind.needs_api_key and not api_key:
        hint = f"Set {kind.api_key_env_var} or run: ship setup"
        raise ConfigurationError(f"No API key configured for {kind.value}. {hint}")

    log.info("provider_selected", provider=kind.value, source="config")
    return _build(kind, settings, api_key)


def _build(kind: ProviderType, settings: ShipSettings, api_key: str | None) -> GenerationProvider:
    if kind is ProviderType.GROQ:
        return OpenAICompatibleProvider(
            base_url=settings.base_url or GROQ_BASE_URL,
            model=settings.model or GROQ_DEFAULT_MODEL,
            api_key=api_key,
            timeout=settings.timeout,
            name="groq",
        )
    if kind is ProviderType.OPENAI:
        return OpenAICompatibleProvider(
            base_url=settings.base_url or OPENAI_BASE_URL,
            model=settings.model or OPENAI_DEFAULT_MODEL,
            api_key=api_key,
            timeout=settings.timeout,
            name="openai",
        )
    if kind is ProviderType.ANTHROPIC:
        if api_key is None:
            raise ConfigurationError("No API key configured for anthropic")
        return AnthropicProvider(
            api_key=api_key,
            model=settings.model,
            base_url=settings.base_url,
            timeout=settings.timeout,
        )
    if kind is ProviderType.OLLAMA:
        return OllamaProvider(
            base_url=settings.base_url or OLLAMA_BASE_URL,
            model=settings.model or OLLAMA_DEFAULT_MODEL,
            timeout=settings.timeout,
        )
    if kind is ProviderType.OPENAI_COMPATIBLE:
        if not settings.base_url:
            raise ConfigurationError("The openai-compatible provider requires base_url")
        return OpenAICompatibleProvider(
            base_url=settings.base_url,
            model=settings.model or "default",
            api_key=api_key,
            timeout=settings.timeout,
        )
    raise ConfigurationError(f"Unsupported provider: {kind.value}")
