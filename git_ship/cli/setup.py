"""CLI command for storing text-generation API keys."""

import sys
from pathlib import Path

import click
import structlog

from git_ship.config.settings import ShipSettings
from git_ship.credentials import KeyringBackend
from git_ship.enums import ProviderType
from git_ship.exceptions import PromptCancelledError, ShipError
from git_ship.providers.factory import keyring_service
from git_ship.utils.interactive import Prompter

log = structlog.get_logger(__name__)

SETUP_CHOICES: list[tuple[str, str]] = [
    ("groq", "Groq"),
    ("anthropic", "Anthropic"),
    ("openai", "OpenAI"),
    ("both", "Groq and Anthropic"),
]

_PROVIDERS_FOR_CHOICE = {
    "groq": (ProviderType.GROQ,),
    "anthropic": (ProviderType.ANTHROPIC,),
    "openai": (ProviderType.OPENAI,),
    "both": (ProviderType.GROQ, ProviderType.ANTHROPIC),
}

_FIELD_FOR_PROVIDER = {
    ProviderType.GROQ: "groq_api_key",
    ProviderType.ANTHROPIC: "anthropic_api_key",
    ProviderType.OPENAI: "openai_api_key",
}

_DISPLAY_NAMES = dict(SETUP_CHOICES)


@click.command(name="setup")
@click.pass_context
def setup_command(ctx: click.Context) -> None:
    """Store API keys for commit and PR generation.

    Keys go to the OS keyring when one is available; the config file then
    only holds a reference to them. Without a keyring the keys are written
    to the config file, readable by you only.

    Examples:

        ship setup
    """
    config_path: Path = ctx.obj["config_path"]
    try:
        SetupWizard(config_path, Prompter(), KeyringBackend()).run()
    except PromptCancelledError:
        click.echo(click.style("Setup cancelled.", fg="yellow"))
    except ShipError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        log.debug("setup_error", exc_info=True)
        sys.exit(1)


class SetupWizard:
    """Interactive API key setup."""

    def __init__(self, config_path: Path, prompter: Prompter, keyring_backend: KeyringBackend) -> None:
        self.config_path = config_path
        self.prompter = prompter
        self.keyring_backend = keyring_backend

    def run(self) -> None:
        settings = ShipSettings.from_yaml(self.config_path)
        self._show_current(settings)

        choice = self.prompter.select("Which provider do you want to configure?", SETUP_CHOICES)
        use_keyring = self.keyring_backend.available

        for provider in _PROVIDERS_FOR_CHOICE[choice]:
            key = self.prompter.password(f"{_DISPLAY_NAMES[provider.value]} API key")
            if not key:
                continue
            setattr(settings, _FIELD_FOR_PROVIDER[provider], self._store(provider, key, use_keyring))

        settings.save_yaml(self.config_path)
        click.echo(click.style("Config saved to ", fg="green") + click.style(str(self.config_path), dim=True))

    def _store(self, provider: ProviderType, key: str, use_keyring: bool) -> str:
        """Persist ``key`` and return the value to write into the config."""
        if not use_keyring:
            return key
        service = keyring_service(provider)
        self.keyring_backend.set(service, "api_key", key)
        log.info("api_key_stored", provider=provider.value, backend="keyring")
        return f"@keyring:{service}/api_key"

    def _show_current(self, settings: ShipSettings) -> None:
        click.echo(f"Current config {click.style(str(self.config_path), dim=True)}")
        for provider, field in _FIELD_FOR_PROVIDER.items():
            label = f"{_DISPLAY_NAMES[provider.value]} API key:"
            click.echo(f"  {label:<20} {_describe_key(getattr(settings, field))}")
        click.echo()


def _describe_key(value: str | None) -> str:
    if not value:
        return click.style("not set", dim=True)
    if value.startswith(("@keyring:", "${")):
        return click.style("set", fg="green") + f" ({value})"
    return click.style("set", fg="green") + f" ({value[:5]}...)"
