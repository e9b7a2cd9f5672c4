"""
Settings for git-ship.

Loaded once at startup from ``~/.config/ship/config.yaml`` (or the path in
``--config`` / ``SHIP_CONFIG``). Environment variables prefixed with
``SHIP_`` fill in anything the file leaves out. The workflow engine never
reads settings; the CLI passes the relevant values in.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from git_ship.enums import MergeStrategy, ProviderType
from git_ship.exceptions import ConfigurationError

CONFIG_ENV_VAR = "SHIP_CONFIG"


def default_config_path() -> Path:
    """Location of the config file when ``--config`` is not given."""
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "ship" / "config.yaml"


class ShipSettings(BaseSettings):
    """User configuration.

    API key fields may hold the key itself or a credential reference
    (``@keyring:groq/api_key``, ``${GROQ_API_KEY}``).
    """

    model_config = SettingsConfigDict(
        env_prefix="SHIP_",
        case_sensitive=False,
        extra="ignore",
    )

    provider: ProviderType = Field(default=ProviderType.AUTO, description="Text-generation provider")
    model: str | None = Field(default=None, description="Model override for the chosen provider")
    base_url: str | None = Field(default=None, description="API base URL override")
    timeout: float = Field(default=60.0, gt=0, description="Generation request timeout in seconds")
    merge_strategy: MergeStrategy = Field(default=MergeStrategy.SQUASH, description="gh pr merge strategy")
    trunk_branch: str | None = Field(default=None, description="Trunk branch, overriding detection")
    groq_api_key: str | None = None
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    def api_key_for(self, provider: ProviderType) -> str | None:
        """Configured (possibly unresolved) API key for ``provider``."""
        return {
            ProviderType.GROQ: self.groq_api_key,
            ProviderType.ANTHROPIC: self.anthropic_api_key,
            ProviderType.OPENAI: self.openai_api_key,
            ProviderType.OPENAI_COMPATIBLE: self.openai_api_key,
        }.get(provider)

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> ShipSettings:
        """Load settings from a YAML file.

        A missing file is not an error: defaults (plus ``SHIP_*``
        environment variables) apply.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ShipSettings instance

        Raises:
            ConfigurationError: If the file cannot be read or is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            return cls()

        try:
            yaml_content = config_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            config_dict = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e

    def save_yaml(self, config_path: str | Path) -> None:
        """Write settings to ``config_path`` readable by the owner only.

        Raises:
            ConfigurationError: If the file cannot be written
        """
        config_file = Path(config_path)
        data = self.model_dump(mode="json", exclude_none=True)
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            config_file.write_text(yaml.safe_dump(data, sort_keys=False))
            config_file.chmod(0o600)
        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration file: {config_path}") from e
