"""Configuration for git-ship.

Example:
    >>> from git_ship.config import ShipSettings, default_config_path
    >>> settings = ShipSettings.from_yaml(default_config_path())
    >>> settings.merge_strategy
    <MergeStrategy.SQUASH: 'squash'>
"""

from git_ship.config.settings import ShipSettings, default_config_path

__all__ = ["ShipSettings", "default_config_path"]
