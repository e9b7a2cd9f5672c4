"""CLI command for workflow preferences."""

import sys
from pathlib import Path

import click
import structlog

from git_ship.config.settings import ShipSettings
from git_ship.enums import MergeStrategy
from git_ship.exceptions import PromptCancelledError, ShipError
from git_ship.utils.interactive import Prompter

log = structlog.get_logger(__name__)


@click.command(name="configure")
@click.pass_context
def configure_command(ctx: click.Context) -> None:
    """Choose how pull requests are merged.

    Examples:

        ship configure
    """
    config_path: Path = ctx.obj["config_path"]
    prompter = Prompter()
    try:
        settings = ShipSettings.from_yaml(config_path)
        click.echo(f"Current config {click.style(str(config_path), dim=True)}")
        click.echo(f"  Merge strategy:  {click.style(settings.merge_strategy.value, fg='cyan')}")
        click.echo()

        settings.merge_strategy = prompter.select(
            "Merge strategy for PRs",
            [(strategy, strategy.value) for strategy in MergeStrategy],
            default=settings.merge_strategy,
        )
        settings.save_yaml(config_path)
    except PromptCancelledError:
        click.echo(click.style("Config cancelled.", fg="yellow"))
        return
    except ShipError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        log.debug("configure_error", exc_info=True)
        sys.exit(1)

    click.echo(click.style("Config saved to ", fg="green") + click.style(str(config_path), dim=True))
