"""CLI entry point for git-ship."""

import asyncio
import sys
from pathlib import Path

import click
import structlog

from git_ship.cli import configure_command, setup_command
from git_ship.config.settings import ShipSettings, default_config_path
from git_ship.engine import RunMode
from git_ship.engine import states as st
from git_ship.engine.executor import EffectExecutor
from git_ship.engine.runner import exit_code_for, run_workflow
from git_ship.enums import Goal
from git_ship.exceptions import ShipError
from git_ship.git import CommandRunner, GitDiscovery, GitInspector
from git_ship.providers import GenerationProvider, create_generation_provider
from git_ship.utils.console import Console
from git_ship.utils.interactive import Prompter
from git_ship.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

NOTHING_TO_SHIP = "Nothing to ship. Working tree is clean and no unmerged commits."
MERGE_CONFLICT = "Merge conflict detected. Resolve manually, then run ship again."


@click.group(invoke_without_command=True)
@click.option("--local", "local", is_flag=True, help="Commit only, without asking anything")
@click.option("--push", "push", is_flag=True, help="Commit and push, without asking anything")
@click.option("--pr", "pr", is_flag=True, help="Commit, push and open a PR, without asking anything")
@click.option("--stack", is_flag=True, help="Split the changes into several commits (with --push or --pr)")
@click.option(
    "--config",
    "config",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: $SHIP_CONFIG or ~/.config/ship/config.yaml)",
)
@click.option("--log-level", default="WARNING", help="Logging level")
@click.pass_context
def cli(
    ctx: click.Context,
    local: bool,
    push: bool,
    pr: bool,
    stack: bool,
    config: Path | None,
    log_level: str,
) -> None:
    """ship: commit, push and open pull requests in one step.

    Without flags every step is confirmed interactively. With --local,
    --push or --pr the run is autonomous and never prompts.

    Examples:

        ship

        ship --pr

        ship --push --stack
    """
    configure_logging(log_level)

    try:
        mode = parse_mode(local=local, push=push, pr=pr, stack=stack)
    except click.UsageError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)

    config_path = config or default_config_path()
    ctx.obj = {"config_path": config_path, "mode": mode}

    if ctx.invoked_subcommand is not None:
        return

    try:
        state = ship(config_path, mode)
    except ShipError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        log.debug("ship_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)

    sys.exit(exit_code_for(state))


cli.add_command(setup_command)
cli.add_command(configure_command)


def parse_mode(local: bool, push: bool, pr: bool, stack: bool) -> RunMode:
    """Turn the goal flags into a run mode.

    Raises:
        click.UsageError: If the flags contradict each other
    """
    goals = [goal for goal, chosen in ((Goal.LOCAL, local), (Goal.PUSH, push), (Goal.PR, pr)) if chosen]
    if len(goals) > 1:
        raise click.UsageError("--local, --push, and --pr are mutually exclusive.")
    goal = goals[0] if goals else None
    if stack and goal not in (Goal.PUSH, Goal.PR):
        raise click.UsageError("--stack requires --push or --pr.")
    return RunMode(goal=goal, stack=stack)


def ship(config_path: Path, mode: RunMode) -> st.State:
    """Run one ship workflow in the current repository.

    Args:
        config_path: Path to the YAML config file
        mode: Interactive or autonomous run mode

    Returns:
        The terminal state of the run, already reported to the user

    Raises:
        ShipError: If the run cannot start (no repository, bad config,
            missing API key)
    """
    settings = ShipSettings.from_yaml(config_path)
    discovery = GitDiscovery()
    root = discovery.root
    trunk = settings.trunk_branch or discovery.detect_trunk()

    console = Console()
    prompter = Prompter()
    provider = create_generation_provider(settings, mode, prompter)
    commands = CommandRunner(cwd=root)

    console.intro(f"ship {mode.label}".rstrip())
    log.info("ship_started", root=str(root), trunk=trunk, mode=mode.label or "interactive", provider=provider.name)

    executor = EffectExecutor(
        commands=commands,
        inspector=GitInspector(commands, trunk=trunk),
        provider=provider,
        mode=mode,
        prompter=prompter,
        console=console,
        trunk=trunk,
        merge_strategy=settings.merge_strategy,
    )
    state = asyncio.run(_run(executor, provider))
    report(state, console)
    return state


async def _run(executor: EffectExecutor, provider: GenerationProvider) -> st.State:
    try:
        return await run_workflow(executor)
    finally:
        await provider.aclose()


def report(state: st.State, console: Console) -> None:
    """Print the outcome of a run."""
    if isinstance(state, st.Done):
        console.success(state.message)
    elif isinstance(state, st.Cancelled):
        console.warn(state.message)
    elif isinstance(state, st.Error):
        console.error(state.message)
    elif isinstance(state, st.NothingToShip):
        console.warn(NOTHING_TO_SHIP)
    elif isinstance(state, st.MergeConflict):
        console.warn(MERGE_CONFLICT)
        console.info(state.message)


if __name__ == "__main__":
    cli()
