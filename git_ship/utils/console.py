"""Terminal presentation for the ship workflow.

Everything the user reads goes through ``Console`` so that tests can swap it
for a mock and assert on what would have been shown.
"""

import click


class Console:
    """Styled output to stdout."""

    def intro(self, title: str) -> None:
        click.echo()
        click.echo(click.style(f" {title} ", bold=True, reverse=True))
        click.echo()

    def info(self, message: str) -> None:
        click.echo(click.style(message, dim=True))

    def success(self, message: str) -> None:
        click.echo(click.style(f"✓ {message}", fg="green"))

    def warn(self, message: str) -> None:
        click.echo(click.style(f"! {message}", fg="yellow"))

    def error(self, message: str) -> None:
        click.echo(click.style(f"✗ {message}", fg="red"), err=True)

    def note(self, content: str, title: str = "") -> None:
        """Print ``content`` inside a simple left-ruled box.

        Args:
            content: Multi-line text to display
            title: Optional heading printed above the box
        """
        if title:
            click.echo(click.style(title, bold=True))
        for line in content.splitlines() or [""]:
            click.echo(f"{click.style('│', dim=True)} {line}")
        click.echo()
