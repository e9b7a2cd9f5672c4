"""Interactive prompts for the ship workflow.

``Prompter`` wraps click's blocking prompt functions behind a small surface
(text, select, multiselect, confirm, password, edit) so the effect executor
can be driven by a mock in tests. Every prompt converts click's abort
(Ctrl-C or end of input) into ``PromptCancelledError``.

Example:
    >>> prompter = Prompter()
    >>> choice = prompter.select(
    ...     "What next?",
    ...     [("create_pr", "Push and create PR"), ("done", "Done")],
    ... )
"""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import click

from git_ship.exceptions import PromptCancelledError

T = TypeVar("T")


class Prompter:
    """Blocking terminal prompts built on click."""

    def text(self, message: str, default: str | None = None) -> str:
        """Ask for a line of text.

        Args:
            message: Prompt shown to the user
            default: Value used when the user just presses enter

        Returns:
            The entered text, stripped of surrounding whitespace
        """
        value = self._ask(click.prompt, message, default=default, show_default=default is not None)
        return str(value).strip()

    def select(self, message: str, options: Sequence[tuple[T, str]], default: T | None = None) -> T:
        """Ask the user to pick one option from a numbered list.

        Args:
            message: Question shown above the list
            options: (value, label) pairs in display order
            default: Value pre-selected when the user presses enter

        Returns:
            The value of the chosen option
        """
        click.echo(click.style(message, bold=True))
        default_index = 1
        for index, (value, label) in enumerate(options, start=1):
            click.echo(f"  {index}. {label}")
            if value == default:
                default_index = index

        choice = self._ask(
            click.prompt,
            "Choice",
            type=click.IntRange(1, len(options)),
            default=default_index,
        )
        return options[choice - 1][0]

    def multiselect(
        self,
        message: str,
        options: Sequence[tuple[T, str]],
        initial: Sequence[T] = (),
    ) -> list[T]:
        """Ask the user to pick one or more options from a numbered list.

        The answer is a comma-separated list of option numbers. Invalid
        answers are reported and the question is asked again.

        Args:
            message: Question shown above the list
            options: (value, label) pairs in display order
            initial: Values selected when the user presses enter

        Returns:
            Chosen values in display order
        """
        click.echo(click.style(message, bold=True))
        for index, (_, label) in enumerate(options, start=1):
            click.echo(f"  {index}. {label}")

        initial_numbers = [str(i) for i, (value, _) in enumerate(options, start=1) if value in initial]
        default = ",".join(initial_numbers) if initial_numbers else None

        while True:
            answer = self._ask(
                click.prompt,
                "Numbers (comma-separated, 'a' for all)",
                default=default,
                show_default=default is not None,
            )
            selected = _parse_selection(str(answer), len(options))
            if selected:
                return [options[i - 1][0] for i in selected]
            click.echo(click.style("Pick at least one valid number.", fg="yellow"))

    def confirm(self, message: str, default: bool = True) -> bool:
        return bool(self._ask(click.confirm, message, default=default))

    def password(self, message: str) -> str:
        """Ask for a secret without echoing it."""
        value = self._ask(click.prompt, message, hide_input=True)
        return str(value).strip()

    def edit(self, text: str) -> str | None:
        """Open ``$EDITOR`` on ``text``.

        Returns:
            The edited text, or ``None`` when the editor was closed without
            saving
        """
        return self._ask(click.edit, text, extension=".txt")

    @staticmethod
    def _ask(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.exceptions.Abort, EOFError) as e:
            raise PromptCancelledError() from e


def _parse_selection(answer: str, count: int) -> list[int]:
    """Turn ``"1, 3,4"`` into ``[1, 3, 4]``.

    Returns an empty list when any entry is not a number in ``1..count``.
    """
    answer = answer.strip().lower()
    if answer in ("a", "all"):
        return list(range(1, count + 1))

    numbers: list[int] = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            return []
        if int(part) not in numbers:
            numbers.append(int(part))
    return sorted(numbers)
