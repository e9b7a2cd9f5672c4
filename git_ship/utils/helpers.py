"""Small text helpers shared by providers, prompts and the executor."""

import re

_WHITESPACE = re.compile(r"\s+")
_INVALID_BRANCH_CHARS = re.compile(r"[^a-z0-9._/-]")


def normalize_branch_name(name: str) -> str:
    """Turn free text into a git-friendly branch name.

    Lower-cases the input, replaces runs of whitespace with ``-`` and drops
    every character outside ``[a-z0-9._/-]``.

    Example:
        >>> normalize_branch_name("Feat Add OAuth!")
        'feat-add-oauth'
    """
    lowered = _WHITESPACE.sub("-", name.strip().lower())
    return _INVALID_BRANCH_CHARS.sub("", lowered)


def normalize_text(text: str) -> str:
    """Normalize line endings and trim surrounding whitespace.

    Applied to generated and hand-edited commit messages and PR text.
    Trailing whitespace on each line is removed as well.
    """
    unified = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in unified.split("\n")]
    return "\n".join(lines).strip()


def first_line(text: str) -> str:
    """Return the subject line of a commit message."""
    return text.split("\n", 1)[0]


def split_lines(output: str) -> list[str]:
    """Split command output into non-empty lines."""
    return [line for line in output.split("\n") if line]


def parse_count(output: str) -> int:
    """Parse ``git rev-list --count`` output, treating garbage as zero."""
    try:
        return int(output.strip() or "0")
    except ValueError:
        return 0
