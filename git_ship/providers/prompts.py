"""System prompts and user messages sent to text-generation services."""

from collections.abc import Sequence

from git_ship.engine.models import FileEntry

COMMIT_SYSTEM_PROMPT = """\
You are a git commit message generator. Given a diff, produce:
- branch_name: kebab-case branch name (e.g. fix-sql-parser, feat-add-auth)
- commit_message: conventional commit (first line under 72 chars with \
fix:/feat:/refactor:/perf:/chore:/docs: prefix, then blank line, then \
optionally 1-3 bullet points if non-trivial)
- pr_title: PR title under 70 chars, same conventional prefix
- pr_body: markdown with ## Summary (1-3 bullets) and ## Changes (brief description)"""

PR_SYSTEM_PROMPT = """\
You are a PR description generator. Given a diff, produce:
- pr_title: PR title under 70 chars with conventional prefix \
(feat:/fix:/refactor:/perf:/chore:/docs:)
- pr_body: markdown with ## Summary (1-3 bullets) and ## Changes (brief description)"""

STACK_SYSTEM_PROMPT = """\
You are a git commit organizer. Given changed files and their diff, group them \
into logical, atomic commits.
Rules:
- Each group = one logical change (feature, refactor, fix, etc.)
- Every file in exactly one group
- Order: foundational changes first
- Each group gets a conventional commit message (fix:/feat:/etc., first line <72 chars)
- One branch_name (kebab-case), pr_title (<70 chars), and pr_body (markdown) \
for the whole set"""


def stack_plan_message(files: Sequence[FileEntry], diff: str) -> str:
    """User message listing the change set ahead of its diff.

    Example:
        >>> stack_plan_message([FileEntry("a.py", FileStatus.NEW)], "+x")
        'Files:\\nnew: a.py\\n\\nDiff:\\n+x'
    """
    file_list = "\n".join(f"{entry.status.value}: {entry.path}" for entry in files)
    return f"Files:\n{file_list}\n\nDiff:\n{diff}"
