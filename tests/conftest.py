"""Pytest configuration and shared fixtures."""

import pytest

from git_ship.engine.models import (
    CommitDetails,
    FileEntry,
    GitContext,
    PrDetails,
    StackGroup,
    StackPlan,
)
from git_ship.enums import FileStatus


@pytest.fixture
def main_context() -> GitContext:
    """On trunk with uncommitted changes."""
    return GitContext(
        current_branch="main",
        on_main=True,
        has_unstaged=True,
        has_changes=True,
    )


@pytest.fixture
def branch_context() -> GitContext:
    """On a feature branch with uncommitted changes and an upstream."""
    return GitContext(
        current_branch="feat-login",
        on_main=False,
        has_staged=True,
        has_changes=True,
        has_upstream=True,
    )


@pytest.fixture
def sample_files() -> tuple[FileEntry, ...]:
    """Changed files in picker order."""
    return (
        FileEntry(path="src/app.py", status=FileStatus.STAGED),
        FileEntry(path="src/db.py", status=FileStatus.MODIFIED),
        FileEntry(path="README.md", status=FileStatus.NEW),
    )


@pytest.fixture
def commit_details() -> CommitDetails:
    """Generated commit details."""
    return CommitDetails(
        branch_name="feat-add-login",
        commit_message="feat: add login form",
        pr_title="feat: add login form",
        pr_body="## Summary\n- add login form",
    )


@pytest.fixture
def pr_details() -> PrDetails:
    """Generated PR details."""
    return PrDetails(pr_title="feat: add login form", pr_body="## Summary\n- add login form")


@pytest.fixture
def stack_plan() -> StackPlan:
    """Two-commit stack plan covering ``src/db.py`` and ``src/api.py``."""
    return StackPlan(
        groups=(
            StackGroup(files=("src/db.py",), commit_message="feat: add db layer"),
            StackGroup(files=("src/api.py",), commit_message="feat: expose api"),
        ),
        branch_name="feat-db-api",
        pr_title="feat: db and api",
        pr_body="## Summary\n- db\n- api",
    )
