"""Workflow engine for git-ship.

The engine is a finite-state machine over immutable values:

Key Components:
    - models: Repository snapshot and generated artifacts
    - states / events / effects: Tagged unions, one frozen dataclass per variant
    - transitions: Pure ``transition(state, event)`` function
    - executor: Performs effects (git, gh, provider, prompts)
    - runner: Drives the machine until a terminal state

Only ``executor`` touches the outside world, so it is not imported here.
"""

from git_ship.engine.models import (
    CommitDetails,
    FileEntry,
    GitContext,
    PrDetails,
    RunMode,
    StackGroup,
    StackPlan,
)
from git_ship.engine.transitions import INITIAL, Transition, transition

__all__ = [
    "CommitDetails",
    "FileEntry",
    "GitContext",
    "PrDetails",
    "RunMode",
    "StackGroup",
    "StackPlan",
    "INITIAL",
    "Transition",
    "transition",
]
