"""
Run loop for the ship workflow.

Drives the transition function with the events produced by the effect
executor until a terminal state is reached. Each effect list must produce
exactly one event; anything else means the machine can no longer make
progress and the run ends in ``error``.
"""

from typing import Protocol

import structlog

from git_ship.engine import effects as fx
from git_ship.engine import events as ev
from git_ship.engine import states as st
from git_ship.engine.transitions import INITIAL, Transition, transition
from git_ship.exceptions import ShipError

log = structlog.get_logger(__name__)

STALLED_MESSAGE = "No event produced; state machine stalled."


class Executor(Protocol):
    async def execute(self, effect: fx.Effect) -> ev.Event | None: ...


async def run_workflow(executor: Executor, start: Transition | None = None) -> st.State:
    """Run the workflow to completion.

    Args:
        executor: Performs effects and reports their outcome
        start: Initial state and effects (default: preflight + check_tools)

    Returns:
        The terminal state the run ended in
    """
    current = start or INITIAL
    log.debug("workflow_started", state=current.state.kind)

    while not st.is_terminal(current.state):
        produced: list[ev.Event] = []
        try:
            for effect in current.effects:
                event = await executor.execute(effect)
                if event is not None:
                    produced.append(event)
        except ShipError as e:
            log.error("effect_failed", state=current.state.kind, error=e.message)
            return st.Error(message=e.message)

        if len(produced) > 1:
            kinds = ", ".join(event.kind for event in produced)
            log.error("multiple_events", state=current.state.kind, events=kinds)
            return st.Error(message=f"Effects produced more than one event: {kinds}")
        if not produced:
            log.error("workflow_stalled", state=current.state.kind)
            return st.Error(message=STALLED_MESSAGE)

        event = produced[0]
        following = transition(current.state, event)
        log.debug(
            "transition",
            from_state=current.state.kind,
            event=event.kind,
            to_state=following.state.kind,
            effects=[effect.kind for effect in following.effects],
        )
        current = following

    # Terminal transitions may still carry effects (e.g. unstage_all).
    try:
        for effect in current.effects:
            await executor.execute(effect)
    except ShipError as e:
        log.error("cleanup_failed", state=current.state.kind, error=e.message)

    log.debug("workflow_finished", state=current.state.kind)
    return current.state


def exit_code_for(state: st.State) -> int:
    """Process exit code for a terminal state."""
    return 1 if isinstance(state, st.Error | st.MergeConflict) else 0
