"""Cycle accountant — reconciles sub-session taps against the full-cycle size.

A cycle (one pass over the whole plantation) may take several sub-sessions.
The cycle size is unknown until the first session ended as a full cycle,
after which it never changes.
"""

from __future__ import annotations

import logging

from tapper.engine.game_state import CycleState

logger = logging.getLogger(__name__)


def boundary_reached(cycle_goal: int | None, tapped_in_cycle: int, tapped_so_far: int) -> bool:
    """True once the active sub-session has tapped the rest of the cycle."""
    return cycle_goal is not None and tapped_in_cycle + tapped_so_far >= cycle_goal


def next_tap_ordinal(cycle_goal: int | None, tapped_in_cycle: int, tapped_so_far: int) -> int:
    """Label for the upcoming tap.

    Counts through the cycle when its size is known, otherwise from the
    start of the sub-session.
    """
    if cycle_goal is None:
        return tapped_so_far + 1
    return tapped_in_cycle + tapped_so_far + 1


def cycle_progress(cycle_goal: int | None, tapped_in_cycle: int, tapped_so_far: int) -> float | None:
    """Fraction of the cycle done, 0.0–1.0, or None while the size is unknown."""
    if not cycle_goal:
        return None
    return min(1.0, (tapped_in_cycle + tapped_so_far) / cycle_goal)


def commit_sub_session(cycle: CycleState, tapped_count: int, full_cycle: bool) -> tuple[bool, bool]:
    """Fold a finished sub-session into *cycle*.

    Returns ``(goal_was_set, cycle_completed)``.
    """
    goal_was_set = False
    if full_cycle and cycle.cycle_goal is None:
        cycle.cycle_goal = cycle.tapped_in_current_cycle + tapped_count
        goal_was_set = True
        logger.info("Cycle size fixed at %d taps", cycle.cycle_goal)

    cycle.tapped_in_current_cycle += tapped_count

    completed = False
    if cycle.cycle_goal is not None and cycle.tapped_in_current_cycle >= cycle.cycle_goal:
        cycle.tapped_in_current_cycle = 0
        cycle.cycles_completed += 1
        completed = True
        logger.info("Cycle %d complete", cycle.cycles_completed)

    return goal_was_set, completed
