"""Tapping session state machine.

One sub-session runs ``IDLE -> PREPARED -> TIMING -> PREPARED ... -> IDLE``.
Each completed tap commits its reward immediately; everything else that a
session earns (history, record, XP, cycle progress, achievements) is
committed once, in :meth:`TappingSession.end_session`.

Only the transition methods mutate counters.  UI timers should call
:meth:`TappingSession.snapshot`, which is read-only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import NoReturn

from tapper.engine import save
from tapper.engine.analysis import (
    PacingResult,
    lap_trend,
    pacing_analysis,
    pacing_delta,
    session_insight,
    suggest_goal_average,
)
from tapper.engine.achievements import evaluate_achievements, evaluate_missions
from tapper.engine.clock import SessionClock
from tapper.engine.context import GameContext
from tapper.engine.cycle import (
    boundary_reached,
    commit_sub_session,
    cycle_progress,
    next_tap_ordinal,
)
from tapper.engine.errors import IllegalTransitionError, InvalidGoalError
from tapper.engine.events import CycleCompleted, CycleGoalSet, Event
from tapper.engine.game_state import SessionRecord
from tapper.engine.progression import grant_xp, record_best_time
from tapper.engine.rewards import RewardOutcome, roll_tap_reward

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    IDLE = auto()
    PREPARED = auto()  # waiting for the next tap to begin
    TIMING = auto()    # a lap is being measured


@dataclass
class SessionState:
    """Transient state of the active sub-session.  Never persisted."""

    total_goal: int = 0
    tapped_count: int = 0
    lap_started_at: float | None = None
    lap_durations: list[float] = field(default_factory=list)
    last_lap_duration: float = 0.0
    previous_lap_duration: float = 0.0
    loot_accumulated: dict[str, int] = field(default_factory=dict)
    timer: SessionClock = field(default_factory=SessionClock)

    @property
    def started_at(self) -> float | None:
        return self.timer.started_at

    @property
    def paused_at(self) -> float | None:
        return self.timer.paused_at

    @property
    def total_paused_duration(self) -> float:
        return self.timer.total_paused


@dataclass(frozen=True)
class SessionSummary:
    """Everything a finished sub-session produced."""

    record: SessionRecord
    full_cycle: bool
    # Coins paid for a new best average, None if no record was set
    record_bonus: int | None
    levels_gained: int
    cycle_goal_set: bool
    cycle_completed: bool
    pacing: PacingResult | None
    loot: dict[str, int]
    events: list[Event] = field(default_factory=list)


@dataclass(frozen=True)
class TapResult:
    lap_duration: float
    outcome: RewardOutcome
    events: list[Event] = field(default_factory=list)
    # Set when this tap reached the cycle boundary and ended the session
    summary: SessionSummary | None = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for display."""

    phase: SessionPhase
    paused: bool
    tap_ordinal: int
    tapped_count: int
    total_goal: int
    elapsed: float
    current_lap_elapsed: float
    last_lap: float
    previous_lap: float
    lap_trend: str | None
    current_average: float | None
    loot: dict[str, int]
    cycle_goal: int | None
    cycle_progress: float | None
    pacing_delta: float | None


class TappingSession:
    """Drives one sub-session at a time against a :class:`GameContext`."""

    def __init__(self, ctx: GameContext) -> None:
        self.ctx = ctx
        self.phase = SessionPhase.IDLE
        self.state = SessionState(timer=SessionClock(ctx.clock))

    # ── Guards ───────────────────────────────────────────────────

    def _fail(self, operation: str, detail: str = "") -> NoReturn:
        err = IllegalTransitionError(operation, self.phase.name, detail)
        logger.error("%s", err)
        raise err

    def _require(self, operation: str, *phases: SessionPhase) -> None:
        if self.phase not in phases:
            self._fail(operation)

    def _require_not_paused(self, operation: str) -> None:
        if self.state.timer.paused:
            self._fail(operation, "session is paused")

    # ── Transitions ──────────────────────────────────────────────

    def start_session(self, goal: int) -> None:
        """Begin a new sub-session aiming for *goal* taps."""
        self.ctx.require_catalog()
        if isinstance(goal, bool) or not isinstance(goal, int) or goal < 1:
            raise InvalidGoalError(goal)
        self._require("start_session", SessionPhase.IDLE)

        self.state = SessionState(total_goal=goal, timer=SessionClock(self.ctx.clock))
        self.state.timer.start()
        self.phase = SessionPhase.PREPARED
        logger.info("Session started, goal %d", goal)

    def begin_tap(self) -> None:
        self._require("begin_tap", SessionPhase.PREPARED)
        self._require_not_paused("begin_tap")
        self.state.lap_started_at = self.ctx.clock()
        self.phase = SessionPhase.TIMING

    def complete_tap(self) -> TapResult:
        """Finish the lap in flight and roll its single reward."""
        self._require("complete_tap", SessionPhase.TIMING)
        self._require_not_paused("complete_tap")
        st = self.state
        started = st.lap_started_at
        if started is None:
            self._fail("complete_tap", "no lap in flight")

        lap = max(0.0, self.ctx.clock() - started)
        st.lap_durations.append(lap)
        st.tapped_count += 1
        st.previous_lap_duration = st.last_lap_duration
        st.last_lap_duration = lap
        st.lap_started_at = None

        outcome = roll_tap_reward(self.ctx, st.loot_accumulated)
        events = self.ctx.drain_events()

        cycle = self.ctx.player.cycle
        if boundary_reached(cycle.cycle_goal, cycle.tapped_in_current_cycle, st.tapped_count):
            logger.info("Cycle boundary reached after %d taps", st.tapped_count)
            summary = self.end_session(full_cycle=True)
            return TapResult(lap, outcome, events, summary)

        self.phase = SessionPhase.PREPARED
        return TapResult(lap, outcome, events)

    def pause(self) -> None:
        self._require("pause", SessionPhase.PREPARED, SessionPhase.TIMING)
        self._require_not_paused("pause")
        self.state.timer.pause()

    def resume(self) -> float:
        """Close the pause and shift the in-flight lap by its length."""
        self._require("resume", SessionPhase.PREPARED, SessionPhase.TIMING)
        if not self.state.timer.paused:
            self._fail("resume", "session is not paused")
        paused_for = self.state.timer.resume()
        if self.state.lap_started_at is not None:
            self.state.lap_started_at += paused_for
        return paused_for

    def end_session(self, full_cycle: bool = False) -> SessionSummary | None:
        """Commit the sub-session.  Returns None when zero taps were logged."""
        self._require("end_session", SessionPhase.PREPARED, SessionPhase.TIMING)
        st = self.state
        ctx = self.ctx
        player = ctx.player

        if st.timer.paused:
            st.timer.resume()

        if st.tapped_count == 0:
            logger.info("Session ended with no taps, discarded")
            self._reset()
            return None

        elapsed = st.timer.elapsed()
        average = elapsed / st.tapped_count
        now = datetime.fromtimestamp(ctx.clock())
        record = SessionRecord(
            date=now.isoformat(timespec="seconds"),
            tapped_count=st.tapped_count,
            total_duration=elapsed,
            average_lap_time=average,
            lap_durations=list(st.lap_durations),
        )
        record.insight = session_insight(record, player.session_history)
        player.record_session(record, ctx.balance.session.history_cap)

        bonus = record_best_time(ctx, average, st.lap_durations)
        levels = grant_xp(ctx, st.tapped_count * ctx.balance.progression.xp_per_tap)

        prog = player.progression
        prog.lifetime_taps += st.tapped_count
        prog.last_session_date = now.date().isoformat()

        goal_set, completed = commit_sub_session(player.cycle, st.tapped_count, full_cycle)
        if goal_set:
            ctx.emit(CycleGoalSet(cycle_goal=player.cycle.cycle_goal))
        if completed:
            ctx.emit(
                CycleCompleted(
                    cycle_goal=player.cycle.cycle_goal,
                    cycles_completed=player.cycle.cycles_completed,
                )
            )

        prog.goal_average_lap_time = suggest_goal_average(player.session_history)

        evaluate_achievements(ctx, record)
        evaluate_missions(ctx, record)
        ctx.commit(save.PROGRESSION, save.CYCLE, save.HISTORY)

        summary = SessionSummary(
            record=record,
            full_cycle=full_cycle,
            record_bonus=bonus,
            levels_gained=levels,
            cycle_goal_set=goal_set,
            cycle_completed=completed,
            pacing=pacing_analysis(st.lap_durations, ctx.balance.session),
            loot=dict(st.loot_accumulated),
            events=ctx.drain_events(),
        )
        logger.info(
            "Session committed: %d taps, %.2fs average", record.tapped_count, average
        )
        self._reset()
        return summary

    def _reset(self) -> None:
        self.state.timer.stop()
        # Ended taps already live in the cycle counter; drop the transient tally
        self.state = SessionState(timer=SessionClock(self.ctx.clock))
        self.phase = SessionPhase.IDLE

    # ── Queries ──────────────────────────────────────────────────

    @property
    def active(self) -> bool:
        return self.phase != SessionPhase.IDLE

    def snapshot(self) -> SessionSnapshot:
        st = self.state
        cycle = self.ctx.player.cycle
        prog = self.ctx.player.progression
        elapsed = st.timer.display_elapsed()

        lap_elapsed = 0.0
        if st.lap_started_at is not None:
            end = st.paused_at if st.paused_at is not None else self.ctx.clock()
            lap_elapsed = max(0.0, end - st.lap_started_at)

        return SessionSnapshot(
            phase=self.phase,
            paused=st.timer.paused,
            tap_ordinal=next_tap_ordinal(
                cycle.cycle_goal, cycle.tapped_in_current_cycle, st.tapped_count
            ),
            tapped_count=st.tapped_count,
            total_goal=st.total_goal,
            elapsed=elapsed,
            current_lap_elapsed=lap_elapsed,
            last_lap=st.last_lap_duration,
            previous_lap=st.previous_lap_duration,
            lap_trend=lap_trend(st.last_lap_duration, st.previous_lap_duration),
            current_average=elapsed / st.tapped_count if st.tapped_count else None,
            loot=dict(st.loot_accumulated),
            cycle_goal=cycle.cycle_goal,
            cycle_progress=cycle_progress(
                cycle.cycle_goal, cycle.tapped_in_current_cycle, st.tapped_count
            ),
            pacing_delta=pacing_delta(
                st.lap_durations, prog.goal_average_lap_time, prog.best_session_lap_times
            ),
        )
