"""Tests for the tapping session state machine."""

import logging
from unittest.mock import patch

import pytest

from tapper.data.balance import BALANCE, GameBalance, SessionBalance
from tapper.engine.errors import CatalogUnavailableError, IllegalTransitionError, InvalidGoalError
from tapper.engine.events import CycleCompleted, CycleGoalSet
from tapper.engine.rewards import roll_tap_reward
from tapper.engine.save import load_player
from tapper.engine.session import SessionPhase, TappingSession


def _tap(session: TappingSession, clock, seconds: float):
    session.begin_tap()
    clock.advance(seconds)
    return session.complete_tap()


def _run(session: TappingSession, clock, laps: list[float], goal: int | None = None):
    session.start_session(goal or len(laps))
    for lap in laps:
        _tap(session, clock, lap)


# ── Scenarios ────────────────────────────────────────────────────


def test_five_tap_session_average(ctx, clock):
    """Laps of 10, 9, 11, 8, 10 seconds average 9.6s and set the best time."""
    session = TappingSession(ctx)
    _run(session, clock, [10, 9, 11, 8, 10])
    summary = session.end_session()

    assert summary is not None
    assert summary.record.average_lap_time == pytest.approx(9.6)
    assert summary.record.total_duration == pytest.approx(48.0)
    assert summary.record.lap_durations == [10, 9, 11, 8, 10]
    assert len(ctx.player.session_history) == 1
    assert ctx.player.progression.best_average_lap_time == pytest.approx(9.6)
    assert summary.record_bonus is not None
    assert session.phase == SessionPhase.IDLE


def test_first_full_cycle_defines_cycle_goal(ctx, clock):
    session = TappingSession(ctx)
    _run(session, clock, [5, 5, 5])
    summary = session.end_session(full_cycle=True)

    cycle = ctx.player.cycle
    assert cycle.cycle_goal == 3
    assert cycle.tapped_in_current_cycle == 0
    assert cycle.cycles_completed == 1
    assert summary.cycle_goal_set and summary.cycle_completed
    assert any(isinstance(e, CycleGoalSet) for e in summary.events)
    assert any(isinstance(e, CycleCompleted) for e in summary.events)


def test_cycle_boundary_auto_ends_session(ctx, clock):
    """98 of 100 done: the second tap completes the cycle and ends the session."""
    ctx.player.cycle.cycle_goal = 100
    ctx.player.cycle.tapped_in_current_cycle = 98
    session = TappingSession(ctx)
    session.start_session(50)

    first = _tap(session, clock, 4)
    assert first.summary is None
    assert session.phase == SessionPhase.PREPARED

    second = _tap(session, clock, 4)
    assert second.summary is not None
    assert second.summary.full_cycle
    assert second.summary.record.tapped_count == 2
    assert session.phase == SessionPhase.IDLE
    assert ctx.player.cycle.tapped_in_current_cycle == 0
    assert ctx.player.cycle.cycle_goal == 100

    with pytest.raises(IllegalTransitionError):
        session.begin_tap()


def test_cycle_progress_never_exceeds_goal(ctx, clock):
    ctx.player.cycle.cycle_goal = 7
    session = TappingSession(ctx)
    for _ in range(5):
        session.start_session(3)
        while session.active:
            _tap(session, clock, 1)
            if session.active and session.state.tapped_count == 3:
                session.end_session()
            assert ctx.player.cycle.tapped_in_current_cycle < 7
    assert ctx.player.cycle.cycle_goal == 7


# ── Zero-tap discard ─────────────────────────────────────────────


def test_zero_tap_session_is_discarded(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(10)
    clock.advance(60)
    assert session.end_session(full_cycle=True) is None

    player = ctx.player
    assert player.session_history == []
    assert player.progression.xp == 0
    assert player.progression.lifetime_taps == 0
    assert player.cycle.cycle_goal is None
    assert ctx.store.data == {}
    assert session.phase == SessionPhase.IDLE


# ── Pause / resume ───────────────────────────────────────────────


def test_pause_does_not_count_towards_lap(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(1)
    session.begin_tap()
    clock.advance(5)
    session.pause()
    clock.advance(300)
    assert session.resume() == pytest.approx(300)
    clock.advance(5)
    result = session.complete_tap()
    assert result.lap_duration == pytest.approx(10)


def test_pause_neutrality(ctx, clock):
    """Elapsed time depends only on time spent unpaused."""
    session = TappingSession(ctx)
    session.start_session(3)
    for _ in range(3):
        session.begin_tap()
        clock.advance(4)
        session.pause()
        clock.advance(17)
        session.resume()
        clock.advance(6)
        session.complete_tap()
        session.pause()
        clock.advance(50)
        session.resume()
    summary = session.end_session()
    assert summary.record.total_duration == pytest.approx(30)
    assert summary.record.average_lap_time == pytest.approx(10)


def test_end_while_paused_closes_pause(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(5)
    _tap(session, clock, 8)
    session.pause()
    clock.advance(1000)
    summary = session.end_session()
    assert summary.record.total_duration == pytest.approx(8)


def test_elapsed_display_freezes_while_paused(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(5)
    clock.advance(12)
    session.pause()
    clock.advance(30)
    snap = session.snapshot()
    assert snap.paused
    assert snap.elapsed == pytest.approx(12)


# ── Illegal transitions ──────────────────────────────────────────


def test_begin_tap_requires_prepared(ctx):
    session = TappingSession(ctx)
    with pytest.raises(IllegalTransitionError) as exc:
        session.begin_tap()
    assert exc.value.operation == "begin_tap"
    assert session.phase == SessionPhase.IDLE


def test_complete_tap_requires_timing(ctx):
    session = TappingSession(ctx)
    session.start_session(3)
    with pytest.raises(IllegalTransitionError):
        session.complete_tap()
    assert session.state.tapped_count == 0
    assert session.phase == SessionPhase.PREPARED


def test_double_complete_is_rejected(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(3)
    _tap(session, clock, 2)
    with pytest.raises(IllegalTransitionError):
        session.complete_tap()
    assert session.state.tapped_count == 1
    assert len(session.state.lap_durations) == 1


def test_tapping_while_paused_is_rejected(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(3)
    session.pause()
    with pytest.raises(IllegalTransitionError):
        session.begin_tap()
    session.resume()
    session.begin_tap()
    session.pause()
    with pytest.raises(IllegalTransitionError):
        session.complete_tap()


def test_pause_and_resume_guards(ctx):
    session = TappingSession(ctx)
    with pytest.raises(IllegalTransitionError):
        session.pause()
    session.start_session(3)
    with pytest.raises(IllegalTransitionError):
        session.resume()
    session.pause()
    with pytest.raises(IllegalTransitionError):
        session.pause()


def test_end_and_start_guards(ctx):
    session = TappingSession(ctx)
    with pytest.raises(IllegalTransitionError):
        session.end_session()
    session.start_session(3)
    with pytest.raises(IllegalTransitionError):
        session.start_session(3)


def test_illegal_transition_is_logged(ctx, caplog):
    session = TappingSession(ctx)
    with caplog.at_level(logging.ERROR, logger="tapper.engine.session"):
        with pytest.raises(IllegalTransitionError):
            session.complete_tap()
    assert "complete_tap" in caplog.text


# ── Start-up errors ──────────────────────────────────────────────


@pytest.mark.parametrize("goal", [0, -5, 2.5, True, "10"])
def test_invalid_goal_rejected(ctx, goal):
    session = TappingSession(ctx)
    with pytest.raises(InvalidGoalError):
        session.start_session(goal)
    assert session.phase == SessionPhase.IDLE


def test_missing_catalog_blocks_start(ctx):
    ctx.catalog = None
    session = TappingSession(ctx)
    with pytest.raises(CatalogUnavailableError):
        session.start_session(10)
    assert session.phase == SessionPhase.IDLE


# ── Side effects ─────────────────────────────────────────────────


def test_exactly_one_reward_per_tap(ctx, clock):
    session = TappingSession(ctx)
    with patch("tapper.engine.session.roll_tap_reward", wraps=roll_tap_reward) as roll:
        _run(session, clock, [3, 3, 3, 3])
        session.end_session()
    assert roll.call_count == 4


def test_tap_rewards_are_saved_immediately(ctx, clock):
    """A reload mid-session sees every reward already granted."""
    session = TappingSession(ctx)
    session.start_session(10)
    for _ in range(6):
        _tap(session, clock, 2)
    reloaded = load_player(ctx.store)
    assert reloaded.progression.currency == ctx.player.progression.currency
    assert reloaded.inventory.materials == ctx.player.inventory.materials
    assert len(reloaded.inventory.owned_objects) == len(ctx.player.inventory.owned_objects)
    assert reloaded.session_history == []


def test_end_session_commits_progress(ctx, clock):
    session = TappingSession(ctx)
    _run(session, clock, [6] * 10)
    session.end_session()

    reloaded = load_player(ctx.store)
    assert reloaded.progression.lifetime_taps == 10
    assert reloaded.progression.xp == round(10 * BALANCE.progression.xp_per_tap)
    assert reloaded.progression.last_session_date is not None
    assert len(reloaded.session_history) == 1
    assert reloaded.cycle.tapped_in_current_cycle == 10


def test_history_is_capped(ctx, clock):
    ctx.balance = GameBalance(session=SessionBalance(history_cap=3))
    session = TappingSession(ctx)
    for n in range(1, 6):
        _run(session, clock, [1] * n)
        session.end_session()
    counts = [r.tapped_count for r in ctx.player.session_history]
    assert counts == [3, 4, 5]


def test_goal_average_appears_after_enough_sessions(ctx, clock):
    session = TappingSession(ctx)
    for _ in range(BALANCE.goals.min_sessions):
        assert ctx.player.progression.goal_average_lap_time is None
        _run(session, clock, [25] * 10)
        session.end_session()
    assert ctx.player.progression.goal_average_lap_time == 24.0


def test_lap_history_shift(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(5)
    _tap(session, clock, 7)
    _tap(session, clock, 5)
    assert session.state.last_lap_duration == 5
    assert session.state.previous_lap_duration == 7
    assert session.snapshot().lap_trend == "faster"


# ── Snapshot ─────────────────────────────────────────────────────


def test_snapshot_reports_ordinal_and_cycle(ctx, clock):
    ctx.player.cycle.cycle_goal = 50
    ctx.player.cycle.tapped_in_current_cycle = 20
    session = TappingSession(ctx)
    session.start_session(10)
    _tap(session, clock, 3)
    snap = session.snapshot()
    assert snap.tap_ordinal == 22
    assert snap.tapped_count == 1
    assert snap.cycle_progress == pytest.approx(21 / 50)
    assert snap.current_average == pytest.approx(3)


def test_snapshot_is_read_only(ctx, clock):
    session = TappingSession(ctx)
    session.start_session(10)
    _tap(session, clock, 3)
    snap = session.snapshot()
    snap.loot["bogus"] = 99
    assert "bogus" not in session.state.loot_accumulated
    for _ in range(3):
        clock.advance(1)
        session.snapshot()
    assert session.state.tapped_count == 1
    assert len(session.state.lap_durations) == 1


def test_snapshot_pacing_against_goal(ctx, clock):
    ctx.player.progression.goal_average_lap_time = 10.0
    session = TappingSession(ctx)
    session.start_session(10)
    _tap(session, clock, 8)
    _tap(session, clock, 10)
    assert session.snapshot().pacing_delta == pytest.approx(-1.0)


def test_snapshot_pacing_against_best_laps(ctx, clock):
    ctx.player.progression.best_session_lap_times = [5.0, 5.0, 5.0]
    session = TappingSession(ctx)
    session.start_session(10)
    _tap(session, clock, 6)
    _tap(session, clock, 6)
    assert session.snapshot().pacing_delta == pytest.approx(2.0)


def test_snapshot_after_end_counts_committed_taps_once(ctx, clock):
    """Once ended, the session's taps are only in the cycle counter."""
    ctx.player.cycle.cycle_goal = 100
    session = TappingSession(ctx)
    _run(session, clock, [3] * 10, goal=20)
    session.end_session()

    snap = session.snapshot()
    assert ctx.player.cycle.tapped_in_current_cycle == 10
    assert snap.phase == SessionPhase.IDLE
    assert snap.tapped_count == 0
    assert snap.tap_ordinal == 11
    assert snap.cycle_progress == pytest.approx(0.1)
    assert snap.current_average is None
    assert snap.elapsed == 0
    assert snap.loot == {}
    assert snap.last_lap == 0


def test_snapshot_after_auto_end_starts_fresh_cycle(ctx, clock):
    ctx.player.cycle.cycle_goal = 4
    ctx.player.cycle.tapped_in_current_cycle = 2
    session = TappingSession(ctx)
    session.start_session(10)
    _tap(session, clock, 2)
    result = _tap(session, clock, 2)
    assert result.summary is not None

    snap = session.snapshot()
    assert snap.tap_ordinal == 1
    assert snap.cycle_progress == pytest.approx(0.0)
    assert snap.tapped_count == 0
    assert snap.current_average is None


# ── XP per tap ───────────────────────────────────────────────────


@pytest.mark.parametrize("taps, xp", [(1, 1), (3, 2), (5, 3), (4, 2)])
def test_odd_tap_counts_round_half_xp_up(ctx, clock, taps, xp):
    """Half an XP per tap rounds up, so every tap counts."""
    session = TappingSession(ctx)
    _run(session, clock, [40] * taps)
    session.end_session()
    assert ctx.player.progression.xp == xp
