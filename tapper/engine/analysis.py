"""Session analysis — pacing, insights, and personal goal suggestions.

All functions here are pure: they read history and lap data and return
numbers or text for the UI; none of them mutate state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Sequence

from tapper.data.balance import BALANCE, GoalBalance, SessionBalance
from tapper.engine.game_state import SessionRecord
from tapper.engine.progression import round_half_up


@dataclass(frozen=True)
class PacingResult:
    first_half_avg: float
    second_half_avg: float
    percent_change: float
    # "steady" | "faded" | "accelerated" | "mixed"
    verdict: str

    @property
    def text(self) -> str:
        return _PACING_TEXT[self.verdict]


_PACING_TEXT = {
    "steady": "Excellent! You kept a steady pace the whole way through.",
    "faded": "Strong start, but you slowed down noticeably towards the end.",
    "accelerated": "Slow to warm up, then you sped up a lot in the second half.",
    "mixed": "Good work! Some variation in speed, but your form held overall.",
}


def pacing_analysis(
    lap_durations: Sequence[float], bal: SessionBalance = BALANCE.session
) -> PacingResult | None:
    """Compare first-half and second-half lap averages."""
    if len(lap_durations) < bal.pacing_min_laps:
        return None

    half = math.ceil(len(lap_durations) / 2)
    first, second = lap_durations[:half], lap_durations[half:]
    avg_first = sum(first) / len(first)
    avg_second = sum(second) / len(second)
    pct = (avg_second - avg_first) / avg_first * 100 if avg_first else 0.0

    if abs(pct) < bal.pacing_steady_pct:
        verdict = "steady"
    elif pct > bal.pacing_shift_pct:
        verdict = "faded"
    elif pct < -bal.pacing_shift_pct:
        verdict = "accelerated"
    else:
        verdict = "mixed"
    return PacingResult(avg_first, avg_second, pct, verdict)


def session_insight(record: SessionRecord, history: Sequence[SessionRecord]) -> str:
    """Free-text coaching for a just-finished session.

    *history* should not include *record* itself.
    """
    if record.tapped_count < 2:
        return "Not enough data to analyse yet."

    mean = record.average_lap_time
    laps = record.lap_durations
    std_dev = 0.0
    if len(laps) > 1:
        std_dev = math.sqrt(sum((x - mean) ** 2 for x in laps) / len(laps))

    if std_dev < mean * 0.15:
        consistency = "Your tapping rhythm was very consistent!"
    elif std_dev < mean * 0.30:
        consistency = "Your tapping speed was fairly steady."
    else:
        consistency = "Your speed varied quite a bit from tree to tree."

    historical = ""
    valid = [s for s in history if s.tapped_count > 0]
    if valid:
        overall = sum(s.average_lap_time for s in valid) / len(valid)
        if record.average_lap_time < overall * 0.95:
            historical = f"Faster than your usual average ({overall:.2f}s per tree)!"
        elif record.average_lap_time > overall * 1.05:
            historical = f"A little slower than your usual average ({overall:.2f}s per tree)."

    return " ".join(part for part in (historical, consistency) if part)


def suggest_goal_average(
    history: Sequence[SessionRecord], bal: GoalBalance = BALANCE.goals
) -> float | None:
    """Personal average-lap target based on the best recent session."""
    if len(history) < bal.min_sessions:
        return None
    recent = history[-bal.lookback_sessions:]
    valid = [s for s in recent if s.tapped_count >= bal.min_taps_per_session]
    if not valid:
        return None

    best = min(s.average_lap_time for s in valid)
    goal = round(best * bal.improvement_factor, 2)
    goal = min(max(goal, bal.min_goal_s), bal.max_goal_s)
    # Half-second steps for quick laps, whole seconds otherwise
    if goal < 20:
        return round_half_up(goal * 2) / 2
    return float(round_half_up(goal))


def suggest_tap_count(
    history: Sequence[SessionRecord],
    cycle_goal: int | None = None,
    bal: GoalBalance = BALANCE.goals,
) -> int:
    """Suggested goal for the next sub-session, rounded to the nearest 10."""
    suggestion = bal.suggestion_default
    if cycle_goal and cycle_goal > 0:
        suggestion = round_half_up(cycle_goal / 10) * 10
    elif len(history) >= bal.suggestion_min_sessions:
        recent = history[-bal.suggestion_lookback:]
        average = sum(s.tapped_count for s in recent) / len(recent)
        if average > 0:
            suggestion = round_half_up(average / 10) * 10
    return max(suggestion, bal.suggestion_minimum)


def calculate_streak(history: Sequence[SessionRecord], today: date | None = None) -> int:
    """Consecutive days with at least one session, ending today or yesterday."""
    if today is None:
        today = date.today()
    days = sorted({datetime.fromisoformat(s.date).date() for s in history if s.date}, reverse=True)
    if not days:
        return 0

    expected = today
    if days[0] < today:
        expected = today - timedelta(days=1)
        if days[0] != expected:
            return 0

    streak = 0
    for day in days:
        if day == expected:
            streak += 1
            expected -= timedelta(days=1)
        elif day < expected:
            break
    return streak


def lap_trend(last: float, previous: float) -> str | None:
    """``faster`` / ``slower`` / ``same`` for the latest lap vs the one before."""
    if last <= 0 or previous <= 0:
        return None
    if last < previous:
        return "faster"
    if last > previous:
        return "slower"
    return "same"


def pacing_delta(
    lap_durations: Sequence[float],
    goal_average: float | None,
    best_lap_times: Sequence[float],
) -> float | None:
    """Seconds ahead (negative) or behind (positive) the pace to beat.

    Against the goal average when one exists, otherwise against the best
    session's cumulative time at the same lap count.
    """
    n = len(lap_durations)
    if n == 0:
        return None
    if goal_average is not None:
        return sum(lap_durations) / n - goal_average
    if len(best_lap_times) >= n:
        return sum(lap_durations) - sum(best_lap_times[:n])
    return None


def coach_tip(
    history: Sequence[SessionRecord],
    goal_average: float | None,
    best_average: float | None,
) -> str:
    """One line of encouragement, keyed off the goal or the personal best."""
    last = history[-1] if history else None
    if goal_average:
        if last is not None and last.average_lap_time <= goal_average:
            return f"Goal met last time ({goal_average:.2f}s per tree). Well done!"
        if last is not None:
            diff = last.average_lap_time - goal_average
            return (
                f"Your goal is {goal_average:.2f}s per tree. "
                f"Last time you were only {diff:.2f}s off. You can do it!"
            )
        return f"Your goal: {goal_average:.2f}s per tree. Let's go!"

    if best_average:
        # The session that set the best leaves last == best
        if last is not None and last.average_lap_time <= best_average:
            return f"New personal best last time ({last.average_lap_time:.2f}s per tree)!"
        return f"Your best is {best_average:.2f}s per tree. Can you beat it?"

    return "Welcome! Log your first session to get started."
