"""Balance constants — all tuning knobs in one place.

Tweak these to adjust leveling pace, rewards, and coaching thresholds.
XP curves follow: base * level ^ exponent, halves rounded up
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressionBalance:
    """Tuning for player XP, levels, and coin grants."""

    # XP needed to go from level 1 -> 2
    base_xp_per_level: float = 100.0
    # Curve steepness (must be > 1 so every level costs more than the last)
    xp_exponent: float = 1.5

    # Coins granted on every level crossed: base + new_level * per_level
    level_up_base_coins: int = 50
    level_up_coins_per_level: int = 5

    # Coins for beating the best average lap time
    record_bonus_coins: int = 25

    # Session-end XP per tap
    xp_per_tap: float = 0.5


@dataclass(frozen=True)
class SessionBalance:
    """Tuning for the tapping session itself."""

    # Session history records kept (oldest evicted first)
    history_cap: int = 30
    # Display refresh interval for the elapsed-time readout
    timer_interval_s: float = 1.0
    # Laps needed before first-half / second-half pacing is reported
    pacing_min_laps: int = 10
    # Pacing verdict thresholds, as percent change between halves
    pacing_steady_pct: float = 3.0
    pacing_shift_pct: float = 10.0


@dataclass(frozen=True)
class GoalBalance:
    """Tuning for the suggested average-lap goal and suggested tap count."""

    min_sessions: int = 5
    lookback_sessions: int = 10
    # Sessions with fewer taps than this are ignored for goal setting
    min_taps_per_session: int = 10
    # Goal = best recent average * this
    improvement_factor: float = 0.98
    min_goal_s: float = 15.0
    max_goal_s: float = 60.0

    # Tap-count suggestion
    suggestion_min_sessions: int = 3
    suggestion_lookback: int = 7
    suggestion_default: int = 100
    suggestion_minimum: int = 50


@dataclass(frozen=True)
class PlantationBalance:
    """Tuning for owned-object growth and upgrades."""

    default_growth_hours: float = 8.0
    default_max_level: int = 10
    default_base_exp_per_level: float = 10.0
    default_growth_rate: float = 1.1

    # Hours taken off a seedling's remaining growth time
    water_reduction_hours: float = 1.0
    fertilize_reduction_hours: float = 0.5
    fertilizer_material: str = "fertilizer"

    # Material cost multiplier per rarity tier name
    rarity_material_mult: tuple[tuple[str, float], ...] = (
        ("common", 1.0),
        ("uncommon", 1.3),
        ("rare", 1.8),
        ("epic", 2.5),
        ("legendary", 3.5),
    )


@dataclass(frozen=True)
class GameBalance:
    """Top-level container for all balance constants."""

    progression: ProgressionBalance = field(default_factory=ProgressionBalance)
    session: SessionBalance = field(default_factory=SessionBalance)
    goals: GoalBalance = field(default_factory=GoalBalance)
    plantation: PlantationBalance = field(default_factory=PlantationBalance)


# Singleton, import this everywhere
BALANCE = GameBalance()
