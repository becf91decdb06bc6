"""Notifications raised by engine operations for the UI to present."""

from __future__ import annotations

from dataclasses import dataclass

from tapper.data.species import Rarity


@dataclass(frozen=True)
class LevelUp:
    level: int
    coins: int


@dataclass(frozen=True)
class ObjectLevelUp:
    object_id: str
    level: int


@dataclass(frozen=True)
class NewRecord:
    average_lap_time: float
    bonus: int


@dataclass(frozen=True)
class AchievementUnlocked:
    achievement_id: str
    reward: int


@dataclass(frozen=True)
class MissionCompleted:
    mission_id: str
    reward: int


@dataclass(frozen=True)
class RareItemAcquired:
    object_id: str
    species_id: str
    rarity: Rarity


@dataclass(frozen=True)
class DailyRewardClaimed:
    day: int
    # "coins", a material id, "<species>_seed", or "" if the seed was discarded
    key: str
    amount: int


@dataclass(frozen=True)
class CycleGoalSet:
    cycle_goal: int


@dataclass(frozen=True)
class CycleCompleted:
    cycle_goal: int
    cycles_completed: int


Event = (
    LevelUp
    | ObjectLevelUp
    | NewRecord
    | AchievementUnlocked
    | MissionCompleted
    | RareItemAcquired
    | DailyRewardClaimed
    | CycleGoalSet
    | CycleCompleted
)
