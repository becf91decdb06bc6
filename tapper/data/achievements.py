"""Achievement catalog and mission vocabulary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class AchievementKind(Enum):
    LIFETIME_TAPS = auto()   # lifetime tap count >= target
    SPEED = auto()           # session average lap time < target seconds
    SESSION_TAPS = auto()    # taps in one sub-session >= target


class SessionStat(Enum):
    """Session statistics a mission can be measured against."""

    TAPPED_COUNT = "tapped_count"
    AVERAGE_LAP_TIME = "average_lap_time"
    TOTAL_DURATION = "total_duration"


class PlayerStat(Enum):
    """Cumulative statistics read from the player, not from one session."""

    LIFETIME_TAPS = "lifetime_taps"
    RARE_OBJECTS = "rare_objects"   # owned trees of exactly rare rarity


MissionStat = SessionStat | PlayerStat


def mission_stat(value: str) -> MissionStat:
    """Parse a persisted mission key into whichever stat enum owns it."""
    for enum in (SessionStat, PlayerStat):
        try:
            return enum(value)
        except ValueError:
            continue
    raise ValueError(f"Unknown mission stat: {value!r}")


class Comparison(Enum):
    MORE = "more"   # value >= target
    LESS = "less"   # value < target


@dataclass(frozen=True)
class AchievementDef:
    id: str
    title: str
    description: str
    kind: AchievementKind
    target: float
    coin_reward: int = 0


MASTER_TAPPER = AchievementDef(
    id="master_tapper",
    title="Master Tapper",
    description="Tap 1,000 trees in total.",
    kind=AchievementKind.LIFETIME_TAPS,
    target=1000,
    coin_reward=250,
)

SPEED_DEMON = AchievementDef(
    id="speed_demon",
    title="Speed Demon",
    description="Average under 30 seconds per tree.",
    kind=AchievementKind.SPEED,
    target=30.0,
    coin_reward=150,
)

MARATHONER = AchievementDef(
    id="marathoner",
    title="Marathoner",
    description="Tap 500+ trees in a single session.",
    kind=AchievementKind.SESSION_TAPS,
    target=500,
    coin_reward=200,
)

ALL_ACHIEVEMENTS: dict[str, AchievementDef] = {
    a.id: a for a in (MASTER_TAPPER, SPEED_DEMON, MARATHONER)
}
