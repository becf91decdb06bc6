"""Daily login rewards — a 7-day track walked by consecutive-day logins."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tapper.data.species import Rarity


class DailyRewardKind(Enum):
    COINS = auto()
    MATERIAL = auto()
    SEED = auto()       # one random species of the given rarity


@dataclass(frozen=True)
class DailyReward:
    """Reward paid on one day of the login streak."""

    day: int
    kind: DailyRewardKind
    amount: int = 1
    material_id: str = ""
    rarity: Rarity | None = None


DAILY_REWARDS: tuple[DailyReward, ...] = (
    DailyReward(1, DailyRewardKind.COINS, 100),
    DailyReward(2, DailyRewardKind.MATERIAL, 5, material_id="bark_chip"),
    DailyReward(3, DailyRewardKind.COINS, 200),
    DailyReward(4, DailyRewardKind.MATERIAL, 3, material_id="fertilizer"),
    DailyReward(5, DailyRewardKind.COINS, 300),
    DailyReward(6, DailyRewardKind.MATERIAL, 3, material_id="latex_lump"),
    DailyReward(7, DailyRewardKind.SEED, rarity=Rarity.RARE),
)
