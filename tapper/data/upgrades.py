"""Upgrade definitions — permanent upgrades bought with coins and their effects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class UpgradeEffect(Enum):
    """What an upgrade modifies."""

    XP_BOOST_PERCENT = auto()         # Multiply player XP grants
    COIN_YIELD_PERCENT = auto()       # Multiply coin grants
    RECORD_BONUS_FLAT = auto()        # Add coins to the new-record bonus
    MATERIAL_DROP_PERCENT = auto()    # Multiply loot weight of material entries
    SEED_DROP_PERCENT = auto()        # Multiply loot weight of seed entries
    OBJECT_XP_BOOST_PERCENT = auto()  # Multiply XP granted to owned objects


# Effects combined as "base * (1 + total)"; everything else is "base + total"
PERCENT_EFFECTS: frozenset[UpgradeEffect] = frozenset({
    UpgradeEffect.XP_BOOST_PERCENT,
    UpgradeEffect.COIN_YIELD_PERCENT,
    UpgradeEffect.MATERIAL_DROP_PERCENT,
    UpgradeEffect.SEED_DROP_PERCENT,
    UpgradeEffect.OBJECT_XP_BOOST_PERCENT,
})


@dataclass(frozen=True)
class UpgradeDef:
    """Definition of a single upgrade."""

    id: str
    name: str
    description: str
    effect: UpgradeEffect
    # Value per level (interpretation depends on effect type)
    value_per_level: float
    base_cost: int
    # Cost = floor(base_cost * cost_multiplier ^ level)
    cost_multiplier: float = 1.5
    max_level: int = 10


# ── Upgrade pool ──────────────────────────────────────────────────

SHARPER_KNIFE = UpgradeDef(
    id="sharper_knife",
    name="Sharper Knife",
    description="Cleaner cuts teach you more. +5% XP per level.",
    effect=UpgradeEffect.XP_BOOST_PERCENT,
    value_per_level=0.05,
    base_cost=100,
)

LATEX_CUPS = UpgradeDef(
    id="latex_cups",
    name="Bigger Latex Cups",
    description="Collect more per round. +5% coins per level.",
    effect=UpgradeEffect.COIN_YIELD_PERCENT,
    value_per_level=0.05,
    base_cost=150,
)

STOPWATCH = UpgradeDef(
    id="stopwatch",
    name="Pro Stopwatch",
    description="Records pay better. +10 coins on every new record per level.",
    effect=UpgradeEffect.RECORD_BONUS_FLAT,
    value_per_level=10,
    base_cost=120,
    max_level=5,
)

KEEN_EYE = UpgradeDef(
    id="keen_eye",
    name="Keen Eye",
    description="Spot more useful scraps. +10% material drop rate per level.",
    effect=UpgradeEffect.MATERIAL_DROP_PERCENT,
    value_per_level=0.10,
    base_cost=200,
)

SEED_POUCH = UpgradeDef(
    id="seed_pouch",
    name="Seed Pouch",
    description="Fallen seeds don't get away. +10% seed drop rate per level.",
    effect=UpgradeEffect.SEED_DROP_PERCENT,
    value_per_level=0.10,
    base_cost=300,
    cost_multiplier=1.8,
)

FERTILE_SOIL = UpgradeDef(
    id="fertile_soil",
    name="Fertile Soil",
    description="Trees grow stronger from every upgrade. +10% tree XP per level.",
    effect=UpgradeEffect.OBJECT_XP_BOOST_PERCENT,
    value_per_level=0.10,
    base_cost=250,
)


ALL_UPGRADES: dict[str, UpgradeDef] = {
    u.id: u
    for u in (
        SHARPER_KNIFE,
        LATEX_CUPS,
        STOPWATCH,
        KEEN_EYE,
        SEED_POUCH,
        FERTILE_SOIL,
    )
}
