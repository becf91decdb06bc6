"""Tree species — every collectible owned object and its leveling curve."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Rarity(Enum):
    """Rarity tiers, also the targets of seed loot entries."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class ObjectAttribute(Enum):
    """Special attributes an active owned object contributes."""

    XP_GAIN = "xp_gain"                  # +fraction player XP
    COIN_YIELD = "coin_yield"            # +fraction coins
    MATERIAL_DROP_RATE = "material_drop_rate"  # +fraction material loot weight
    GROWTH_RATE = "growth_rate"          # +fraction seedling growth speed


@dataclass(frozen=True)
class SpeciesDef:
    """Definition of a tree species."""

    id: str
    name: str
    rarity: Rarity
    # Object XP curve: round(base_exp_per_level * level ^ growth_rate)
    base_exp_per_level: float = 10.0
    growth_rate: float = 1.1
    max_level: int = 10
    base_growth_hours: float = 8.0
    # material id -> base amount needed per upgrade
    base_materials_needed: dict[str, int] = field(default_factory=dict)
    base_attributes: dict[ObjectAttribute, float] = field(default_factory=dict)


# ── Species ──────────────────────────────────────────────────────

RRIM_600 = SpeciesDef(
    id="rrim_600",
    name="RRIM 600",
    rarity=Rarity.COMMON,
    base_materials_needed={"bark_chip": 3},
)

RRIT_251 = SpeciesDef(
    id="rrit_251",
    name="RRIT 251",
    rarity=Rarity.UNCOMMON,
    base_exp_per_level=12.0,
    growth_rate=1.15,
    base_materials_needed={"bark_chip": 3, "latex_lump": 1},
    base_attributes={ObjectAttribute.COIN_YIELD: 0.05},
)

PB_235 = SpeciesDef(
    id="pb_235",
    name="PB 235",
    rarity=Rarity.RARE,
    base_exp_per_level=15.0,
    growth_rate=1.2,
    max_level=15,
    base_growth_hours=12.0,
    base_materials_needed={"latex_lump": 2, "fertilizer": 1},
    base_attributes={ObjectAttribute.XP_GAIN: 0.10},
)

GOLDEN_HEVEA = SpeciesDef(
    id="golden_hevea",
    name="Golden Hevea",
    rarity=Rarity.EPIC,
    base_exp_per_level=20.0,
    growth_rate=1.25,
    max_level=20,
    base_growth_hours=24.0,
    base_materials_needed={"latex_lump": 3, "fertilizer": 2},
    base_attributes={
        ObjectAttribute.MATERIAL_DROP_RATE: 0.20,
        ObjectAttribute.GROWTH_RATE: 0.10,
    },
)

# No LEGENDARY species ships yet: legendary seed draws are discarded.
ALL_SPECIES: dict[str, SpeciesDef] = {
    s.id: s for s in (RRIM_600, RRIT_251, PB_235, GOLDEN_HEVEA)
}
