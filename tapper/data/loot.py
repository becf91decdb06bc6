"""Loot table — what a single tap can yield.

Every tap resolves exactly one entry.  Weights are relative; material and
seed weights are scaled by drop-rate modifiers, coin weights never are.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from tapper.data.species import Rarity


class LootKind(Enum):
    COINS = auto()
    MATERIAL = auto()
    SEED = auto()


@dataclass(frozen=True)
class LootEntry:
    """One weighted band of the loot table."""

    kind: LootKind
    weight: float
    # COINS: inclusive amount range
    min_amount: int = 0
    max_amount: int = 0
    # MATERIAL: fixed amount of material_id
    material_id: str = ""
    amount: int = 1
    # SEED: target rarity tier
    rarity: Rarity | None = None

    @staticmethod
    def coins(weight: float, min_amount: int, max_amount: int) -> LootEntry:
        return LootEntry(LootKind.COINS, weight, min_amount=min_amount, max_amount=max_amount)

    @staticmethod
    def material(weight: float, material_id: str, amount: int = 1) -> LootEntry:
        return LootEntry(LootKind.MATERIAL, weight, material_id=material_id, amount=amount)

    @staticmethod
    def seed(weight: float, rarity: Rarity) -> LootEntry:
        return LootEntry(LootKind.SEED, weight, rarity=rarity)


# ~94% coins, ~5% materials, ~1% seeds before modifiers
DEFAULT_LOOT_TABLE: tuple[LootEntry, ...] = (
    LootEntry.coins(94.0, 1, 2),
    LootEntry.material(2.5, "bark_chip"),
    LootEntry.material(1.75, "latex_lump"),
    LootEntry.material(0.75, "fertilizer"),
    LootEntry.seed(0.55, Rarity.COMMON),
    LootEntry.seed(0.25, Rarity.UNCOMMON),
    LootEntry.seed(0.12, Rarity.RARE),
    LootEntry.seed(0.06, Rarity.EPIC),
    LootEntry.seed(0.02, Rarity.LEGENDARY),
)
