"""Reward resolver — one weighted loot draw per tap, applied to inventory."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from tapper.data.loot import LootEntry, LootKind
from tapper.data.species import SpeciesDef
from tapper.engine import save
from tapper.engine.context import GameContext
from tapper.engine.events import RareItemAcquired
from tapper.engine.game_state import GrowthStage, OwnedObject
from tapper.engine.modifiers import material_drop_multiplier, seed_drop_multiplier
from tapper.engine.progression import grant_coins

logger = logging.getLogger(__name__)

COINS_KEY = "coins"


@dataclass(frozen=True)
class RewardOutcome:
    """What a single tap produced."""

    kind: LootKind
    # Loot-tally key: "coins", a material id, or "<species>_seed"
    key: str
    amount: int
    owned_object: OwnedObject | None = None
    # A seed was drawn but no species exists at that rarity
    discarded: bool = False


def effective_weight(entry: LootEntry, material_mult: float = 1.0, seed_mult: float = 1.0) -> float:
    """Weight after drop-rate boosts.  Coin weights are never boosted."""
    if entry.kind == LootKind.MATERIAL:
        weight = entry.weight * material_mult
    elif entry.kind == LootKind.SEED:
        weight = entry.weight * seed_mult
    else:
        weight = entry.weight
    return max(0.0, weight)


def resolve_reward(
    table: Sequence[LootEntry],
    rng: random.Random,
    material_mult: float = 1.0,
    seed_mult: float = 1.0,
) -> LootEntry:
    """Pick exactly one entry with a single uniform draw over the boosted weights."""
    bands = [(e, effective_weight(e, material_mult, seed_mult)) for e in table]
    bands = [(e, w) for e, w in bands if w > 0]
    if not bands:
        raise ValueError("Loot table has no positive weight")

    draw = rng.random() * sum(w for _, w in bands)
    cumulative = 0.0
    for entry, weight in bands:
        cumulative += weight
        if draw < cumulative:
            return entry
    # Float rounding can leave draw a hair above the final cumulative sum
    return bands[-1][0]


def _new_object_id(rng: random.Random) -> str:
    return f"tree_{rng.getrandbits(48):012x}"


def seed_key(species_id: str) -> str:
    return f"{species_id}_seed"


def add_seed(ctx: GameContext, species: SpeciesDef) -> OwnedObject:
    """Give the player a new, unplanted seed of *species*, flagged as new."""
    obj = OwnedObject(
        object_id=_new_object_id(ctx.rng),
        species_id=species.id,
        rarity=species.rarity,
        level=1,
        xp=0,
        growth_stage=GrowthStage.SEED,
        special_attributes=dict(species.base_attributes),
        is_new=True,
    )
    ctx.player.inventory.owned_objects.append(obj)
    ctx.commit(save.INVENTORY)
    ctx.emit(RareItemAcquired(obj.object_id, species.id, species.rarity))
    logger.info("Seed found: %s (%s)", species.name, species.rarity.value)
    return obj


def apply_reward(ctx: GameContext, entry: LootEntry, loot: dict[str, int]) -> RewardOutcome:
    """Commit *entry* to persistent state and tally it into *loot*."""
    catalog = ctx.require_catalog()
    inv = ctx.player.inventory

    if entry.kind == LootKind.COINS:
        base = ctx.rng.randint(entry.min_amount, entry.max_amount)
        credited = grant_coins(ctx, base)
        if credited > 0:
            loot[COINS_KEY] = loot.get(COINS_KEY, 0) + credited
        return RewardOutcome(LootKind.COINS, COINS_KEY, credited)

    if entry.kind == LootKind.MATERIAL:
        inv.add_material(entry.material_id, entry.amount)
        ctx.commit(save.INVENTORY)
        loot[entry.material_id] = loot.get(entry.material_id, 0) + entry.amount
        return RewardOutcome(LootKind.MATERIAL, entry.material_id, entry.amount)

    candidates = catalog.species_with_rarity(entry.rarity) if entry.rarity else []
    if not candidates:
        logger.debug("Seed draw at rarity %s has no species, discarded", entry.rarity)
        return RewardOutcome(LootKind.SEED, "", 0, discarded=True)

    obj = add_seed(ctx, ctx.rng.choice(candidates))
    key = seed_key(obj.species_id)
    loot[key] = loot.get(key, 0) + 1
    return RewardOutcome(LootKind.SEED, key, 1, owned_object=obj)


def roll_tap_reward(ctx: GameContext, loot: dict[str, int]) -> RewardOutcome:
    """Resolve and apply the single reward for one completed tap."""
    catalog = ctx.require_catalog()
    entry = resolve_reward(
        catalog.loot_table,
        ctx.rng,
        material_mult=material_drop_multiplier(ctx.player, catalog),
        seed_mult=seed_drop_multiplier(ctx.player, catalog),
    )
    return apply_reward(ctx, entry, loot)
