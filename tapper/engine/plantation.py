"""Plantation — planting, growing, activating, and upgrading owned trees."""

from __future__ import annotations

import logging
import math

from tapper.data.balance import BALANCE, PlantationBalance
from tapper.engine import save
from tapper.engine.catalog import Catalog
from tapper.engine.context import GameContext
from tapper.engine.game_state import GrowthStage, OwnedObject
from tapper.engine.modifiers import growth_speed_multiplier
from tapper.engine.progression import boosted_object_xp, grant_object_xp, object_xp_required

logger = logging.getLogger(__name__)

_HOUR = 3600.0


def set_active_object(ctx: GameContext, object_id: str | None) -> bool:
    """Make *object_id* the single active tree, or clear it with None.

    Only grown trees can be activated.
    """
    inv = ctx.player.inventory
    if object_id is None:
        inv.active_object_id = None
        ctx.commit(save.INVENTORY)
        return True

    obj = inv.find(object_id)
    if obj is None or obj.growth_stage != GrowthStage.GROWN:
        return False
    inv.active_object_id = obj.object_id
    ctx.commit(save.INVENTORY)
    logger.info("Active tree set to %s", obj.object_id)
    return True


def plant(ctx: GameContext, object_id: str) -> bool:
    """Plant a seed.  It becomes a seedling that is due to grow later."""
    catalog = ctx.require_catalog()
    obj = ctx.player.inventory.find(object_id)
    if obj is None or obj.growth_stage != GrowthStage.SEED:
        return False

    species = catalog.species.get(obj.species_id)
    hours = species.base_growth_hours if species else ctx.balance.plantation.default_growth_hours
    obj.growth_stage = GrowthStage.SEEDLING
    obj.grows_at = ctx.clock() + hours * _HOUR / growth_speed_multiplier(ctx.player)
    ctx.commit(save.INVENTORY)
    return True


def _growing_seedling(ctx: GameContext, object_id: str) -> OwnedObject | None:
    obj = ctx.player.inventory.find(object_id)
    if obj is None or obj.growth_stage != GrowthStage.SEEDLING or obj.grows_at is None:
        return None
    return obj


def water(ctx: GameContext, object_id: str) -> bool:
    obj = _growing_seedling(ctx, object_id)
    if obj is None:
        return False
    obj.grows_at -= ctx.balance.plantation.water_reduction_hours * _HOUR
    ctx.commit(save.INVENTORY)
    return True


def fertilize(ctx: GameContext, object_id: str) -> bool:
    """Spend one fertilizer to shorten a seedling's growth."""
    bal = ctx.balance.plantation
    inv = ctx.player.inventory
    obj = _growing_seedling(ctx, object_id)
    if obj is None:
        return False
    if inv.materials.get(bal.fertilizer_material, 0) < 1:
        return False

    inv.materials[bal.fertilizer_material] -= 1
    obj.grows_at -= bal.fertilize_reduction_hours * _HOUR
    ctx.commit(save.INVENTORY)
    return True


def check_growth(ctx: GameContext) -> list[OwnedObject]:
    """Promote every seedling whose time is up.  Returns the promoted trees."""
    now = ctx.clock()
    grown = []
    for obj in ctx.player.inventory.owned_objects:
        if obj.growth_stage != GrowthStage.SEEDLING:
            continue
        if obj.grows_at is not None and now >= obj.grows_at:
            obj.growth_stage = GrowthStage.GROWN
            obj.grows_at = None
            grown.append(obj)
    if grown:
        ctx.commit(save.INVENTORY)
        logger.info("%d seedling(s) fully grown", len(grown))
    return grown


def materials_needed(
    catalog: Catalog, obj: OwnedObject, bal: PlantationBalance = BALANCE.plantation
) -> dict[str, int]:
    """Materials the next upgrade costs.  Empty at max level."""
    species = catalog.species.get(obj.species_id)
    if species is None or obj.level >= species.max_level:
        return {}
    rarity_mult = dict(bal.rarity_material_mult).get(obj.rarity.value, 1.0)
    level_mult = species.growth_rate ** obj.level
    return {
        mid: math.ceil(base * rarity_mult * level_mult)
        for mid, base in species.base_materials_needed.items()
    }


def upgrade_object(ctx: GameContext, object_id: str) -> int | None:
    """Spend materials to feed a tree XP.  Returns levels gained, None if refused."""
    catalog = ctx.require_catalog()
    inv = ctx.player.inventory
    obj = inv.find(object_id)
    if obj is None:
        return None
    species = catalog.species.get(obj.species_id)
    if species is None or obj.level >= species.max_level:
        return None

    cost = materials_needed(catalog, obj, ctx.balance.plantation)
    if any(inv.materials.get(mid, 0) < amount for mid, amount in cost.items()):
        return None

    for mid, amount in cost.items():
        inv.materials[mid] -= amount
    ctx.commit(save.INVENTORY)

    amount = boosted_object_xp(ctx, object_xp_required(species, obj.level) / 2)
    return grant_object_xp(ctx, obj, amount)


def acknowledge_new(ctx: GameContext, object_id: str) -> None:
    obj = ctx.player.inventory.find(object_id)
    if obj is not None and obj.is_new:
        obj.is_new = False
        ctx.commit(save.INVENTORY)
