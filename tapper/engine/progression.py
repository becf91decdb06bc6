"""Progression ledger — XP, levels, coins, personal records, and upgrades."""

from __future__ import annotations

import logging
import math

from tapper.data.species import SpeciesDef
from tapper.engine import save
from tapper.engine.context import GameContext
from tapper.engine.events import LevelUp, NewRecord, ObjectLevelUp
from tapper.engine.game_state import OwnedObject, PlayerState
from tapper.engine.catalog import Catalog
from tapper.engine.modifiers import (
    coin_multiplier,
    object_xp_multiplier,
    record_bonus,
    xp_multiplier,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest int with halves going up, so 0.5 XP is 1 XP."""
    return math.floor(value + 0.5)


def xp_required_for(level: int, base: float, exponent: float) -> int:
    """XP needed to advance from *level* to *level + 1*."""
    return max(1, round_half_up(base * math.pow(level, exponent)))


def player_xp_required(ctx: GameContext, level: int) -> int:
    bal = ctx.balance.progression
    return xp_required_for(level, bal.base_xp_per_level, bal.xp_exponent)


def object_xp_required(species: SpeciesDef, level: int) -> int:
    return xp_required_for(level, species.base_exp_per_level, species.growth_rate)


# ── Coins ────────────────────────────────────────────────────────


def grant_coins(ctx: GameContext, amount: float) -> int:
    """Add coins after yield modifiers.  Non-positive amounts are ignored.

    Returns the coins actually credited.
    """
    if amount <= 0:
        return 0
    catalog = ctx.require_catalog()
    final = round_half_up(amount * coin_multiplier(ctx.player, catalog))
    ctx.player.progression.currency += final
    ctx.commit(save.PROGRESSION)
    return final


def credit_coins(ctx: GameContext, amount: int) -> int:
    """Add a fixed coin reward as-is, bypassing yield modifiers."""
    if amount <= 0:
        return 0
    ctx.player.progression.currency += amount
    ctx.commit(save.PROGRESSION)
    return amount


# ── XP ───────────────────────────────────────────────────────────


def grant_xp(ctx: GameContext, amount: float) -> int:
    """Add boosted XP and cascade level-ups.  Returns levels gained.

    Every level crossed grants its own coin reward, so a multi-level jump
    pays out once per level.
    """
    if amount <= 0:
        return 0
    catalog = ctx.require_catalog()
    bal = ctx.balance.progression
    prog = ctx.player.progression

    prog.xp += round_half_up(amount * xp_multiplier(ctx.player, catalog))
    old_level = prog.level

    required = player_xp_required(ctx, prog.level)
    while prog.xp >= required:
        prog.xp -= required
        prog.level += 1
        coins = grant_coins(
            ctx, bal.level_up_base_coins + prog.level * bal.level_up_coins_per_level
        )
        ctx.emit(LevelUp(level=prog.level, coins=coins))
        logger.info("Level up -> %d (+%d coins)", prog.level, coins)
        required = player_xp_required(ctx, prog.level)

    ctx.commit(save.PROGRESSION)
    return prog.level - old_level


def grant_object_xp(ctx: GameContext, obj: OwnedObject, amount: float) -> int:
    """Add XP to an owned object along its species curve.  Returns levels gained.

    Leveling stops at the species' max level.
    """
    if amount <= 0:
        return 0
    catalog = ctx.require_catalog()
    species = catalog.species.get(obj.species_id)
    if species is None:
        logger.warning("Owned object %s has unknown species %r", obj.object_id, obj.species_id)
        return 0

    obj.xp += round_half_up(amount)
    old_level = obj.level
    required = object_xp_required(species, obj.level)
    while obj.level < species.max_level and obj.xp >= required:
        obj.xp -= required
        obj.level += 1
        ctx.emit(ObjectLevelUp(object_id=obj.object_id, level=obj.level))
        required = object_xp_required(species, obj.level)
    if obj.level >= species.max_level:
        obj.xp = min(obj.xp, required - 1)

    ctx.commit(save.INVENTORY)
    return obj.level - old_level


def boosted_object_xp(ctx: GameContext, amount: float) -> float:
    return amount * object_xp_multiplier(ctx.player, ctx.require_catalog())


# ── Records ──────────────────────────────────────────────────────


def record_best_time(ctx: GameContext, average: float, lap_durations: list[float]) -> int | None:
    """Store *average* if it strictly beats the best.  Returns the bonus paid, or None."""
    prog = ctx.player.progression
    if prog.best_average_lap_time is not None and not average < prog.best_average_lap_time:
        return None

    prog.best_average_lap_time = average
    prog.best_session_lap_times = list(lap_durations)
    ctx.commit(save.PROGRESSION)

    bonus = record_bonus(
        ctx.player, ctx.require_catalog(), ctx.balance.progression.record_bonus_coins
    )
    paid = grant_coins(ctx, bonus)
    ctx.emit(NewRecord(average_lap_time=average, bonus=paid))
    logger.info("New best average %.2fs (+%d coins)", average, paid)
    return paid


# ── Upgrades ─────────────────────────────────────────────────────


def get_upgrade_cost(player: PlayerState, catalog: Catalog, upgrade_id: str) -> int | None:
    """Cost of the next level, or None if unknown or maxed."""
    udef = catalog.upgrades.get(upgrade_id)
    if udef is None:
        return None
    level = player.upgrade_levels.get(upgrade_id, 0)
    if level >= udef.max_level:
        return None
    return math.floor(udef.base_cost * (udef.cost_multiplier ** level))


def purchase_upgrade(ctx: GameContext, upgrade_id: str) -> bool:
    """Buy one level of *upgrade_id*.  Returns True on success."""
    cost = get_upgrade_cost(ctx.player, ctx.require_catalog(), upgrade_id)
    if cost is None:
        return False
    prog = ctx.player.progression
    if prog.currency < cost:
        return False

    prog.currency -= cost
    ctx.player.upgrade_levels[upgrade_id] = ctx.player.upgrade_levels.get(upgrade_id, 0) + 1
    ctx.commit(save.PROGRESSION, save.UPGRADES)
    return True
