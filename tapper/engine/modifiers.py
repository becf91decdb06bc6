"""Modifiers — combine permanent upgrades and the active owned object.

Every multiplier the engine applies comes from here so that XP, coin, and
loot math agree on how bonuses stack.
"""

from __future__ import annotations

from tapper.data.species import ObjectAttribute
from tapper.data.upgrades import PERCENT_EFFECTS, UpgradeEffect
from tapper.engine.catalog import Catalog
from tapper.engine.game_state import PlayerState


def upgrade_total(player: PlayerState, catalog: Catalog, effect: UpgradeEffect) -> float:
    """Summed ``value_per_level * level`` of every owned upgrade with *effect*."""
    total = 0.0
    for uid, level in player.upgrade_levels.items():
        udef = catalog.upgrades.get(uid)
        if udef is None or level <= 0:
            continue
        if udef.effect == effect:
            total += udef.value_per_level * min(level, udef.max_level)
    return total


def apply_upgrade_effect(
    player: PlayerState, catalog: Catalog, effect: UpgradeEffect, base: float
) -> float:
    """Apply all upgrades of one effect kind to *base*."""
    total = upgrade_total(player, catalog, effect)
    if effect in PERCENT_EFFECTS:
        return base * (1.0 + total)
    if effect == UpgradeEffect.RECORD_BONUS_FLAT:
        return base + total
    raise ValueError(f"Unhandled upgrade effect: {effect!r}")


def active_attribute(player: PlayerState, attribute: ObjectAttribute) -> float:
    """The active owned object's value for *attribute*, 0.0 if none."""
    obj = player.inventory.active_object
    if obj is None:
        return 0.0
    return obj.special_attributes.get(attribute, 0.0)


# ── Derived multipliers ──────────────────────────────────────────


def xp_multiplier(player: PlayerState, catalog: Catalog) -> float:
    mult = apply_upgrade_effect(player, catalog, UpgradeEffect.XP_BOOST_PERCENT, 1.0)
    return mult * (1.0 + active_attribute(player, ObjectAttribute.XP_GAIN))


def coin_multiplier(player: PlayerState, catalog: Catalog) -> float:
    mult = apply_upgrade_effect(player, catalog, UpgradeEffect.COIN_YIELD_PERCENT, 1.0)
    return mult * (1.0 + active_attribute(player, ObjectAttribute.COIN_YIELD))


def material_drop_multiplier(player: PlayerState, catalog: Catalog) -> float:
    mult = apply_upgrade_effect(player, catalog, UpgradeEffect.MATERIAL_DROP_PERCENT, 1.0)
    return mult * (1.0 + active_attribute(player, ObjectAttribute.MATERIAL_DROP_RATE))


def seed_drop_multiplier(player: PlayerState, catalog: Catalog) -> float:
    return apply_upgrade_effect(player, catalog, UpgradeEffect.SEED_DROP_PERCENT, 1.0)


def object_xp_multiplier(player: PlayerState, catalog: Catalog) -> float:
    return apply_upgrade_effect(player, catalog, UpgradeEffect.OBJECT_XP_BOOST_PERCENT, 1.0)


def growth_speed_multiplier(player: PlayerState) -> float:
    return 1.0 + active_attribute(player, ObjectAttribute.GROWTH_RATE)


def record_bonus(player: PlayerState, catalog: Catalog, base: int) -> int:
    return round(apply_upgrade_effect(player, catalog, UpgradeEffect.RECORD_BONUS_FLAT, base))
