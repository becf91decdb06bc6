"""Tests for upgrade and active-object modifiers."""

import pytest

from tapper.data.species import ObjectAttribute, Rarity
from tapper.data.upgrades import UpgradeEffect
from tapper.engine.game_state import GrowthStage, OwnedObject
from tapper.engine.modifiers import (
    apply_upgrade_effect,
    material_drop_multiplier,
    record_bonus,
    seed_drop_multiplier,
    upgrade_total,
    xp_multiplier,
)


def test_no_upgrades_is_identity(ctx):
    for effect in UpgradeEffect:
        assert apply_upgrade_effect(ctx.player, ctx.catalog, effect, 10.0) == 10.0


def test_percent_effect_multiplies(ctx):
    ctx.player.upgrade_levels["keen_eye"] = 3
    assert material_drop_multiplier(ctx.player, ctx.catalog) == pytest.approx(1.3)


def test_flat_effect_adds(ctx):
    ctx.player.upgrade_levels["stopwatch"] = 2
    assert record_bonus(ctx.player, ctx.catalog, 25) == 45


def test_levels_above_max_are_capped(ctx):
    ctx.player.upgrade_levels["stopwatch"] = 99
    assert upgrade_total(ctx.player, ctx.catalog, UpgradeEffect.RECORD_BONUS_FLAT) == 50


def test_unknown_upgrade_ids_are_ignored(ctx):
    ctx.player.upgrade_levels["retired_upgrade"] = 4
    assert seed_drop_multiplier(ctx.player, ctx.catalog) == 1.0


def test_upgrade_and_active_object_stack(ctx):
    ctx.player.upgrade_levels["sharper_knife"] = 2
    ctx.player.inventory.owned_objects.append(
        OwnedObject(
            object_id="pb",
            species_id="pb_235",
            rarity=Rarity.RARE,
            growth_stage=GrowthStage.GROWN,
            special_attributes={ObjectAttribute.XP_GAIN: 0.10},
        )
    )
    ctx.player.inventory.active_object_id = "pb"
    assert xp_multiplier(ctx.player, ctx.catalog) == pytest.approx(1.1 * 1.1)
