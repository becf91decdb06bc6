"""Tests for planting, growth, activation, and tree upgrades."""

import math

import pytest

from tapper.data.species import ALL_SPECIES, Rarity
from tapper.engine.game_state import GrowthStage, OwnedObject
from tapper.engine.modifiers import coin_multiplier
from tapper.engine.plantation import (
    acknowledge_new,
    check_growth,
    fertilize,
    materials_needed,
    plant,
    set_active_object,
    upgrade_object,
    water,
)
from tapper.engine.progression import object_xp_required

HOUR = 3600.0


def _add(ctx, object_id: str, species_id: str = "rrim_600", stage=GrowthStage.SEED, **kw) -> OwnedObject:
    species = ALL_SPECIES[species_id]
    obj = OwnedObject(
        object_id=object_id,
        species_id=species_id,
        rarity=species.rarity,
        growth_stage=stage,
        special_attributes=dict(species.base_attributes),
        **kw,
    )
    ctx.player.inventory.owned_objects.append(obj)
    return obj


# ── Growth ───────────────────────────────────────────────────────


def test_plant_then_grow(ctx, clock):
    obj = _add(ctx, "t1")
    assert plant(ctx, "t1")
    assert obj.growth_stage == GrowthStage.SEEDLING
    assert obj.grows_at == pytest.approx(clock.now + 8 * HOUR)

    clock.advance(8 * HOUR - 1)
    assert check_growth(ctx) == []
    clock.advance(1)
    assert check_growth(ctx) == [obj]
    assert obj.growth_stage == GrowthStage.GROWN
    assert obj.grows_at is None


def test_plant_only_seeds(ctx):
    _add(ctx, "t1", stage=GrowthStage.GROWN)
    assert not plant(ctx, "t1")
    assert not plant(ctx, "missing")


def test_active_growth_rate_speeds_planting(ctx, clock):
    golden = _add(ctx, "gold", "golden_hevea", stage=GrowthStage.GROWN)
    set_active_object(ctx, golden.object_id)
    seed = _add(ctx, "t1")
    plant(ctx, "t1")
    assert seed.grows_at == pytest.approx(clock.now + 8 * HOUR / 1.1)


def test_water_and_fertilize_shorten_growth(ctx, clock):
    obj = _add(ctx, "t1")
    plant(ctx, "t1")
    due = obj.grows_at

    assert water(ctx, "t1")
    assert obj.grows_at == pytest.approx(due - HOUR)

    assert not fertilize(ctx, "t1")
    ctx.player.inventory.materials["fertilizer"] = 1
    assert fertilize(ctx, "t1")
    assert obj.grows_at == pytest.approx(due - 1.5 * HOUR)
    assert ctx.player.inventory.materials["fertilizer"] == 0


def test_water_requires_seedling(ctx):
    _add(ctx, "t1")
    assert not water(ctx, "t1")


# ── Active object ────────────────────────────────────────────────


def test_only_grown_objects_can_be_active(ctx):
    _add(ctx, "seed")
    _add(ctx, "grown", "rrit_251", stage=GrowthStage.GROWN)
    assert not set_active_object(ctx, "seed")
    assert not set_active_object(ctx, "nope")
    assert set_active_object(ctx, "grown")
    assert ctx.player.inventory.active_object_id == "grown"
    assert ctx.store.data["inventory"]["active_object_id"] == "grown"


def test_switching_active_object_replaces_bonus(ctx):
    _add(ctx, "a", "rrit_251", stage=GrowthStage.GROWN)
    _add(ctx, "b", "rrim_600", stage=GrowthStage.GROWN)
    set_active_object(ctx, "a")
    assert coin_multiplier(ctx.player, ctx.catalog) == pytest.approx(1.05)
    set_active_object(ctx, "b")
    assert coin_multiplier(ctx.player, ctx.catalog) == pytest.approx(1.0)
    set_active_object(ctx, None)
    assert ctx.player.inventory.active_object is None


# ── Upgrades ─────────────────────────────────────────────────────


def test_materials_needed_scales_with_rarity_and_level(ctx):
    common = _add(ctx, "c", "rrim_600", stage=GrowthStage.GROWN, level=2)
    uncommon = _add(ctx, "u", "rrit_251", stage=GrowthStage.GROWN)
    assert materials_needed(ctx.catalog, common) == {"bark_chip": math.ceil(3 * 1.1 ** 2)}
    assert materials_needed(ctx.catalog, uncommon) == {
        "bark_chip": math.ceil(3 * 1.3 * 1.15),
        "latex_lump": math.ceil(1 * 1.3 * 1.15),
    }


def test_materials_needed_empty_at_max_level(ctx):
    obj = _add(ctx, "c", stage=GrowthStage.GROWN, level=10)
    assert materials_needed(ctx.catalog, obj) == {}


def test_upgrade_object_spends_materials_and_grants_xp(ctx):
    obj = _add(ctx, "c", stage=GrowthStage.GROWN)
    ctx.player.inventory.materials["bark_chip"] = 10
    cost = materials_needed(ctx.catalog, obj)["bark_chip"]

    assert upgrade_object(ctx, "c") == 0
    assert ctx.player.inventory.materials["bark_chip"] == 10 - cost
    assert obj.xp == round(object_xp_required(ALL_SPECIES["rrim_600"], 1) / 2)


def test_upgrade_object_refused_without_materials(ctx):
    obj = _add(ctx, "c", stage=GrowthStage.GROWN)
    assert upgrade_object(ctx, "c") is None
    assert obj.xp == 0
    assert upgrade_object(ctx, "missing") is None


def test_two_upgrades_level_up(ctx):
    obj = _add(ctx, "c", stage=GrowthStage.GROWN)
    ctx.player.inventory.materials["bark_chip"] = 20
    upgrade_object(ctx, "c")
    assert upgrade_object(ctx, "c") == 1
    assert obj.level == 2


def test_acknowledge_new(ctx):
    obj = _add(ctx, "t1", is_new=True)
    acknowledge_new(ctx, "t1")
    assert not obj.is_new
    assert ctx.store.data["inventory"]["owned_objects"][0]["is_new"] is False


def test_rarity_enum_has_material_multiplier():
    from tapper.data.balance import BALANCE

    mults = dict(BALANCE.plantation.rarity_material_mult)
    assert all(r.value in mults for r in Rarity)
