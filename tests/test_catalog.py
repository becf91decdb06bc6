"""Tests for catalog loading and validation."""

import json

import pytest

from tapper.data.daily_rewards import DailyReward, DailyRewardKind
from tapper.data.loot import LootEntry, LootKind
from tapper.data.species import Rarity
from tapper.engine.catalog import Catalog, default_catalog, load_catalog
from tapper.engine.errors import CatalogUnavailableError


def _write(tmp_path, data) -> str:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(data))
    return str(path)


def _minimal() -> dict:
    return {
        "species": [
            {
                "id": "clone_a",
                "name": "Clone A",
                "rarity": "common",
                "base_materials_needed": {"bark_chip": 2},
                "base_attributes": {"xp_gain": 0.1},
            }
        ],
        "loot_table": [
            {"kind": "coins", "weight": 90, "min_amount": 1, "max_amount": 3},
            {"kind": "material", "weight": 9, "material_id": "bark_chip"},
            {"kind": "seed", "weight": 1, "rarity": "common"},
        ],
    }


def test_bundled_catalog_is_valid():
    assert default_catalog().validate() == []
    assert load_catalog().species


def test_bundled_catalog_has_no_legendary_species():
    assert default_catalog().species_with_rarity(Rarity.LEGENDARY) == []


def test_load_from_json(tmp_path):
    catalog = load_catalog(_write(tmp_path, _minimal()))
    assert list(catalog.species) == ["clone_a"]
    assert catalog.species["clone_a"].max_level == 10
    assert [e.kind for e in catalog.loot_table] == [LootKind.COINS, LootKind.MATERIAL, LootKind.SEED]
    # Sections left out fall back to the bundled content
    assert "sharper_knife" in catalog.upgrades
    assert "bark_chip" in catalog.materials


def test_missing_file_is_unavailable(tmp_path):
    with pytest.raises(CatalogUnavailableError):
        load_catalog(tmp_path / "nope.json")


def test_bad_json_is_unavailable(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text("{oops")
    with pytest.raises(CatalogUnavailableError):
        load_catalog(path)


def test_missing_section_is_unavailable(tmp_path):
    data = _minimal()
    del data["loot_table"]
    with pytest.raises(CatalogUnavailableError):
        load_catalog(_write(tmp_path, data))


def test_unknown_material_fails_validation(tmp_path):
    data = _minimal()
    data["loot_table"][1]["material_id"] = "unobtainium"
    with pytest.raises(CatalogUnavailableError, match="unobtainium"):
        load_catalog(_write(tmp_path, data))


def test_validate_reports_problems():
    catalog = Catalog(
        loot_table=(
            LootEntry.coins(-1, 5, 2),
            LootEntry(LootKind.SEED, 0),
        ),
    )
    errors = catalog.validate()
    assert any("negative weight" in e for e in errors)
    assert any("coin range" in e for e in errors)
    assert any("without a rarity" in e for e in errors)
    assert any("no positive weight" in e for e in errors)


def test_empty_loot_table_is_invalid():
    assert "Loot table is empty" in Catalog().validate()


def test_daily_rewards_load_from_json(tmp_path):
    data = _minimal()
    data["daily_rewards"] = [
        {"day": 1, "kind": "coins", "amount": 40},
        {"day": 2, "kind": "seed", "rarity": "rare"},
    ]
    catalog = load_catalog(_write(tmp_path, data))
    assert catalog.daily_rewards == (
        DailyReward(1, DailyRewardKind.COINS, 40),
        DailyReward(2, DailyRewardKind.SEED, rarity=Rarity.RARE),
    )


def test_validate_reports_daily_reward_problems():
    catalog = default_catalog()
    catalog.daily_rewards = (
        DailyReward(1, DailyRewardKind.MATERIAL, 2, material_id="unobtainium"),
        DailyReward(3, DailyRewardKind.SEED),
    )
    errors = catalog.validate()
    assert any("days 1..2" in e for e in errors)
    assert any("unobtainium" in e for e in errors)
    assert any("seed without a rarity" in e for e in errors)
