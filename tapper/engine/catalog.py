"""Catalog — read-only game content, loaded once before the engine is used."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from tapper.data.achievements import ALL_ACHIEVEMENTS, AchievementDef, AchievementKind
from tapper.data.balance import BALANCE
from tapper.data.daily_rewards import DAILY_REWARDS, DailyReward, DailyRewardKind
from tapper.data.loot import DEFAULT_LOOT_TABLE, LootEntry, LootKind
from tapper.data.materials import ALL_MATERIALS, MaterialDef
from tapper.data.species import ALL_SPECIES, ObjectAttribute, Rarity, SpeciesDef
from tapper.data.upgrades import ALL_UPGRADES, UpgradeDef, UpgradeEffect
from tapper.engine.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class Catalog:
    """Complete static content the engine reads from."""

    species: dict[str, SpeciesDef] = field(default_factory=dict)
    materials: dict[str, MaterialDef] = field(default_factory=dict)
    loot_table: tuple[LootEntry, ...] = ()
    upgrades: dict[str, UpgradeDef] = field(default_factory=dict)
    achievements: dict[str, AchievementDef] = field(default_factory=dict)
    daily_rewards: tuple[DailyReward, ...] = ()

    def species_with_rarity(self, rarity: Rarity) -> list[SpeciesDef]:
        return [s for s in self.species.values() if s.rarity == rarity]

    def validate(self) -> list[str]:
        """Check for content errors. Returns list of error messages."""
        errors: list[str] = []

        if not self.loot_table:
            errors.append("Loot table is empty")
        total_weight = 0.0
        for i, entry in enumerate(self.loot_table):
            if entry.weight < 0:
                errors.append(f"Loot entry {i} has negative weight {entry.weight}")
            total_weight += max(0.0, entry.weight)
            if entry.kind == LootKind.COINS:
                if entry.min_amount < 0 or entry.max_amount < entry.min_amount:
                    errors.append(
                        f"Loot entry {i} has bad coin range "
                        f"{entry.min_amount}..{entry.max_amount}"
                    )
            elif entry.kind == LootKind.MATERIAL:
                if entry.material_id not in self.materials:
                    errors.append(
                        f"Loot entry {i} references unknown material {entry.material_id!r}"
                    )
                if entry.amount < 1:
                    errors.append(f"Loot entry {i} has non-positive amount {entry.amount}")
            elif entry.kind == LootKind.SEED:
                if entry.rarity is None:
                    errors.append(f"Loot entry {i} is a seed without a rarity")
        if self.loot_table and total_weight <= 0:
            errors.append("Loot table has no positive weight")

        for s in self.species.values():
            if s.growth_rate <= 0 or s.base_exp_per_level <= 0:
                errors.append(f"Species {s.id!r} has a non-positive XP curve")
            for mat_id in s.base_materials_needed:
                if mat_id not in self.materials:
                    errors.append(
                        f"Species {s.id!r} needs unknown material {mat_id!r}"
                    )

        for u in self.upgrades.values():
            if u.max_level < 1:
                errors.append(f"Upgrade {u.id!r} has max_level < 1")

        days = [r.day for r in self.daily_rewards]
        if days != list(range(1, len(days) + 1)):
            errors.append(
                f"Daily rewards must cover days 1..{len(days)} in order, got {days}"
            )
        for r in self.daily_rewards:
            if r.kind == DailyRewardKind.MATERIAL and r.material_id not in self.materials:
                errors.append(
                    f"Daily reward day {r.day} references unknown material {r.material_id!r}"
                )
            elif r.kind == DailyRewardKind.SEED and r.rarity is None:
                errors.append(f"Daily reward day {r.day} is a seed without a rarity")
            elif r.kind != DailyRewardKind.SEED and r.amount < 1:
                errors.append(f"Daily reward day {r.day} has non-positive amount {r.amount}")

        return errors


def default_catalog() -> Catalog:
    """Catalog built from the bundled ``tapper.data`` modules."""
    return Catalog(
        species=dict(ALL_SPECIES),
        materials=dict(ALL_MATERIALS),
        loot_table=tuple(DEFAULT_LOOT_TABLE),
        upgrades=dict(ALL_UPGRADES),
        achievements=dict(ALL_ACHIEVEMENTS),
        daily_rewards=tuple(DAILY_REWARDS),
    )


# ── JSON loading ─────────────────────────────────────────────────


def _parse_species(d: dict) -> SpeciesDef:
    bal = BALANCE.plantation
    return SpeciesDef(
        id=d["id"],
        name=d.get("name", d["id"]),
        rarity=Rarity(d.get("rarity", "common")),
        base_exp_per_level=d.get("base_exp_per_level", bal.default_base_exp_per_level),
        growth_rate=d.get("growth_rate", bal.default_growth_rate),
        max_level=d.get("max_level", bal.default_max_level),
        base_growth_hours=d.get("base_growth_hours", bal.default_growth_hours),
        base_materials_needed=dict(d.get("base_materials_needed", {})),
        base_attributes={
            ObjectAttribute(k): v for k, v in d.get("base_attributes", {}).items()
        },
    )


def _parse_loot(d: dict) -> LootEntry:
    kind = LootKind[d["kind"].upper()]
    weight = float(d["weight"])
    if kind == LootKind.COINS:
        return LootEntry.coins(weight, d.get("min_amount", 1), d.get("max_amount", 1))
    if kind == LootKind.MATERIAL:
        return LootEntry.material(weight, d["material_id"], d.get("amount", 1))
    return LootEntry.seed(weight, Rarity(d["rarity"]))


def _parse_upgrade(d: dict) -> UpgradeDef:
    return UpgradeDef(
        id=d["id"],
        name=d.get("name", d["id"]),
        description=d.get("description", ""),
        effect=UpgradeEffect[d["effect"].upper()],
        value_per_level=d["value_per_level"],
        base_cost=d["base_cost"],
        cost_multiplier=d.get("cost_multiplier", 1.5),
        max_level=d.get("max_level", 10),
    )


def _parse_achievement(d: dict) -> AchievementDef:
    return AchievementDef(
        id=d["id"],
        title=d.get("title", d["id"]),
        description=d.get("description", ""),
        kind=AchievementKind[d["kind"].upper()],
        target=d["target"],
        coin_reward=d.get("coin_reward", 0),
    )


def _parse_daily_reward(d: dict) -> DailyReward:
    return DailyReward(
        day=d["day"],
        kind=DailyRewardKind[d["kind"].upper()],
        amount=d.get("amount", 1),
        material_id=d.get("material_id", ""),
        rarity=Rarity(d["rarity"]) if "rarity" in d else None,
    )


def _catalog_from_dict(data: dict) -> Catalog:
    base = default_catalog()
    catalog = Catalog(
        species={s.id: s for s in map(_parse_species, data["species"])},
        materials=base.materials,
        loot_table=tuple(_parse_loot(e) for e in data["loot_table"]),
        upgrades=base.upgrades,
        achievements=base.achievements,
        daily_rewards=base.daily_rewards,
    )
    if "materials" in data:
        catalog.materials = {
            m["id"]: MaterialDef(m["id"], m.get("name", m["id"]), m.get("description", ""))
            for m in data["materials"]
        }
    if "upgrades" in data:
        catalog.upgrades = {u.id: u for u in map(_parse_upgrade, data["upgrades"])}
    if "achievements" in data:
        catalog.achievements = {
            a.id: a for a in map(_parse_achievement, data["achievements"])
        }
    if "daily_rewards" in data:
        catalog.daily_rewards = tuple(map(_parse_daily_reward, data["daily_rewards"]))
    return catalog


def load_catalog(path: Path | str | None = None) -> Catalog:
    """Load and validate the catalog.

    With no *path* the bundled content is used.  Raises
    :class:`CatalogUnavailableError` if the file can't be read or parsed, or
    if the content fails validation.
    """
    if path is None:
        catalog = default_catalog()
    else:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            catalog = _catalog_from_dict(data)
        except FileNotFoundError as exc:
            raise CatalogUnavailableError(f"Catalog file not found: {path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise CatalogUnavailableError(f"Catalog file unreadable: {path}: {exc}") from exc
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise CatalogUnavailableError(f"Catalog file malformed: {path}: {exc!r}") from exc

    errors = catalog.validate()
    if errors:
        raise CatalogUnavailableError(
            "Invalid catalog:\n" + "\n".join(f"  - {e}" for e in errors)
        )
    logger.debug(
        "Catalog loaded: %d species, %d materials, %d loot entries",
        len(catalog.species), len(catalog.materials), len(catalog.loot_table),
    )
    return catalog
