"""Player save/load — persists state to a key/value store between sessions.

The engine only ever talks to a :class:`Store`.  Each top-level blob is
written under its own key so a tap only rewrites what it touched.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from tapper.data.achievements import Comparison, mission_stat
from tapper.data.species import ObjectAttribute, Rarity
from tapper.engine.game_state import (
    CycleState,
    GrowthStage,
    Inventory,
    LoginState,
    Mission,
    OwnedObject,
    PlayerState,
    ProgressionState,
    SessionRecord,
)

logger = logging.getLogger(__name__)

SAVE_DIR = Path.home() / ".tapper"
SAVE_FILE = SAVE_DIR / "save.json"

PROGRESSION = "progression"
CYCLE = "cycle"
HISTORY = "history"
INVENTORY = "inventory"
UPGRADES = "upgrades"
ACHIEVEMENTS = "achievements"
MISSIONS = "missions"
LOGIN = "login"

ALL_KEYS = (PROGRESSION, CYCLE, HISTORY, INVENTORY, UPGRADES, ACHIEVEMENTS, MISSIONS, LOGIN)


class Store(Protocol):
    """Trusted synchronous key/value surface."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """Dict-backed store, used by tests and throwaway sessions."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(data or {})

    def get(self, key: str) -> Any | None:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStore:
    """Single JSON document on disk, rewritten on every ``set``."""

    def __init__(self, path: Path | str = SAVE_FILE) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Unreadable save file %s (%s), starting fresh", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Save file %s is not a JSON object, starting fresh", self.path)
            return {}
        return data

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")


# ── Serialisation helpers ────────────────────────────────────────


def _progression_to_dict(p: ProgressionState) -> dict:
    return {
        "level": p.level,
        "xp": p.xp,
        "currency": p.currency,
        "lifetime_taps": p.lifetime_taps,
        "best_average_lap_time": p.best_average_lap_time,
        "best_session_lap_times": list(p.best_session_lap_times),
        "goal_average_lap_time": p.goal_average_lap_time,
        "last_session_date": p.last_session_date,
    }


def _dict_to_progression(d: dict) -> ProgressionState:
    return ProgressionState(
        level=max(1, int(d.get("level", 1))),
        xp=max(0, int(d.get("xp", 0))),
        currency=max(0, int(d.get("currency", 0))),
        lifetime_taps=int(d.get("lifetime_taps", 0)),
        best_average_lap_time=d.get("best_average_lap_time"),
        best_session_lap_times=list(d.get("best_session_lap_times", [])),
        goal_average_lap_time=d.get("goal_average_lap_time"),
        last_session_date=d.get("last_session_date"),
    )


def _cycle_to_dict(c: CycleState) -> dict:
    return {
        "cycle_goal": c.cycle_goal,
        "tapped_in_current_cycle": c.tapped_in_current_cycle,
        "cycles_completed": c.cycles_completed,
    }


def _dict_to_cycle(d: dict) -> CycleState:
    cycle = CycleState(
        cycle_goal=d.get("cycle_goal"),
        tapped_in_current_cycle=max(0, int(d.get("tapped_in_current_cycle", 0))),
        cycles_completed=int(d.get("cycles_completed", 0)),
    )
    if cycle.cycle_goal is not None and cycle.tapped_in_current_cycle >= cycle.cycle_goal:
        logger.warning(
            "Stored cycle progress %d >= goal %d, resetting",
            cycle.tapped_in_current_cycle, cycle.cycle_goal,
        )
        cycle.tapped_in_current_cycle = 0
    return cycle


def _record_to_dict(r: SessionRecord) -> dict:
    return {
        "date": r.date,
        "tapped_count": r.tapped_count,
        "total_duration": r.total_duration,
        "average_lap_time": r.average_lap_time,
        "lap_durations": list(r.lap_durations),
        "insight": r.insight,
    }


def _dict_to_record(d: dict) -> SessionRecord:
    return SessionRecord(
        date=d.get("date", ""),
        tapped_count=d.get("tapped_count", 0),
        total_duration=d.get("total_duration", 0.0),
        average_lap_time=d.get("average_lap_time", 0.0),
        lap_durations=list(d.get("lap_durations", [])),
        insight=d.get("insight", ""),
    )


def _object_to_dict(o: OwnedObject) -> dict:
    return {
        "object_id": o.object_id,
        "species_id": o.species_id,
        "rarity": o.rarity.value,
        "level": o.level,
        "xp": o.xp,
        "growth_stage": o.growth_stage.name,
        "grows_at": o.grows_at,
        "special_attributes": {k.value: v for k, v in o.special_attributes.items()},
        "is_new": o.is_new,
    }


def _dict_to_object(d: dict) -> OwnedObject:
    return OwnedObject(
        object_id=d["object_id"],
        species_id=d["species_id"],
        rarity=Rarity(d.get("rarity", "common")),
        level=d.get("level", 1),
        xp=d.get("xp", 0),
        growth_stage=GrowthStage[d.get("growth_stage", "SEED")],
        grows_at=d.get("grows_at"),
        special_attributes={
            ObjectAttribute(k): v for k, v in d.get("special_attributes", {}).items()
        },
        is_new=d.get("is_new", False),
    )


def _inventory_to_dict(inv: Inventory) -> dict:
    return {
        "materials": dict(inv.materials),
        "owned_objects": [_object_to_dict(o) for o in inv.owned_objects],
        "active_object_id": inv.active_object_id,
    }


def _dict_to_inventory(d: dict) -> Inventory:
    return Inventory(
        materials=dict(d.get("materials", {})),
        owned_objects=[_dict_to_object(o) for o in d.get("owned_objects", [])],
        active_object_id=d.get("active_object_id"),
    )


def _mission_to_dict(m: Mission) -> dict:
    return {
        "id": m.id,
        "key": m.key.value,
        "target": m.target,
        "reward": m.reward,
        "comparison": m.comparison.value,
        "text": m.text,
        "progress": m.progress,
        "completed": m.completed,
    }


def _dict_to_mission(d: dict) -> Mission:
    return Mission(
        id=d["id"],
        key=mission_stat(d["key"]),
        target=d["target"],
        reward=d.get("reward", 0),
        comparison=Comparison(d.get("comparison", "more")),
        text=d.get("text", ""),
        progress=d.get("progress", 0.0),
        completed=d.get("completed", False),
    )


def _login_to_dict(login: LoginState) -> dict:
    return {
        "last_login_date": login.last_login_date,
        "login_streak": login.login_streak,
        "claimed_days": list(login.claimed_days),
    }


def _dict_to_login(d: dict) -> LoginState:
    return LoginState(
        last_login_date=d.get("last_login_date"),
        login_streak=max(0, int(d.get("login_streak", 0))),
        claimed_days=[int(day) for day in d.get("claimed_days", [])],
    )


def _blob(player: PlayerState, key: str) -> Any:
    if key == PROGRESSION:
        return _progression_to_dict(player.progression)
    if key == CYCLE:
        return _cycle_to_dict(player.cycle)
    if key == HISTORY:
        return [_record_to_dict(r) for r in player.session_history]
    if key == INVENTORY:
        return _inventory_to_dict(player.inventory)
    if key == UPGRADES:
        return dict(player.upgrade_levels)
    if key == ACHIEVEMENTS:
        return list(player.unlocked_achievements)
    if key == MISSIONS:
        return [_mission_to_dict(m) for m in player.missions]
    if key == LOGIN:
        return _login_to_dict(player.login)
    raise KeyError(f"Unknown save key: {key!r}")


# ── Public API ───────────────────────────────────────────────────


def save_player(store: Store, player: PlayerState, *keys: str) -> None:
    """Write the given blobs (all of them when no key is given)."""
    for key in keys or ALL_KEYS:
        store.set(key, _blob(player, key))


def load_player(store: Store) -> PlayerState:
    """Load a player from *store*; missing or corrupt blobs load as defaults."""
    player = PlayerState()

    def _load(key: str, parse):
        raw = store.get(key)
        if raw is None:
            return None
        try:
            return parse(raw)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Corrupt %r blob in save (%s), using defaults", key, exc)
            return None

    progression = _load(PROGRESSION, _dict_to_progression)
    if progression is not None:
        player.progression = progression
    cycle = _load(CYCLE, _dict_to_cycle)
    if cycle is not None:
        player.cycle = cycle
    history = _load(HISTORY, lambda raw: [_dict_to_record(r) for r in raw])
    if history is not None:
        player.session_history = history
    inventory = _load(INVENTORY, _dict_to_inventory)
    if inventory is not None:
        player.inventory = inventory
    upgrades = _load(UPGRADES, lambda raw: {str(k): int(v) for k, v in raw.items()})
    if upgrades is not None:
        player.upgrade_levels = upgrades
    achievements = _load(ACHIEVEMENTS, lambda raw: [str(a) for a in raw])
    if achievements is not None:
        player.unlocked_achievements = achievements
    missions = _load(MISSIONS, lambda raw: [_dict_to_mission(m) for m in raw])
    if missions is not None:
        player.missions = missions
    login = _load(LOGIN, _dict_to_login)
    if login is not None:
        player.login = login

    return player
