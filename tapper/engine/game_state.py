"""Persisted player state — everything that survives between sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from tapper.data.achievements import Comparison, MissionStat
from tapper.data.species import ObjectAttribute, Rarity


class GrowthStage(Enum):
    SEED = auto()
    SEEDLING = auto()
    GROWN = auto()


@dataclass
class ProgressionState:
    """Player level, XP, coins, and personal bests."""

    level: int = 1
    xp: int = 0
    currency: int = 0
    lifetime_taps: int = 0
    best_average_lap_time: float | None = None
    # Lap sequence of the session that set best_average_lap_time
    best_session_lap_times: list[float] = field(default_factory=list)
    # Suggested average-lap goal, None until there is enough history
    goal_average_lap_time: float | None = None
    last_session_date: str | None = None


@dataclass
class CycleState:
    """Progress through one full real-world round (e.g. a whole plantation)."""

    # None until the first full cycle is logged, then fixed
    cycle_goal: int | None = None
    tapped_in_current_cycle: int = 0
    cycles_completed: int = 0


@dataclass
class SessionRecord:
    """One committed sub-session in the history."""

    date: str
    tapped_count: int
    total_duration: float
    average_lap_time: float
    lap_durations: list[float] = field(default_factory=list)
    insight: str = ""


@dataclass
class OwnedObject:
    """A collected tree with its own level / XP curve."""

    object_id: str
    species_id: str
    rarity: Rarity
    level: int = 1
    xp: int = 0
    growth_stage: GrowthStage = GrowthStage.SEED
    grows_at: float | None = None
    special_attributes: dict[ObjectAttribute, float] = field(default_factory=dict)
    # Freshly acquired; cleared once the UI has shown it
    is_new: bool = False


@dataclass
class Inventory:
    materials: dict[str, int] = field(default_factory=dict)
    owned_objects: list[OwnedObject] = field(default_factory=list)
    # At most one object is active at a time
    active_object_id: str | None = None

    def find(self, object_id: str | None) -> OwnedObject | None:
        if object_id is None:
            return None
        for obj in self.owned_objects:
            if obj.object_id == object_id:
                return obj
        return None

    @property
    def active_object(self) -> OwnedObject | None:
        return self.find(self.active_object_id)

    def add_material(self, material_id: str, amount: int) -> None:
        self.materials[material_id] = self.materials.get(material_id, 0) + amount


@dataclass
class Mission:
    """A daily mission.  Generation and wording are owned by a collaborator."""

    id: str
    key: MissionStat
    target: float
    reward: int
    comparison: Comparison = Comparison.MORE
    text: str = ""
    progress: float = 0.0
    completed: bool = False


@dataclass
class LoginState:
    """Progress along the daily login reward track."""

    # ISO date of the last claimed reward
    last_login_date: str | None = None
    login_streak: int = 0
    # Track days claimed since the track last restarted at day 1
    claimed_days: list[int] = field(default_factory=list)


@dataclass
class PlayerState:
    """Complete persisted state for one player."""

    progression: ProgressionState = field(default_factory=ProgressionState)
    cycle: CycleState = field(default_factory=CycleState)
    session_history: list[SessionRecord] = field(default_factory=list)
    inventory: Inventory = field(default_factory=Inventory)
    # Upgrades: id -> current level
    upgrade_levels: dict[str, int] = field(default_factory=dict)
    unlocked_achievements: list[str] = field(default_factory=list)
    missions: list[Mission] = field(default_factory=list)
    login: LoginState = field(default_factory=LoginState)

    def record_session(self, record: SessionRecord, cap: int) -> None:
        """Append to history, evicting the oldest records past *cap*."""
        self.session_history.append(record)
        overflow = len(self.session_history) - cap
        if overflow > 0:
            del self.session_history[:overflow]
