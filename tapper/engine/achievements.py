"""Achievement and mission checks, run once per committed sub-session."""

from __future__ import annotations

import logging

from tapper.data.achievements import (
    AchievementDef,
    AchievementKind,
    Comparison,
    PlayerStat,
    SessionStat,
)
from tapper.data.species import Rarity
from tapper.engine import save
from tapper.engine.context import GameContext
from tapper.engine.events import AchievementUnlocked, MissionCompleted
from tapper.engine.game_state import Mission, PlayerState, SessionRecord
from tapper.engine.progression import credit_coins, grant_coins

logger = logging.getLogger(__name__)


def stat_value(record: SessionRecord, stat: SessionStat) -> float:
    if stat == SessionStat.TAPPED_COUNT:
        return record.tapped_count
    if stat == SessionStat.AVERAGE_LAP_TIME:
        return record.average_lap_time
    if stat == SessionStat.TOTAL_DURATION:
        return record.total_duration
    raise ValueError(f"Unhandled session stat: {stat!r}")


def player_stat_value(player: PlayerState, stat: PlayerStat) -> float:
    if stat == PlayerStat.LIFETIME_TAPS:
        return player.progression.lifetime_taps
    if stat == PlayerStat.RARE_OBJECTS:
        return sum(1 for o in player.inventory.owned_objects if o.rarity == Rarity.RARE)
    raise ValueError(f"Unhandled player stat: {stat!r}")


def achievement_met(adef: AchievementDef, lifetime_taps: int, record: SessionRecord) -> bool:
    if adef.kind == AchievementKind.LIFETIME_TAPS:
        return lifetime_taps >= adef.target
    if adef.kind == AchievementKind.SPEED:
        return record.average_lap_time < adef.target
    if adef.kind == AchievementKind.SESSION_TAPS:
        return record.tapped_count >= adef.target
    raise ValueError(f"Unhandled achievement kind: {adef.kind!r}")


def evaluate_achievements(ctx: GameContext, record: SessionRecord) -> list[str]:
    """Unlock every achievement the session just earned.  Returns their ids."""
    catalog = ctx.require_catalog()
    player = ctx.player
    unlocked: list[str] = []

    for adef in catalog.achievements.values():
        if adef.id in player.unlocked_achievements:
            continue
        if not achievement_met(adef, player.progression.lifetime_taps, record):
            continue
        player.unlocked_achievements.append(adef.id)
        paid = grant_coins(ctx, adef.coin_reward)
        ctx.emit(AchievementUnlocked(achievement_id=adef.id, reward=paid))
        logger.info("Achievement unlocked: %s", adef.title)
        unlocked.append(adef.id)

    if unlocked:
        ctx.commit(save.ACHIEVEMENTS)
    return unlocked


def mission_met(mission: Mission, value: float) -> bool:
    if mission.comparison == Comparison.LESS:
        return value < mission.target
    return value >= mission.target


def evaluate_missions(ctx: GameContext, record: SessionRecord) -> list[str]:
    """Update mission progress from one session.  Returns newly completed ids.

    Session missions read *record*; cumulative ones read the player as it
    stands after the session was committed.
    """
    completed: list[str] = []
    for mission in ctx.player.missions:
        if mission.completed:
            continue
        if isinstance(mission.key, PlayerStat):
            value = player_stat_value(ctx.player, mission.key)
        else:
            value = stat_value(record, mission.key)
        if mission_met(mission, value):
            mission.completed = True
            mission.progress = mission.target
            paid = credit_coins(ctx, mission.reward)
            ctx.emit(MissionCompleted(mission_id=mission.id, reward=paid))
            logger.info("Mission complete: %s", mission.id)
            completed.append(mission.id)
        else:
            mission.progress = min(value, mission.target)

    if ctx.player.missions:
        ctx.commit(save.MISSIONS)
    return completed
