"""Daily login reward — one claim per calendar day along a streak track.

Logging in on consecutive days walks the track (day 1, 2, ... N); a missed
day or the end of the track starts again at day 1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from tapper.data.daily_rewards import DailyReward, DailyRewardKind
from tapper.engine import save
from tapper.engine.context import GameContext
from tapper.engine.events import DailyRewardClaimed
from tapper.engine.game_state import OwnedObject
from tapper.engine.progression import grant_coins
from tapper.engine.rewards import COINS_KEY, add_seed, seed_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyClaim:
    """What one claimed login reward paid out."""

    day: int
    reward: DailyReward
    # "coins", a material id, "<species>_seed", or "" if the seed was discarded
    key: str
    amount: int
    owned_object: OwnedObject | None = None


def _today(ctx: GameContext) -> date:
    return datetime.fromtimestamp(ctx.clock()).date()


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        logger.warning("Ignoring unreadable last login date %r", value)
        return None


def pending_login_day(ctx: GameContext, today: date | None = None) -> int | None:
    """Track day claimable *today*, or None if today's reward was already taken."""
    track = ctx.require_catalog().daily_rewards
    if not track:
        return None
    today = today or _today(ctx)
    login = ctx.player.login
    last = _parse_date(login.last_login_date)
    if last == today:
        return None

    day = login.login_streak + 1 if last == today - timedelta(days=1) else 1
    if day > len(track):
        day = 1
    return day


def _pay(ctx: GameContext, reward: DailyReward) -> tuple[str, int, OwnedObject | None]:
    if reward.kind == DailyRewardKind.COINS:
        return COINS_KEY, grant_coins(ctx, reward.amount), None
    if reward.kind == DailyRewardKind.MATERIAL:
        ctx.player.inventory.add_material(reward.material_id, reward.amount)
        ctx.commit(save.INVENTORY)
        return reward.material_id, reward.amount, None
    if reward.kind == DailyRewardKind.SEED:
        candidates = (
            ctx.require_catalog().species_with_rarity(reward.rarity) if reward.rarity else []
        )
        if not candidates:
            logger.debug("Daily seed at rarity %s has no species, discarded", reward.rarity)
            return "", 0, None
        obj = add_seed(ctx, ctx.rng.choice(candidates))
        return seed_key(obj.species_id), 1, obj
    raise ValueError(f"Unhandled daily reward kind: {reward.kind!r}")


def claim_daily_reward(ctx: GameContext, today: date | None = None) -> DailyClaim | None:
    """Pay today's login reward and advance the streak.

    Returns None when there is nothing to claim today.
    """
    today = today or _today(ctx)
    day = pending_login_day(ctx, today)
    if day is None:
        return None
    reward = ctx.require_catalog().daily_rewards[day - 1]

    key, amount, obj = _pay(ctx, reward)

    login = ctx.player.login
    login.last_login_date = today.isoformat()
    login.login_streak = day
    if day == 1:
        login.claimed_days = []
    login.claimed_days.append(day)
    ctx.commit(save.LOGIN)

    ctx.emit(DailyRewardClaimed(day=day, key=key, amount=amount))
    logger.info("Daily reward claimed: day %d (%s x%d)", day, key or "nothing", amount)
    return DailyClaim(day, reward, key, amount, obj)
