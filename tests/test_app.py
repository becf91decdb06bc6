"""Tests for the Textual front-end's key handling."""

import asyncio
import random

from tapper.app import TapperApp
from tapper.engine.catalog import default_catalog
from tapper.engine.save import MemoryStore
from tapper.engine.session import SessionPhase


def _run(app, keys):
    async def drive():
        async with app.run_test() as pilot:
            await keys(pilot)

    asyncio.run(drive())


def _app(clock) -> TapperApp:
    return TapperApp(MemoryStore(), default_catalog(), clock=clock, rng=random.Random(3))


def test_session_keys_while_idle_are_ignored(clock):
    app = _app(clock)

    async def keys(pilot):
        await pilot.press("space", "p", "e", "f")
        assert app._session.phase == SessionPhase.IDLE
        assert app._ctx.player.session_history == []

    _run(app, keys)


def test_tap_while_paused_keeps_lap_running(clock):
    app = _app(clock)

    async def keys(pilot):
        await pilot.press("n", "space", "p")
        await pilot.press("space")
        session = app._session
        assert session.phase == SessionPhase.TIMING
        assert session.state.timer.paused

        await pilot.press("p")
        clock.advance(30)
        await pilot.press("space")
        assert session.state.tapped_count == 1

        await pilot.press("n")
        assert session.active

        await pilot.press("e")
        assert session.phase == SessionPhase.IDLE
        assert len(app._ctx.player.session_history) == 1

    _run(app, keys)


def test_daily_key_claims_once(clock):
    app = _app(clock)

    async def keys(pilot):
        await pilot.press("d", "d")
        login = app._ctx.player.login
        assert login.login_streak == 1
        assert login.claimed_days == [1]
        assert app._ctx.events == []

    _run(app, keys)
