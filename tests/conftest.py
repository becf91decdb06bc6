"""Shared fixtures: a controllable clock and an in-memory game context."""

from __future__ import annotations

import random

import pytest

from tapper.engine.catalog import default_catalog
from tapper.engine.context import GameContext
from tapper.engine.game_state import PlayerState
from tapper.engine.save import MemoryStore


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ctx(clock: FakeClock) -> GameContext:
    return GameContext(
        player=PlayerState(),
        catalog=default_catalog(),
        store=MemoryStore(),
        rng=random.Random(1234),
        clock=clock,
    )
