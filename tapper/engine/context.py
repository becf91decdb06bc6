"""Game context — the one object every engine operation works against.

Holds the persisted player state, the read-only catalog, the store that
state is written through, and the collected notifications.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field

from tapper.data.balance import BALANCE, GameBalance
from tapper.engine.catalog import Catalog
from tapper.engine.clock import Clock
from tapper.engine.errors import CatalogUnavailableError
from tapper.engine.events import Event
from tapper.engine.game_state import PlayerState
from tapper.engine.save import MemoryStore, Store, load_player, save_player


@dataclass
class GameContext:
    player: PlayerState
    catalog: Catalog | None
    store: Store = field(default_factory=MemoryStore)
    balance: GameBalance = BALANCE
    rng: random.Random = field(default_factory=random.Random)
    clock: Clock = time.time
    events: list[Event] = field(default_factory=list)

    @classmethod
    def open(
        cls,
        store: Store,
        catalog: Catalog | None,
        balance: GameBalance = BALANCE,
        rng: random.Random | None = None,
        clock: Clock = time.time,
    ) -> GameContext:
        """Load the player from *store* and wrap it in a context."""
        return cls(
            player=load_player(store),
            catalog=catalog,
            store=store,
            balance=balance,
            rng=rng if rng is not None else random.Random(),
            clock=clock,
        )

    def require_catalog(self) -> Catalog:
        if self.catalog is None:
            raise CatalogUnavailableError("No catalog loaded")
        return self.catalog

    def commit(self, *keys: str) -> None:
        """Write the named blobs through to the store before returning."""
        save_player(self.store, self.player, *keys)

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def drain_events(self) -> list[Event]:
        drained, self.events = self.events, []
        return drained
