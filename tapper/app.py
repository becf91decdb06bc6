"""Rubber Tapper's Log — Main Textual Application.

Wires the tapping engine into a terminal front-end.  The app owns no game
rules: every key maps to one engine call, and the 1-second refresh timer
only reads :meth:`TappingSession.snapshot`.
"""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.timer import Timer
from textual.widgets import Footer, Header

from tapper.data.balance import BALANCE
from tapper.engine.analysis import suggest_tap_count
from tapper.engine.catalog import Catalog
from tapper.engine.clock import Clock
from tapper.engine.context import GameContext
from tapper.engine.daily import claim_daily_reward, pending_login_day
from tapper.engine.errors import IllegalTransitionError
from tapper.engine.events import (
    AchievementUnlocked,
    CycleCompleted,
    CycleGoalSet,
    DailyRewardClaimed,
    Event,
    LevelUp,
    MissionCompleted,
    NewRecord,
    ObjectLevelUp,
    RareItemAcquired,
)
from tapper.engine.plantation import check_growth
from tapper.engine.progression import purchase_upgrade
from tapper.engine.save import Store
from tapper.engine.session import SessionPhase, SessionSummary, TappingSession
from tapper.ui.hud import SessionHUD
from tapper.ui.profile_panel import ProfilePanel

logger = logging.getLogger(__name__)

CSS_PATH = Path(__file__).parent / "ui" / "styles.tcss"


class TapperApp(App):
    """The Rubber Tapper's Log TUI."""

    TITLE = "Rubber Tapper's Log"
    SUB_TITLE = "Tap. Time. Grow."
    CSS_PATH = CSS_PATH

    BINDINGS = [
        Binding("space", "tap", "Tap", show=True, priority=True),
        Binding("p", "toggle_pause", "Pause", show=True),
        Binding("e", "end_session", "End", show=True),
        Binding("f", "end_full_cycle", "End Full Cycle", show=True),
        Binding("n", "new_session", "New Session", show=True),
        Binding("d", "claim_daily", "Daily Reward", show=True),
        Binding("1", "buy_upgrade(0)", "Buy #1", show=False),
        Binding("2", "buy_upgrade(1)", "Buy #2", show=False),
        Binding("3", "buy_upgrade(2)", "Buy #3", show=False),
        Binding("4", "buy_upgrade(3)", "Buy #4", show=False),
        Binding("5", "buy_upgrade(4)", "Buy #5", show=False),
        Binding("6", "buy_upgrade(5)", "Buy #6", show=False),
        Binding("q", "quit_game", "Quit", show=True),
    ]

    def __init__(
        self,
        store: Store,
        catalog: Catalog,
        clock: Clock = time.time,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__()
        self._ctx = GameContext.open(store, catalog, rng=rng, clock=clock)
        self._session = TappingSession(self._ctx)
        self._refresh_timer: Timer | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="game-container"):
            yield SessionHUD(id="hud-panel")
            yield ProfilePanel(id="profile-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Start the display refresh timer."""
        self._refresh_timer = self.set_interval(BALANCE.session.timer_interval_s, self._tick)
        self._tick()
        day = pending_login_day(self._ctx)
        if day is not None:
            self.notify(f"🎁 Day {day} login reward ready. Press [D] to claim.", timeout=5)

    def _tick(self) -> None:
        for obj in check_growth(self._ctx):
            self.notify(f"🌳 {obj.species_id} is fully grown!", severity="information", timeout=3)
        self._sync_ui()

    def _sync_ui(self) -> None:
        """Push engine state to all widgets."""
        hud = self.query_one("#hud-panel", SessionHUD)
        hud.update_from_snapshot(self._session.snapshot())

        profile = self.query_one("#profile-panel", ProfilePanel)
        profile.update_from_state(self._ctx.player, self._ctx.require_catalog())

    # ── Notifications ────────────────────────────────

    def _announce(self, events: list[Event]) -> None:
        for event in events:
            if isinstance(event, LevelUp):
                self.notify(f"⬆ Level {event.level}! +{event.coins} coins", severity="warning", timeout=3)
            elif isinstance(event, NewRecord):
                self.notify(
                    f"🏆 New record: {event.average_lap_time:.2f}s per tree! +{event.bonus} coins",
                    severity="warning", timeout=4,
                )
            elif isinstance(event, AchievementUnlocked):
                title = self._ctx.require_catalog().achievements[event.achievement_id].title
                self.notify(f"✦ Unlocked: {title}  +{event.reward} coins", severity="warning", timeout=4)
            elif isinstance(event, MissionCompleted):
                self.notify(f"✓ Mission complete! +{event.reward} coins", severity="information", timeout=3)
            elif isinstance(event, RareItemAcquired):
                self.notify(
                    f"🌱 Found a {event.rarity.value} seed: {event.species_id}!",
                    severity="warning", timeout=3,
                )
            elif isinstance(event, ObjectLevelUp):
                self.notify(f"Tree leveled up to {event.level}", severity="information", timeout=2)
            elif isinstance(event, CycleGoalSet):
                self.notify(f"Plantation size saved: {event.cycle_goal} trees", severity="information", timeout=3)
            elif isinstance(event, DailyRewardClaimed):
                got = f"{event.amount} {event.key}" if event.key else "nothing this time"
                self.notify(f"🎁 Day {event.day} reward: {got}", severity="information", timeout=3)
            elif isinstance(event, CycleCompleted):
                self.notify(
                    f"🎉 Full round complete! ({event.cycles_completed} so far)",
                    severity="warning", timeout=4,
                )

    def _show_summary(self, summary: SessionSummary) -> None:
        rec = summary.record
        lines = [f"{rec.tapped_count} trees in {rec.total_duration:.0f}s, {rec.average_lap_time:.2f}s each"]
        if summary.pacing is not None:
            lines.append(summary.pacing.text)
        if rec.insight:
            lines.append(rec.insight)
        self.notify("\n".join(lines), title="Session complete", timeout=8)
        self._announce(summary.events)

    # ── Actions ──────────────────────────────────────

    def _reject_key(self) -> None:
        """Explain why a key press did nothing."""
        session = self._session
        if session.phase == SessionPhase.IDLE:
            self.notify("Press [N] to start a session.", severity="error", timeout=1)
        elif session.state.timer.paused:
            self.notify("Paused — press [P] to resume.", severity="error", timeout=1)

    def action_tap(self) -> None:
        """Begin or finish the current tree."""
        session = self._session
        try:
            if session.phase == SessionPhase.TIMING:
                result = session.complete_tap()
            else:
                session.begin_tap()
                result = None
        except IllegalTransitionError:
            self._reject_key()
            return

        if result is not None:
            self._announce(result.events)
            if result.summary is not None:
                self._show_summary(result.summary)
        self._sync_ui()

    def action_toggle_pause(self) -> None:
        session = self._session
        try:
            if session.state.timer.paused:
                session.resume()
            else:
                session.pause()
        except IllegalTransitionError:
            self._reject_key()
            return
        self._sync_ui()

    def _end(self, full_cycle: bool) -> None:
        try:
            summary = self._session.end_session(full_cycle=full_cycle)
        except IllegalTransitionError:
            self._reject_key()
            return
        if summary is None:
            self.notify("No trees tapped — session discarded.", severity="information", timeout=2)
        else:
            self._show_summary(summary)
        self._sync_ui()

    def action_end_session(self) -> None:
        self._end(full_cycle=False)

    def action_end_full_cycle(self) -> None:
        self._end(full_cycle=True)

    def action_new_session(self) -> None:
        """Start a sub-session with the suggested tree count."""
        player = self._ctx.player
        goal = suggest_tap_count(player.session_history, player.cycle.cycle_goal)
        try:
            self._session.start_session(goal)
        except IllegalTransitionError:
            self.notify("A session is already running.", severity="error", timeout=1)
            return
        self.notify(f"Session started — goal {goal} trees", severity="information", timeout=2)
        self._sync_ui()

    def action_buy_upgrade(self, index: int) -> None:
        """Purchase the upgrade at shop position *index* (0-based)."""
        upgrades = list(self._ctx.require_catalog().upgrades.values())
        if index >= len(upgrades):
            return
        udef = upgrades[index]
        if purchase_upgrade(self._ctx, udef.id):
            self.notify(f"Upgraded {udef.name}!", severity="information", timeout=1)
        else:
            self.notify("Can't buy that upgrade.", severity="error", timeout=1)
        self._sync_ui()

    def action_claim_daily(self) -> None:
        if claim_daily_reward(self._ctx) is None:
            self.notify("Come back tomorrow for the next reward.", severity="error", timeout=2)
            return
        self._announce(self._ctx.drain_events())
        self._sync_ui()

    def action_quit_game(self) -> None:
        """Quit.  An unfinished sub-session is lost; its taps are already saved."""
        if self._session.active:
            logger.info("Quitting with an active session (%d taps)", self._session.state.tapped_count)
        self.exit()
