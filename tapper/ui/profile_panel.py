"""Profile panel — level, coins, personal bests, and the upgrade shop."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from tapper.data.balance import BALANCE
from tapper.data.upgrades import PERCENT_EFFECTS, UpgradeDef
from tapper.engine.analysis import calculate_streak, coach_tip, suggest_tap_count
from tapper.engine.catalog import Catalog
from tapper.engine.game_state import PlayerState
from tapper.engine.progression import get_upgrade_cost, xp_required_for


def _stat_summary(udef: UpgradeDef, level: int) -> str:
    """Current total effect of *udef* at *level*, empty when not owned."""
    if level <= 0:
        return ""
    v = udef.value_per_level * level
    if udef.effect in PERCENT_EFFECTS:
        return f"+{v * 100:.0f}% ({1.0 + v:.2f}×)"
    return f"+{v:.0f} coins per record"


class ProfilePanel(Widget):
    """Player progression summary and purchasable upgrades."""

    DEFAULT_CSS = """
    ProfilePanel {
        width: 100%;
        height: 100%;
        padding: 1;
        overflow-y: auto;
    }
    """

    # Serialized state for reactivity
    state_key: reactive[str] = reactive("")

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._player: PlayerState | None = None
        self._catalog: Catalog | None = None

    def render(self) -> Text:
        text = Text()
        player, catalog = self._player, self._catalog
        if player is None or catalog is None:
            text.append("  Loading...\n", style="dim italic")
            return text

        prog = player.progression
        bal = BALANCE.progression
        required = xp_required_for(prog.level, bal.base_xp_per_level, bal.xp_exponent)

        text.append("  ═══ Profile ═══\n\n", style="bold magenta")
        text.append("  Level: ", style="dim")
        text.append(f"{prog.level}", style="bold cyan")
        text.append(f"  ({prog.xp}/{required} XP)\n", style="dim")
        text.append("  Coins: ", style="dim")
        text.append(f"{prog.currency:,}\n", style="bold yellow")
        text.append("  Lifetime trees: ", style="dim")
        text.append(f"{prog.lifetime_taps:,}\n", style="white")
        text.append("  Streak: ", style="dim")
        text.append(f"{calculate_streak(player.session_history)} day(s)\n", style="white")
        text.append("  Login streak: ", style="dim")
        text.append(f"{player.login.login_streak} day(s)\n", style="white")

        best = prog.best_average_lap_time
        text.append("  Best average: ", style="dim")
        text.append(f"{best:.2f}s\n" if best is not None else "--\n", style="bold green")
        if prog.goal_average_lap_time is not None:
            text.append("  Goal average: ", style="dim")
            text.append(f"{prog.goal_average_lap_time:.1f}s\n", style="green")
        text.append("  Suggested goal: ", style="dim")
        suggested = suggest_tap_count(player.session_history, player.cycle.cycle_goal)
        text.append(f"{suggested} trees\n", style="white")

        tip = coach_tip(player.session_history, prog.goal_average_lap_time, best)
        text.append(f"  {tip}\n", style="italic cyan")

        text.append("\n  ═══ Upgrades ═══\n\n", style="bold magenta")
        for i, udef in enumerate(catalog.upgrades.values()):
            level = player.upgrade_levels.get(udef.id, 0)
            cost = get_upgrade_cost(player, catalog, udef.id)

            text.append(f"  [{i + 1}] ", style="bold")
            if cost is None:
                text.append(f"{udef.name} ", style="dim")
                text.append("MAX\n", style="bold green")
            else:
                affordable = prog.currency >= cost
                text.append(f"{udef.name} ", style="bold green" if affordable else "bold red")
                text.append(f"Lv.{level}\n", style="dim")

            text.append(f"      {udef.description}\n", style="dim italic")
            stat = _stat_summary(udef, level)
            if stat:
                text.append(f"      Now: {stat}\n", style="cyan")
            if cost is not None:
                style = "green" if prog.currency >= cost else "red"
                text.append(f"      Cost: {cost:,} coins\n", style=style)

        return text

    def update_from_state(self, player: PlayerState, catalog: Catalog) -> None:
        """Sync panel with player state."""
        self._player = player
        self._catalog = catalog
        # Trigger re-render via reactive
        self.state_key = "|".join(
            f"{uid}:{lvl}" for uid, lvl in sorted(player.upgrade_levels.items())
        ) + (
            f"|c:{player.progression.currency}|l:{player.progression.level}"
            f"|x:{player.progression.xp}|h:{len(player.session_history)}"
            f"|d:{player.login.last_login_date}"
        )
