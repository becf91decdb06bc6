"""HUD widget — live session timer, laps, loot, and cycle progress."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widget import Widget

from tapper.engine.clock import format_duration
from tapper.engine.session import SessionPhase, SessionSnapshot

_TREND_STYLE = {
    "faster": ("▲ faster", "bold green"),
    "slower": ("▼ slower", "bold red"),
    "same": ("= same", "yellow"),
}


class SessionHUD(Widget):
    """Heads-up display for the running sub-session."""

    DEFAULT_CSS = """
    SessionHUD {
        width: 100%;
        height: 100%;
        padding: 1;
    }
    """

    phase: reactive[str] = reactive("IDLE")
    paused: reactive[bool] = reactive(False)
    tap_label: reactive[str] = reactive("")
    elapsed: reactive[str] = reactive("0:00")
    lap_elapsed: reactive[str] = reactive("")
    last_lap: reactive[str] = reactive("--")
    trend: reactive[str] = reactive("")
    average: reactive[str] = reactive("--")
    delta: reactive[str] = reactive("")
    delta_ahead: reactive[bool] = reactive(True)
    cycle_text: reactive[str] = reactive("")
    cycle_pct: reactive[float] = reactive(0.0)
    loot_text: reactive[str] = reactive("")

    def render(self) -> Text:
        text = Text()

        if self.phase == "IDLE":
            text.append("  === Ready ===\n\n", style="bold cyan")
            text.append("  [N] New session\n", style="dim italic")
            return text

        header = "PAUSED" if self.paused else ("Tapping..." if self.phase == "TIMING" else "Next tree")
        text.append(f"  === {header} ===\n\n", style="bold yellow" if self.paused else "bold cyan")

        text.append("  Tree: ", style="dim")
        text.append(f"{self.tap_label}\n", style="bold white")
        text.append("  Elapsed: ", style="dim")
        text.append(f"{self.elapsed}\n", style="bold green")
        if self.lap_elapsed:
            text.append("  This tree: ", style="dim")
            text.append(f"{self.lap_elapsed}\n", style="green")

        text.append("\n")
        text.append("  Last lap: ", style="dim")
        text.append(f"{self.last_lap}", style="white")
        if self.trend:
            label, style = _TREND_STYLE[self.trend]
            text.append(f"  {label}", style=style)
        text.append("\n")
        text.append("  Average: ", style="dim")
        text.append(f"{self.average}\n", style="white")
        if self.delta:
            text.append("  Pace: ", style="dim")
            text.append(f"{self.delta}\n", style="bold green" if self.delta_ahead else "bold red")

        if self.cycle_text:
            text.append("\n")
            text.append("  Cycle: ", style="dim")
            text.append(f"{self.cycle_text}\n", style="bold white")
            bar_width = 16
            filled = int(self.cycle_pct * bar_width)
            bar = "#" * filled + "." * (bar_width - filled)
            text.append(f"  [{bar}] {self.cycle_pct * 100:.0f}%\n", style="green")

        if self.loot_text:
            text.append("\n")
            text.append("  Loot: ", style="dim")
            text.append(f"{self.loot_text}\n", style="cyan")

        text.append("\n")
        text.append("  [Space] Tap  [P] Pause\n", style="dim italic")
        text.append("  [E] End  [F] End full cycle\n", style="dim italic")
        return text

    def update_from_snapshot(self, snap: SessionSnapshot) -> None:
        """Sync HUD with a session snapshot."""
        self.phase = snap.phase.name
        self.paused = snap.paused

        goal = f"{snap.tapped_count}/{snap.total_goal} this session"
        self.tap_label = f"#{snap.tap_ordinal}  ({goal})"
        self.elapsed = format_duration(snap.elapsed)
        if snap.phase == SessionPhase.TIMING:
            self.lap_elapsed = f"{snap.current_lap_elapsed:.1f}s"
        else:
            self.lap_elapsed = ""

        self.last_lap = f"{snap.last_lap:.2f}s" if snap.tapped_count else "--"
        self.trend = snap.lap_trend or ""
        self.average = f"{snap.current_average:.2f}s" if snap.current_average is not None else "--"

        if snap.pacing_delta is None:
            self.delta = ""
        else:
            self.delta_ahead = snap.pacing_delta <= 0
            word = "ahead" if self.delta_ahead else "behind"
            self.delta = f"{abs(snap.pacing_delta):.2f}s {word}"

        if snap.cycle_goal is not None and snap.cycle_progress is not None:
            done = round(snap.cycle_progress * snap.cycle_goal)
            self.cycle_text = f"{done}/{snap.cycle_goal}"
            self.cycle_pct = snap.cycle_progress
        else:
            self.cycle_text = ""
            self.cycle_pct = 0.0

        self.loot_text = ", ".join(f"{k} x{v}" for k, v in sorted(snap.loot.items()))
