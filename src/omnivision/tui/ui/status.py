from typing import List, Optional

from rich.markup import escape
from textual.widgets import Static

from ...core.events import AnnotationMarker, SessionStatus

STATUS_STYLES = {
    SessionStatus.IDLE: "dim",
    SessionStatus.CONNECTING: "yellow",
    SessionStatus.ACTIVE: "bold green",
    SessionStatus.ERROR: "bold red",
}


class StatusBar(Static):
    DEFAULT_CSS = """
    StatusBar {
        height: 2;
        margin: 0 1;
        padding: 0 1;
        background: $boost;
    }
    """

    def show(
        self,
        status: SessionStatus,
        speaking: bool,
        screen_shared: bool,
        error: Optional[str],
    ) -> None:
        self.update(format_status(status, speaking, screen_shared, error))


class MarkerPanel(Static):
    """Lists live annotation markers with their screen position in percent."""

    DEFAULT_CSS = """
    MarkerPanel {
        height: auto;
        max-height: 8;
        margin: 0 1;
        padding: 0 1;
        border: solid $primary;
    }
    """

    def show(self, markers: List[AnnotationMarker]) -> None:
        self.display = bool(markers)
        self.update("\n".join(format_marker(m) for m in markers))


def format_status(status: SessionStatus, speaking: bool, screen_shared: bool, error: Optional[str]) -> str:
    style = STATUS_STYLES.get(status, "white")
    line = f"[{style}]{status.value}[/{style}]"
    line += "  screen: " + ("[green]shared[/green]" if screen_shared else "[dim]not shared[/dim]")
    if speaking:
        line += "  [bold magenta]agent speaking...[/bold magenta]"
    if error:
        line += f"\n[red]{escape(error)}[/red]"
    return line


def format_marker(marker: AnnotationMarker) -> str:
    return f"[bold yellow]>[/bold yellow] {escape(marker.label)} [dim]({marker.x:.0f}%, {marker.y:.0f}%)[/dim]"
