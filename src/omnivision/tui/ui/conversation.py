from typing import List

from rich.markup import escape
from textual.widgets import RichLog
from textual.containers import Container
from textual.app import ComposeResult

from ...core.events import TranscriptEntry

class ConversationArea(Container):
    """Renders the rolling transcript window, oldest line first."""

    DEFAULT_CSS = """
    ConversationArea {
        height: 1fr;
        border: solid $accent;
        margin: 0 1;
    }
    
    ConversationArea RichLog {
        height: 1fr;
        background: $surface;
    }
    """

    def __init__(self):
        super().__init__()
        self._shown: List[TranscriptEntry] = []

    def compose(self) -> ComposeResult:
        yield RichLog(id="conversation_log", highlight=True, markup=True, wrap=True)

    def show(self, entries: List[TranscriptEntry]) -> None:
        # The window evicts from the front, so redraw instead of appending.
        if entries == self._shown:
            return
        log = self.query_one(RichLog)
        log.clear()
        for entry in entries:
            log.write(format_entry(entry))
        self._shown = list(entries)


def format_entry(entry: TranscriptEntry) -> str:
    if entry.sender == "user":
        return f"[bold green]You:[/bold green] [white]{escape(entry.text)}[/white]"
    return f"[bold blue]Agent:[/bold blue] [white]{escape(entry.text)}[/white]"
