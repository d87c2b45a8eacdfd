import asyncio
import logging
from typing import Optional

from textual.app import App, ComposeResult
from textual.logging import TextualHandler
from textual.widgets import Footer, Header

from ..config.settings import OmniVisionConfig
from ..core.events import SessionStatus
from ..core.session import SessionController
from .ui.conversation import ConversationArea
from .ui.status import MarkerPanel, StatusBar

REFRESH_INTERVAL_S = 0.1


def setup_tui_logging(log_level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        handlers=[TextualHandler()],
        format="[%(levelname)s] %(name)s: %(message)s",
    )


class OmniVisionApp(App):
    CSS = """
    Screen {
        layout: vertical;
    }
    """

    BINDINGS = [
        ("s", "toggle_session", "Start/Stop"),
        ("v", "share_screen", "Share screen"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, config: OmniVisionConfig, controller: Optional[SessionController] = None):
        super().__init__()
        self.controller = controller or SessionController(config)
        self._start_task: Optional[asyncio.Task] = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield StatusBar()
        yield ConversationArea()
        yield MarkerPanel()
        yield Footer()

    def on_mount(self) -> None:
        self.title = "OmniVision"
        self.refresh_view()
        self.set_interval(REFRESH_INTERVAL_S, self.refresh_view)

    def refresh_view(self) -> None:
        """Pull the controller's observable state into the widgets."""
        controller = self.controller
        running = controller.status in (SessionStatus.CONNECTING, SessionStatus.ACTIVE)
        self.sub_title = "press s to stop" if running else "press s to start"
        self.query_one(StatusBar).show(
            controller.status,
            controller.is_agent_speaking,
            controller.is_screen_shared,
            controller.error_message,
        )
        self.query_one(ConversationArea).show(controller.transcript.entries())
        self.query_one(MarkerPanel).show(controller.overlay.markers)

    def action_toggle_session(self) -> None:
        if self.controller.status in (SessionStatus.IDLE, SessionStatus.ERROR):
            self._start_task = asyncio.create_task(self.controller.start())
        else:
            self.controller.stop()

    def action_share_screen(self) -> None:
        if self.controller.share_screen():
            self.notify("Screen shared")

    def on_unmount(self) -> None:
        if self._start_task is not None and not self._start_task.done():
            self._start_task.cancel()
        self.controller.shutdown()
