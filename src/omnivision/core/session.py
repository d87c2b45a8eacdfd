"""Session lifecycle: the single owner of every streaming component and of teardown."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..audio.input.capture import AudioCapturePipeline
from ..audio.output.device import OutputDevice
from ..audio.output.scheduler import PlaybackScheduler
from ..config.settings import OmniVisionConfig
from ..tools.manager import ToolManager
from ..tools.overlay import AnnotationOverlay, CallLater
from ..transport.live import LiveCallbacks, LiveClient, LiveSession
from ..transport.schemas import LiveConfig, LiveServerMessage
from ..video.capture import FrameCapturePipeline
from ..video.source import ScreenSource
from .dispatch import FireAndForget
from .errors import CredentialMissing, MediaAcquisitionFailed, SendFailed, TransportError
from .events import MediaPacket, SessionStatus, ToolResponse
from .router import InboundRouter
from .transcript import TranscriptWindow

logger = logging.getLogger(__name__)

CONNECTION_LOST_MESSAGE = "Connection issue detected. Re-syncing..."
SCREEN_SHARE_FAILED_MESSAGE = "Screen sharing denied or failed. Please allow access to your screen."

ClientFactory = Callable[[str, str], LiveClient]
AudioCaptureFactory = Callable[[Callable[[MediaPacket], None]], AudioCapturePipeline]


class SessionController:
    """
    Owns one streaming session at a time.

    IDLE -> CONNECTING -> ACTIVE -> IDLE, with transport errors passing through
    ERROR on the way back to IDLE. Everything runs on the event loop thread;
    stop() is synchronous, idempotent and tears down all components together.
    """

    def __init__(
        self,
        config: OmniVisionConfig,
        client_factory: ClientFactory = LiveClient,
        output: Optional[OutputDevice] = None,
        screen: Optional[ScreenSource] = None,
        audio_capture_factory: Optional[AudioCaptureFactory] = None,
        call_later: Optional[CallLater] = None,
    ):
        self._config = config
        self._client_factory = client_factory

        self.status = SessionStatus.IDLE
        self.error_message: Optional[str] = None
        self.is_agent_speaking = False

        self.transcript = TranscriptWindow()
        self.overlay = AnnotationOverlay(call_later=call_later)
        self._sends = FireAndForget()

        self._output = output or OutputDevice(device=config.output_device)
        self._screen = screen or ScreenSource(monitor=config.monitor)
        self._screen.set_on_ended(self._on_screen_ended)
        if audio_capture_factory is not None:
            self._mic = audio_capture_factory(self._send_media)
        else:
            self._mic = AudioCapturePipeline(send=self._send_media, device=config.input_device)

        self.scheduler = PlaybackScheduler(self._output, on_speaking_changed=self._set_speaking)
        self.tools = ToolManager(self.overlay, respond=self._send_tool_response)
        self.router = InboundRouter(self.transcript, self.scheduler, self.tools)
        self._frames = FrameCapturePipeline(
            self._screen,
            self._send_media,
            is_active=lambda: self.status is SessionStatus.ACTIVE,
        )

        self._live: Optional[LiveSession] = None
        self._generation = 0

    @property
    def is_screen_shared(self) -> bool:
        return self._screen.is_open

    def live_config(self) -> LiveConfig:
        return LiveConfig(
            system_instruction=self._config.system_instruction,
            voice=self._config.voice,
            function_declarations=self.tools.get_function_declarations(),
        )

    def share_screen(self) -> bool:
        """Acquire the screen ahead of start(). Surfaces a message on failure."""
        try:
            self._screen.open()
        except MediaAcquisitionFailed as e:
            logger.error("Screen share failed: %s", e)
            self.error_message = SCREEN_SHARE_FAILED_MESSAGE
            return False
        self.error_message = None
        return True

    async def start(self) -> bool:
        """Begin a session. Returns False if it could not get past CONNECTING."""
        if self.status is not SessionStatus.IDLE:
            self.stop()
        self.error_message = None

        if not self._config.has_credentials:
            self._fail(CredentialMissing("API Key is missing from the environment."))
            return False

        self._generation += 1
        generation = self._generation
        self._set_status(SessionStatus.CONNECTING)

        screen_was_shared = self._screen.is_open
        try:
            self._acquire_media()
        except MediaAcquisitionFailed as e:
            self._teardown(keep_screen=screen_was_shared)
            self._fail(e)
            return False

        client = self._client_factory(self._config.api_key, self._config.model)
        callbacks = LiveCallbacks(
            on_open=lambda: self._on_open(generation),
            on_message=self._on_message,
            on_error=lambda error: self._on_error(generation, error),
            on_close=lambda: self._on_close(generation),
        )
        try:
            live = await client.connect(self.live_config(), callbacks)
        except Exception as e:
            if generation == self._generation:
                self._teardown()
                self._fail(e if str(e) else TransportError("Failed to start AI session."))
            return False

        if generation != self._generation:
            logger.info("Session stopped while connecting, closing late transport")
            live.close()
            return False
        self._live = live
        return True

    def stop(self) -> None:
        """Tear everything down. Safe from any state, any number of times."""
        self._generation += 1
        self._teardown()
        if self.status is not SessionStatus.IDLE:
            self._set_status(SessionStatus.IDLE)

    def shutdown(self) -> None:
        self.stop()
        self.overlay.clear()

    def _acquire_media(self) -> None:
        self._output.open()
        self._mic.open()
        if not self._screen.is_open:
            self._screen.open()

    def _teardown(self, keep_screen: bool = False) -> None:
        self._frames.cancel()
        live, self._live = self._live, None
        if live is not None:
            live.close()
        self._mic.close()
        if not keep_screen:
            self._screen.stop()
        self.scheduler.reset()
        self._sends.cancel_all()
        self._output.close()

    def _on_open(self, generation: int) -> None:
        if generation != self._generation or self.status is not SessionStatus.CONNECTING:
            return
        self._set_status(SessionStatus.ACTIVE)
        self._mic.arm()
        self._frames.start()

    def _on_message(self, message: LiveServerMessage) -> None:
        self.router.route(message)

    def _on_error(self, generation: int, error: TransportError) -> None:
        if generation != self._generation:
            return
        logger.error("Live Error: %s", error)
        self._set_status(SessionStatus.ERROR)
        self.error_message = CONNECTION_LOST_MESSAGE
        self.stop()

    def _on_close(self, generation: int) -> None:
        if generation != self._generation:
            return
        logger.info("Remote closed the session")
        self.stop()

    def _on_screen_ended(self) -> None:
        logger.info("Screen share ended externally")
        self.stop()

    def _send_media(self, packet: MediaPacket) -> None:
        live = self._live
        if live is None or self.status is not SessionStatus.ACTIVE:
            return
        self._sends.submit(live.send_realtime_input(packet.to_realtime_input()), "media send")

    def _send_tool_response(self, response: ToolResponse) -> None:
        live = self._live
        if live is None:
            raise SendFailed(f"No live session for tool response {response.id}")
        self._sends.submit(
            live.send_tool_response({"functionResponses": [response.to_wire()]}),
            f"tool response {response.id}",
            level=logging.WARNING,
        )

    def _set_speaking(self, speaking: bool) -> None:
        self.is_agent_speaking = speaking

    def _set_status(self, status: SessionStatus) -> None:
        if status is not self.status:
            logger.info("Session %s -> %s", self.status.value, status.value)
            self.status = status

    def _fail(self, error: Exception) -> None:
        logger.error("Session failed to start: %s", error)
        self.error_message = str(error)
        self._set_status(SessionStatus.IDLE)
