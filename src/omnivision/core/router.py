"""Demultiplexes inbound live messages into transcript, audio, interrupts and tool calls."""

from __future__ import annotations

import logging

from ..audio.codec import b64decode, bytes_to_audio_buffer
from ..audio.output.scheduler import PlaybackScheduler
from ..audio.output.types import OUTPUT_CHANNELS, OUTPUT_SAMPLE_RATE
from ..tools.manager import ToolManager
from ..transport.schemas import LiveServerMessage
from .errors import DecodeError
from .events import ToolInvocation
from .transcript import TranscriptWindow

logger = logging.getLogger(__name__)


class InboundRouter:
    """
    Routes one message at a time. A single message may carry several of
    transcript text, audio, an interruption and tool calls; each is handled
    independently in that order.
    """

    def __init__(
        self,
        transcript: TranscriptWindow,
        scheduler: PlaybackScheduler,
        tools: ToolManager,
        sample_rate: int = OUTPUT_SAMPLE_RATE,
        channels: int = OUTPUT_CHANNELS,
    ):
        self._transcript = transcript
        self._scheduler = scheduler
        self._tools = tools
        self._sample_rate = sample_rate
        self._channels = channels

    def route(self, message: LiveServerMessage) -> None:
        output_text = message.output_text
        input_text = message.input_text
        if output_text:
            self._transcript.append(output_text, "model")
        elif input_text:
            self._transcript.append(input_text, "user")

        audio = message.audio_data
        if audio:
            self._play(audio)

        if message.interrupted:
            logger.info("Agent interrupted")
            self._scheduler.interrupt()

        for call in message.function_calls:
            self._tools.dispatch(ToolInvocation(id=call.id, name=call.name, args=dict(call.args)))

    def _play(self, data: str) -> None:
        try:
            buffer = bytes_to_audio_buffer(b64decode(data), self._sample_rate, self._channels)
        except DecodeError as e:
            logger.warning("Dropping audio chunk: %s", e)
            return
        self._scheduler.schedule(buffer)
