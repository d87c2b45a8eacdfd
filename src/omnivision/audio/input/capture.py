"""Microphone capture: sounddevice -> PCM16 media packets."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

import numpy as np
import sounddevice as sd

from ...core.errors import MediaAcquisitionFailed
from ...core.events import MediaPacket
from ..codec import encode
from .types import AudioFormat, AudioFrame

logger = logging.getLogger("AudioCapture")

# The duplex stream's output half monitors the mic at zero gain: capture runs
# on the device clock without echoing the user back to them.
MONITOR_GAIN = 0.0


class AudioCapturePipeline:
    """
    Taps the microphone and forwards each 4096-sample frame as a MediaPacket.

    The sounddevice callback runs on a PortAudio thread; it only copies the
    frame and posts it to the event loop. Encoding and sending happen on the loop.
    """

    def __init__(
        self,
        send: Callable[[MediaPacket], None],
        audio_format: AudioFormat = AudioFormat(),
        device: Optional[int] = None,
        on_ended: Optional[Callable[[], None]] = None,
    ):
        self._send = send
        self._audio_format = audio_format
        self._device = device
        self._on_ended = on_ended
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stream: Optional[sd.Stream] = None
        self._armed = False
        self._closing = False

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def is_armed(self) -> bool:
        return self._armed

    def open(self) -> None:
        """Acquire the microphone. Raises MediaAcquisitionFailed."""
        if self._stream is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._closing = False
        fmt = self._audio_format
        try:
            stream = sd.Stream(
                samplerate=fmt.sample_rate,
                blocksize=fmt.frame_samples,
                channels=fmt.channels,
                dtype=fmt.dtype,
                device=self._device,
                callback=self._audio_callback,
                finished_callback=self._stream_finished,
            )
            stream.start()
        except Exception as e:
            raise MediaAcquisitionFailed(f"Microphone access failed: {e}") from e
        self._stream = stream
        logger.info("Microphone opened at %sHz, %s samples per frame", fmt.sample_rate, fmt.frame_samples)

    def arm(self) -> None:
        self._armed = True

    def disarm(self) -> None:
        self._armed = False

    def close(self) -> None:
        """Stop and release the microphone. Safe to call repeatedly."""
        self._armed = False
        stream, self._stream = self._stream, None
        if stream is None:
            return
        self._closing = True
        try:
            stream.abort()
            stream.close()
        except Exception as e:
            logger.warning("Error closing microphone stream: %s", e)
        logger.info("Microphone released")

    def _audio_callback(self, indata, outdata, frames, time_info, status) -> None:
        if status:
            logger.warning("Audio callback status: %s", status)
        outdata[:] = indata * MONITOR_GAIN

        if not self._armed or self._loop is None:
            return
        frame = AudioFrame(
            pcm=indata[:, 0].astype(np.float32),
            sample_rate=self._audio_format.sample_rate,
            timestamp_s=time.time(),
        )
        try:
            self._loop.call_soon_threadsafe(self._handle_frame, frame)
        except RuntimeError:
            # Loop already closed during shutdown.
            pass

    def _handle_frame(self, frame: AudioFrame) -> None:
        if not self._armed:
            return
        packet = MediaPacket.audio(encode(frame.pcm))
        try:
            self._send(packet)
        except Exception as e:
            logger.debug("Dropping audio frame, send failed: %s", e)

    def _stream_finished(self) -> None:
        if self._closing or self._loop is None or self._on_ended is None:
            return
        logger.warning("Microphone stream ended unexpectedly")
        try:
            self._loop.call_soon_threadsafe(self._on_ended)
        except RuntimeError:
            pass
