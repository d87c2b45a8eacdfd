"""Clocked output device: schedules buffers on a sample-accurate timeline."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Callable, List, Optional

import numpy as np
import sounddevice as sd

from ...core.errors import MediaAcquisitionFailed
from .types import OUTPUT_CHANNELS, OUTPUT_SAMPLE_RATE, AudioBuffer

logger = logging.getLogger("OutputDevice")

# Callback block size: ~10 ms at 24 kHz
PLAYBACK_BLOCKSIZE = 256


class ScheduledSource:
    """One buffer placed on the device timeline. stop() silences it at once."""

    def __init__(
        self,
        device: "OutputDevice",
        samples: np.ndarray,
        start_frame: int,
        on_ended: Callable[[], None],
    ):
        self._device = device
        self.samples = samples
        self.start_frame = start_frame
        self.on_ended = on_ended
        self.started = False

    @property
    def end_frame(self) -> int:
        return self.start_frame + len(self.samples)

    def stop(self) -> None:
        self._device._remove(self)


class OutputDevice:
    """
    sounddevice OutputStream in callback mode acting as an audio clock and mixer.

    current_time advances by the frames rendered since open(). Sources whose
    start time has already passed stay on their timeline position: the samples
    that should already have played are skipped. Natural completions
    are posted back to the event loop; stopped sources never report completion.
    """

    def __init__(
        self,
        sample_rate: int = OUTPUT_SAMPLE_RATE,
        channels: int = OUTPUT_CHANNELS,
        device: Optional[int] = None,
    ):
        self._sample_rate = sample_rate
        self._channels = channels
        self._device = device
        self._lock = threading.Lock()
        self._sources: List[ScheduledSource] = []
        self._frames_rendered = 0
        self._stream: Optional[sd.OutputStream] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    def current_time(self) -> float:
        return self._frames_rendered / self._sample_rate

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    def open(self) -> None:
        """Open the speaker stream. Raises MediaAcquisitionFailed."""
        if self._stream is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._frames_rendered = 0
        try:
            stream = sd.OutputStream(
                samplerate=self._sample_rate,
                channels=self._channels,
                dtype="float32",
                blocksize=PLAYBACK_BLOCKSIZE,
                device=self._device,
                callback=self._callback,
            )
            stream.start()
        except Exception as e:
            raise MediaAcquisitionFailed(f"Audio output unavailable: {e}") from e
        self._stream = stream
        logger.info("Output stream opened sr=%s ch=%s", self._sample_rate, self._channels)

    def close(self) -> None:
        with self._lock:
            self._sources.clear()
        stream, self._stream = self._stream, None
        self._frames_rendered = 0
        if stream is None:
            return
        try:
            stream.abort()
            stream.close()
        except Exception as e:
            logger.warning("Error closing output stream: %s", e)
        logger.info("Output stream closed")

    def play(self, buffer: AudioBuffer, when: float, on_ended: Callable[[], None]) -> ScheduledSource:
        if buffer.sample_rate != self._sample_rate:
            raise ValueError(
                f"Buffer rate {buffer.sample_rate} does not match device rate {self._sample_rate}"
            )
        samples = buffer.samples
        if samples.shape[1] != self._channels:
            samples = np.repeat(samples[:, :1], self._channels, axis=1)
        source = ScheduledSource(self, samples, int(round(when * self._sample_rate)), on_ended)
        with self._lock:
            self._sources.append(source)
        return source

    def _remove(self, source: ScheduledSource) -> None:
        with self._lock:
            if source in self._sources:
                self._sources.remove(source)

    def _callback(self, outdata: np.ndarray, frames: int, time_info: object, status: sd.CallbackFlags) -> None:
        if status:
            logger.warning("OutputDevice: callback status=%s", status)
        outdata.fill(0)
        block_start = self._frames_rendered
        block_end = block_start + frames
        finished: List[ScheduledSource] = []

        with self._lock:
            for src in self._sources:
                if not src.started:
                    if src.start_frame >= block_end:
                        continue
                    src.started = True
                lo = max(src.start_frame, block_start)
                hi = min(src.end_frame, block_end)
                if hi > lo:
                    outdata[lo - block_start:hi - block_start] += src.samples[lo - src.start_frame:hi - src.start_frame]
                if src.end_frame <= block_end:
                    finished.append(src)
            for src in finished:
                self._sources.remove(src)

        np.clip(outdata, -1.0, 1.0, out=outdata)
        self._frames_rendered = block_end

        if finished and self._loop is not None:
            for src in finished:
                try:
                    self._loop.call_soon_threadsafe(src.on_ended)
                except RuntimeError:
                    break
