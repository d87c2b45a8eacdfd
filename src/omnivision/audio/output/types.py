"""Audio output data types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

import numpy as np

# Gemini Live speaks 24 kHz mono PCM16.
OUTPUT_SAMPLE_RATE = 24000
OUTPUT_CHANNELS = 1


@dataclass(frozen=True)
class AudioBuffer:
    """Decoded audio ready to be scheduled."""

    samples: np.ndarray      # shape: (frames, channels) float32
    sample_rate: int
    channels: int = 1

    @property
    def frames(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate


@runtime_checkable
class SourceHandle(Protocol):
    """A buffer scheduled on an output clock."""

    def stop(self) -> None:
        ...


@runtime_checkable
class AudioOutput(Protocol):
    """Clocked output that can schedule buffers at absolute times."""

    @property
    def current_time(self) -> float:
        ...

    def play(
        self,
        buffer: AudioBuffer,
        when: float,
        on_ended: Callable[[], None],
    ) -> SourceHandle:
        ...
