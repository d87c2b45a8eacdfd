"""Audio input data types and configuration."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class AudioFrame:
    """Single audio frame from the microphone."""
    pcm: np.ndarray          # shape: (n_samples,) float32
    sample_rate: int
    timestamp_s: float


@dataclass(frozen=True)
class AudioFormat:
    """Audio format sent to the live agent."""
    sample_rate: int = 16000
    channels: int = 1
    dtype: str = "float32"  # sounddevice dtype name
    frame_samples: int = 4096
