"""PCM16 and base64 conversions for the live protocol."""

from __future__ import annotations

import base64
import binascii
from typing import Sequence, Union

import numpy as np

from ..core.errors import DecodeError
from .output.types import AudioBuffer

# Negative samples scale by 0x8000, positive by 0x7FFF (standard int16 range).
NEG_SCALE = 0x8000
POS_SCALE = 0x7FFF

Samples = Union[Sequence[float], np.ndarray]


def encode(samples: Samples) -> bytes:
    """Float samples in [-1, 1] -> 16-bit little-endian PCM bytes."""
    s = np.clip(np.asarray(samples, dtype=np.float64).ravel(), -1.0, 1.0)
    scaled = np.where(s < 0, s * NEG_SCALE, s * POS_SCALE)
    return np.rint(scaled).astype("<i2").tobytes()


def decode(data: bytes) -> np.ndarray:
    """16-bit little-endian PCM bytes -> float32 samples in [-1, 1]."""
    if len(data) % 2:
        raise DecodeError(f"PCM16 payload has odd length {len(data)}")
    ints = np.frombuffer(data, dtype="<i2").astype(np.float64)
    return np.where(ints < 0, ints / NEG_SCALE, ints / POS_SCALE).astype(np.float32)


def bytes_to_audio_buffer(data: bytes, sample_rate: int, channels: int = 1) -> AudioBuffer:
    """Interpret raw interleaved PCM16 as a playable buffer."""
    frame_bytes = 2 * channels
    if len(data) % frame_bytes:
        raise DecodeError(
            f"PCM16 payload of {len(data)} bytes is not a multiple of {frame_bytes}"
        )
    samples = decode(data).reshape(-1, channels)
    return AudioBuffer(samples=samples, sample_rate=sample_rate, channels=channels)


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(text: Union[str, bytes]) -> bytes:
    """Decode base64, tolerating missing padding and the URL-safe alphabet."""
    if isinstance(text, bytes):
        try:
            text = text.decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid base64 payload: {e}") from e
    cleaned = "".join(text.split()).rstrip("=").replace("-", "+").replace("_", "/")
    if len(cleaned) % 4 == 1:
        raise DecodeError("Invalid base64 length")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64 payload: {e}") from e
