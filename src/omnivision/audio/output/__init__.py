"""Audio output module."""

from .device import OutputDevice
from .scheduler import PlaybackScheduler, PlaybackSlot
from .types import AudioBuffer

__all__ = ["OutputDevice", "PlaybackScheduler", "PlaybackSlot", "AudioBuffer"]
