"""Audio input module."""

from .capture import AudioCapturePipeline
from .types import AudioFormat, AudioFrame

__all__ = ["AudioCapturePipeline", "AudioFormat", "AudioFrame"]
