"""Screen capture."""

from .capture import FrameCapturePipeline, encode_frame
from .source import ScreenSource

__all__ = ["FrameCapturePipeline", "ScreenSource", "encode_frame"]
