"""Periodic screen frames -> JPEG media packets."""

from __future__ import annotations

import asyncio
import io
import logging
import math
from typing import Callable, Optional, Protocol

from PIL import Image

from ..core.events import MediaPacket

logger = logging.getLogger("FrameCapture")

FRAME_RATE = 2.0
TARGET_WIDTH = 1024
JPEG_QUALITY = 0.5


class FrameSource(Protocol):
    @property
    def ready(self) -> bool:
        ...

    async def grab(self) -> Optional[Image.Image]:
        ...


def encode_frame(image: Image.Image, target_width: int = TARGET_WIDTH, quality: float = JPEG_QUALITY) -> bytes:
    """Scale to target_width keeping aspect ratio, then JPEG-encode."""
    target_height = max(1, round(image.height / image.width * target_width))
    scaled = image.convert("RGB").resize((target_width, target_height), Image.Resampling.BILINEAR)
    out = io.BytesIO()
    scaled.save(out, format="JPEG", quality=int(round(quality * 100)))
    return out.getvalue()


class FrameCapturePipeline:
    """
    Samples the screen at a fixed cadence and sends each frame.

    Level-triggered: a tick with no session or no valid frame is skipped, and a
    slow tick drops the ticks it overran instead of queueing them.
    """

    def __init__(
        self,
        source: FrameSource,
        send: Callable[[MediaPacket], None],
        is_active: Callable[[], bool],
        interval_s: float = 1.0 / FRAME_RATE,
        target_width: int = TARGET_WIDTH,
        jpeg_quality: float = JPEG_QUALITY,
    ):
        self._source = source
        self._send = send
        self._is_active = is_active
        self._interval_s = interval_s
        self._target_width = target_width
        self._jpeg_quality = jpeg_quality
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Frame capture started at %.1f fps", 1.0 / self._interval_s)

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Frame capture stopped")

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self._interval_s
        while True:
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            await self.tick()
            next_tick += self._interval_s
            now = loop.time()
            if next_tick <= now:
                missed = math.floor((now - next_tick) / self._interval_s) + 1
                next_tick += missed * self._interval_s

    async def tick(self) -> bool:
        """Capture and send one frame. Returns False when the tick is skipped."""
        if not self._is_active() or not self._source.ready:
            return False
        image = await self._source.grab()
        if image is None or image.width <= 0 or image.height <= 0:
            return False
        try:
            jpeg = await asyncio.to_thread(encode_frame, image, self._target_width, self._jpeg_quality)
        except Exception as e:
            logger.warning("Dropping frame, encode failed: %s", e)
            return False
        if not self._is_active():
            return False
        try:
            self._send(MediaPacket.frame(jpeg))
        except Exception as e:
            logger.debug("Dropping frame, send failed: %s", e)
        return True
