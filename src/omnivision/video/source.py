"""Screen capture source backed by mss."""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import mss
from PIL import Image

from ..core.errors import MediaAcquisitionFailed

logger = logging.getLogger("ScreenSource")


class ScreenSource:
    """
    The shared screen. grab() returns the current frame or None.

    mss handles are bound to the thread that created them, so the handle lives
    on a single dedicated worker thread: it is created, used and closed there.
    A grab that fails after the source was opened (display gone, capture
    revoked) raises the external "ended" signal once via on_ended.
    """

    def __init__(self, monitor: int = 1, on_ended: Optional[Callable[[], None]] = None):
        self._monitor = monitor
        self._on_ended = on_ended
        self._executor: Optional[ThreadPoolExecutor] = None
        self._sct = None  # worker thread only
        self._region: Optional[dict] = None
        self._ended = False

    @property
    def is_open(self) -> bool:
        return self._executor is not None

    @property
    def ready(self) -> bool:
        region = self._region
        return self._executor is not None and region is not None and region["width"] > 0 and region["height"] > 0

    def set_on_ended(self, callback: Optional[Callable[[], None]]) -> None:
        self._on_ended = callback

    def open(self) -> None:
        """Acquire the monitor. Raises MediaAcquisitionFailed."""
        if self._executor is not None:
            return
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ScreenSource")
        try:
            region = executor.submit(self._open_on_worker).result()
        except MediaAcquisitionFailed:
            executor.shutdown(wait=False)
            raise
        except Exception as e:
            executor.shutdown(wait=False)
            raise MediaAcquisitionFailed(f"Screen sharing denied or failed: {e}") from e
        self._executor = executor
        self._region = region
        self._ended = False
        logger.info("Sharing monitor %s (%sx%s)", self._monitor, region["width"], region["height"])

    async def grab(self) -> Optional[Image.Image]:
        if not self.ready:
            return None
        executor = self._executor
        region = dict(self._region)
        try:
            return await asyncio.get_running_loop().run_in_executor(executor, self._grab_on_worker, region)
        except Exception as e:
            if executor is not self._executor:
                # Stopped while the grab was in flight.
                return None
            logger.warning("Screen grab failed, ending share: %s", e)
            self._end()
            return None

    def stop(self) -> None:
        executor, self._executor = self._executor, None
        self._region = None
        if executor is None:
            return
        executor.submit(self._close_on_worker)
        executor.shutdown(wait=False)
        logger.info("Screen share stopped")

    def _open_on_worker(self) -> dict:
        try:
            sct = mss.mss()
        except Exception as e:
            raise MediaAcquisitionFailed(f"Screen sharing denied or failed: {e}") from e
        monitors = sct.monitors
        if self._monitor >= len(monitors):
            sct.close()
            raise MediaAcquisitionFailed(
                f"Screen sharing failed: monitor {self._monitor} not found ({len(monitors) - 1} available)"
            )
        self._sct = sct
        return dict(monitors[self._monitor])

    def _grab_on_worker(self, region: dict) -> Optional[Image.Image]:
        shot = self._sct.grab(region)
        if shot.width <= 0 or shot.height <= 0:
            return None
        return Image.frombytes("RGB", shot.size, shot.rgb)

    def _close_on_worker(self) -> None:
        sct, self._sct = self._sct, None
        if sct is None:
            return
        try:
            sct.close()
        except Exception as e:
            logger.warning("Error releasing screen capture: %s", e)

    def _end(self) -> None:
        if self._ended:
            return
        self._ended = True
        self.stop()
        if self._on_ended is not None:
            asyncio.get_running_loop().call_soon(self._on_ended)
