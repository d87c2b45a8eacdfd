"""Time-boxed annotation markers placed by the agent."""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional

from ..core.events import AnnotationMarker

logger = logging.getLogger(__name__)

MARKER_TTL_S = 4.0

CallLater = Callable[[float, Callable[[], None]], Any]


def _loop_call_later(delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay, callback)


class AnnotationOverlay:
    """
    Live marker set. Each marker removes itself ttl_s after creation.

    Several markers may coexist; expiry is keyed by marker id so one marker's
    timer never removes another.
    """

    def __init__(
        self,
        ttl_s: float = MARKER_TTL_S,
        call_later: Optional[CallLater] = None,
        on_change: Optional[Callable[[List[AnnotationMarker]], None]] = None,
    ):
        self._ttl_s = ttl_s
        self._call_later = call_later or _loop_call_later
        self._on_change = on_change
        self._markers: Dict[str, AnnotationMarker] = {}
        self._timers: Dict[str, Any] = {}

    @property
    def markers(self) -> List[AnnotationMarker]:
        return list(self._markers.values())

    def __contains__(self, marker_id: str) -> bool:
        return marker_id in self._markers

    def add(self, x: float, y: float, label: str) -> AnnotationMarker:
        marker_id = uuid.uuid4().hex[:9]
        while marker_id in self._markers:
            marker_id = uuid.uuid4().hex[:9]
        marker = AnnotationMarker(x=x, y=y, label=label, id=marker_id)
        self._markers[marker_id] = marker
        self._timers[marker_id] = self._call_later(self._ttl_s, lambda: self._expire(marker_id))
        logger.info("Marker %s at (%.1f, %.1f): %s", marker_id, x, y, label)
        self._notify()
        return marker

    def clear(self) -> None:
        for handle in self._timers.values():
            cancel = getattr(handle, "cancel", None)
            if cancel is not None:
                cancel()
        self._timers.clear()
        if self._markers:
            self._markers.clear()
            self._notify()

    def _expire(self, marker_id: str) -> None:
        self._timers.pop(marker_id, None)
        if self._markers.pop(marker_id, None) is not None:
            logger.debug("Marker %s expired", marker_id)
            self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.markers)
