"""Gapless playback scheduling for agent speech."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Set

from .types import AudioBuffer, AudioOutput, SourceHandle

logger = logging.getLogger("Playback")


@dataclass(eq=False)
class PlaybackSlot:
    buffer: AudioBuffer
    start_time: float
    handle: Optional[SourceHandle] = None

    @property
    def end_time(self) -> float:
        return self.start_time + self.buffer.duration


class PlaybackScheduler:
    """
    Places decoded chunks back to back on the output clock.

    next_start_time never moves backwards while playing and never lags the
    clock, so consecutive chunks neither overlap nor leave a gap. interrupt()
    silences everything and rewinds the timeline to zero.
    """

    def __init__(
        self,
        output: AudioOutput,
        on_speaking_changed: Optional[Callable[[bool], None]] = None,
    ):
        self._output = output
        self._on_speaking_changed = on_speaking_changed
        self._live: Set[PlaybackSlot] = set()
        self.next_start_time = 0.0

    @property
    def live_slots(self) -> Set[PlaybackSlot]:
        return set(self._live)

    @property
    def is_speaking(self) -> bool:
        return bool(self._live)

    def schedule(self, buffer: AudioBuffer) -> PlaybackSlot:
        start = max(self.next_start_time, self._output.current_time)
        slot = PlaybackSlot(buffer=buffer, start_time=start)
        slot.handle = self._output.play(buffer, start, lambda: self._on_slot_ended(slot))
        self.next_start_time = start + buffer.duration
        was_speaking = bool(self._live)
        self._live.add(slot)
        if not was_speaking:
            self._signal(True)
        return slot

    def interrupt(self) -> None:
        """Hard-stop every live slot and rewind the timeline."""
        slots, self._live = self._live, set()
        for slot in slots:
            try:
                slot.handle.stop()
            except Exception as e:
                logger.debug("Error stopping playback slot: %s", e)
        self.next_start_time = 0.0
        if slots:
            logger.info("Playback interrupted, %d slot(s) dropped", len(slots))
        self._signal(False)

    reset = interrupt

    def _on_slot_ended(self, slot: PlaybackSlot) -> None:
        if slot not in self._live:
            return
        self._live.discard(slot)
        if not self._live:
            self._signal(False)

    def _signal(self, speaking: bool) -> None:
        if self._on_speaking_changed is not None:
            self._on_speaking_changed(speaking)
