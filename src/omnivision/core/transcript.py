"""Sliding window of recent transcript lines."""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, List

from .events import Sender, TranscriptEntry

MAX_TRANSCRIPT_ENTRIES = 20


class TranscriptWindow:
    """Keeps the most recent entries in arrival order; oldest are evicted first."""

    def __init__(self, maxlen: int = MAX_TRANSCRIPT_ENTRIES):
        self._entries: Deque[TranscriptEntry] = deque(maxlen=maxlen)

    def append(self, text: str, sender: Sender) -> TranscriptEntry:
        entry = TranscriptEntry(text=text, sender=sender)
        self._entries.append(entry)
        return entry

    def entries(self) -> List[TranscriptEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(list(self._entries))
