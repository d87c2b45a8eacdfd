from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Literal
import time

from ..audio.codec import b64encode

Sender = Literal["user", "model"]

AUDIO_MIME_TYPE = "audio/pcm;rate=16000"
FRAME_MIME_TYPE = "image/jpeg"


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    ERROR = "ERROR"


class MediaKind(Enum):
    AUDIO = auto()
    FRAME = auto()


@dataclass(frozen=True)
class MediaPacket:
    """One outbound media payload. Never acknowledged."""

    kind: MediaKind
    data: bytes
    mime_type: str

    @classmethod
    def audio(cls, pcm: bytes) -> "MediaPacket":
        return cls(kind=MediaKind.AUDIO, data=pcm, mime_type=AUDIO_MIME_TYPE)

    @classmethod
    def frame(cls, jpeg: bytes) -> "MediaPacket":
        return cls(kind=MediaKind.FRAME, data=jpeg, mime_type=FRAME_MIME_TYPE)

    def to_realtime_input(self) -> dict:
        return {"media": {"data": b64encode(self.data), "mimeType": self.mime_type}}


@dataclass(frozen=True)
class TranscriptEntry:
    text: str
    sender: Sender
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class AnnotationMarker:
    """A transient pointer at normalized screen coordinates (0-100 percent)."""

    x: float
    y: float
    label: str
    id: str


@dataclass(frozen=True)
class ToolInvocation:
    id: str
    name: str
    args: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResponse:
    id: str
    name: str
    result: dict[str, Any] = field(default_factory=dict)

    def to_wire(self) -> dict:
        return {"id": self.id, "name": self.name, "response": self.result}
