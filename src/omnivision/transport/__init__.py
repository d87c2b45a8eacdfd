"""Gemini Live transport."""

from .live import DEFAULT_MODEL, LiveCallbacks, LiveClient, LiveSession
from .schemas import LiveConfig, LiveServerMessage

__all__ = [
    "DEFAULT_MODEL",
    "LiveCallbacks",
    "LiveClient",
    "LiveSession",
    "LiveConfig",
    "LiveServerMessage",
]
