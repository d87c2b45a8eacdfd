"""Core module."""

from .errors import (
    CredentialMissing,
    DecodeError,
    MediaAcquisitionFailed,
    OmniVisionError,
    SendFailed,
    TransportError,
)

__all__ = [
    "CredentialMissing",
    "DecodeError",
    "MediaAcquisitionFailed",
    "OmniVisionError",
    "SendFailed",
    "TransportError",
]
