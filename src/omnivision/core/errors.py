"""Error taxonomy for the streaming session."""


class OmniVisionError(Exception):
    """Base class for session errors surfaced to the user."""


class CredentialMissing(OmniVisionError):
    """Raised when no API key is configured."""


class MediaAcquisitionFailed(OmniVisionError):
    """Raised when the microphone, speaker or screen cannot be opened."""


class TransportError(OmniVisionError):
    """Raised (or reported) when the live transport fails."""


class DecodeError(OmniVisionError):
    """Raised for a malformed inbound audio payload."""


class SendFailed(OmniVisionError):
    """An outbound send did not go through. Logged, never propagated."""
