"""OmniVision: live screen + voice session with a realtime AI agent."""

__version__ = "0.1.0"
