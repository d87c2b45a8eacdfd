"""Audio capture, codec and playback."""
