"""The visualization session context and year playback."""
