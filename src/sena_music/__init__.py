"""SenaBot music queue and playback engine for Discord."""

__version__ = "1.0.0"
