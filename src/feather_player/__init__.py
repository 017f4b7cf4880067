"""Feather - a keyboard-driven terminal music player."""

__version__ = "0.3.0"
