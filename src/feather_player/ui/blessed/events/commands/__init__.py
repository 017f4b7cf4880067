"""Command execution and handlers.

This package applies routed commands and background messages to the UI
state, with handlers split by area (search, user playlists, history,
playback).
"""

from .executor import execute_command, handle_message, switch_mode
from .playback_handlers import flush_listening_time

__all__ = ["execute_command", "handle_message", "switch_mode", "flush_listening_time"]
