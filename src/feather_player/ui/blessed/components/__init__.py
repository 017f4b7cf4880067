"""Rendering functions for blessed UI."""

from .body import render_body
from .header import render_header
from .layout import calculate_layout
from .overlays import render_help, render_popup
from .player_bar import render_player_bar
from .status_bar import render_status_bar

__all__ = [
    "render_body",
    "render_header",
    "render_help",
    "render_player_bar",
    "render_popup",
    "render_status_bar",
    "calculate_layout",
]
