"""Blessed UI helper functions."""

from .scrolling import clamp_selection, move_selection, page_bounds, turn_page
from .terminal import fit, write_at

__all__ = ["clamp_selection", "move_selection", "page_bounds", "turn_page", "fit", "write_at"]
