"""UI layer for Feather.

Contains:
- blessed: full-screen terminal interface
"""

__all__ = []
