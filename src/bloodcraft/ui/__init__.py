"""
Presentation helpers for Bloodcraft leveling: colors, titles and text
formatters. Pure functions over `LevelSnapshot` values.
"""

from .colors import LevelPalette, get_level_color
from .formatters import format_experience, format_level_status, render_progress_bar
from .titles import get_level_title

__all__ = [
    "LevelPalette",
    "get_level_color",
    "get_level_title",
    "format_experience",
    "format_level_status",
    "render_progress_bar",
]
