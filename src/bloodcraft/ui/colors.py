"""
Level color palette for in-game chat.

Colors are rich-text hex strings (`#RRGGBB`) used in `<color=...>` tags.

Usage:
    >>> from bloodcraft.ui.colors import get_level_color
    >>> get_level_color(42)
    '#0080FF'
"""

from typing import Tuple


class LevelPalette:
    """Level band colors, lowest band first."""

    # =========================================================================
    # LEVEL BANDS
    # =========================================================================

    NOVICE = "#CCCCCC"      # Grey (< 10)
    APPRENTICE = "#00FF00"  # Green (< 25)
    ADVENTURER = "#0080FF"  # Blue (< 50)
    EXPERT = "#8000FF"      # Purple (< 75)
    MASTER = "#FF8000"      # Orange (< 90)
    LEGEND = "#FF0000"      # Red (90+)

    # (exclusive upper bound, color)
    BANDS: Tuple[Tuple[int, str], ...] = (
        (10, NOVICE),
        (25, APPRENTICE),
        (50, ADVENTURER),
        (75, EXPERT),
        (90, MASTER),
    )


def get_level_color(level: int) -> str:
    """
    Color for a level band.

    Example:
        >>> get_level_color(5)
        '#CCCCCC'
        >>> get_level_color(95)
        '#FF0000'
    """
    for upper, color in LevelPalette.BANDS:
        if level < upper:
            return color
    return LevelPalette.LEGEND
