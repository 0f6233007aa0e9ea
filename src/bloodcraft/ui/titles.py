"""
Level titles shown next to a player's level.

`Supreme` is reserved for players at the configured max level; below it,
titles follow the same bands as the level colors.
"""

from typing import Tuple

SUPREME_TITLE = "Supreme"
LEGEND_TITLE = "Legend"

TITLE_BANDS: Tuple[Tuple[int, str], ...] = (
    (10, "Novice"),
    (25, "Apprentice"),
    (50, "Adventurer"),
    (75, "Expert"),
    (90, "Master"),
)


def get_level_title(level: int, max_level: int) -> str:
    """
    Title for a level.

    Example:
        >>> get_level_title(30, 100)
        'Adventurer'
        >>> get_level_title(100, 100)
        'Supreme'
    """
    if level >= max_level:
        return SUPREME_TITLE
    for upper, title in TITLE_BANDS:
        if level < upper:
            return title
    return LEGEND_TITLE
