"""
Bloodcraft Leveling Curve

Purpose
-------
Pure level <-> experience conversions for a geometric curve. Reaching level
L costs `base_exp_per_level * growth_factor**(L-1)` on top of the previous
level, so the total threshold is

    E(L) = sum(base_exp_per_level * growth_factor**(i-1) for i in 1..L)

Design Notes
------------
- Pure functions: every tunable comes in through a `LevelingSettings`
- `level_for_experience` accumulates terms in the same order as
  `experience_for_level`, so `level_for_experience(experience_for_level(L)) == L`
  holds exactly for every L in [0, max_level]
- Searches are bounded by `max_level`

Usage
-----
    from bloodcraft.modules.leveling.curve import experience_for_level

    threshold = experience_for_level(10, settings)
"""

from __future__ import annotations

import math

from bloodcraft.modules.leveling.settings import DEFAULT_SETTINGS, LevelingSettings
from bloodcraft.modules.shared.validators import is_valid_level


def _level_cost(level_index: int, settings: LevelingSettings) -> float:
    # Cost of going from level_index to level_index + 1.
    return settings.base_exp_per_level * settings.growth_factor**level_index


def experience_for_level(
    level: int, settings: LevelingSettings = DEFAULT_SETTINGS
) -> float:
    """
    Total experience required to reach `level` from level 0.

    Args:
        level: Target level
        settings: Curve tunables

    Returns:
        Threshold experience, 0.0 for level <= 0

    Example:
        >>> experience_for_level(1)
        100.0
        >>> round(experience_for_level(3), 6)
        331.0
    """
    total = 0.0
    for index in range(max(0, level)):
        total += _level_cost(index, settings)
    return total


def level_for_experience(
    experience: float, settings: LevelingSettings = DEFAULT_SETTINGS
) -> int:
    """
    Largest level in [0, max_level] whose threshold is <= `experience`.

    Args:
        experience: Total accumulated experience
        settings: Curve tunables

    Returns:
        Level, 0 for non-positive experience

    Example:
        >>> level_for_experience(209.0)
        1
        >>> level_for_experience(experience_for_level(2))
        2
    """
    if not experience > 0:
        return 0

    level = 0
    total = 0.0
    while level < settings.max_level:
        next_total = total + _level_cost(level, settings)
        if next_total > experience:
            break
        total = next_total
        level += 1
    return level


def progress_percent(
    experience: float, settings: LevelingSettings = DEFAULT_SETTINGS
) -> int:
    """
    Whole-percent progress from the current level threshold to the next.

    Floors the ratio and clamps to [0, 100]. Players at max level, and
    degenerate curves where the next threshold does not grow, report 100.

    Example:
        >>> progress_percent(100.0)
        0
        >>> progress_percent(209.99)
        99
    """
    if not experience > 0:
        return 0

    level = level_for_experience(experience, settings)
    if level >= settings.max_level:
        return 100

    current = experience_for_level(level, settings)
    nxt = current + _level_cost(level, settings)
    delta = nxt - current
    if delta <= 0:
        return 100

    percent = math.floor((experience - current) / delta * 100)
    return max(0, min(100, percent))


def experience_difference(
    from_level: int, to_level: int, settings: LevelingSettings = DEFAULT_SETTINGS
) -> float:
    """
    Absolute experience between two level thresholds.

    Returns 0.0 unless both levels are integers in [0, max_level].

    Example:
        >>> round(experience_difference(1, 3), 6)
        231.0
    """
    if not (
        is_valid_level(from_level, settings.max_level)
        and is_valid_level(to_level, settings.max_level)
    ):
        return 0.0
    return abs(
        experience_for_level(to_level, settings)
        - experience_for_level(from_level, settings)
    )
