"""
Bloodcraft Kill Reward Formulas

Purpose
-------
Pure calculation functions for kill experience. The processor composes
them per kill:

    base   = calculate_base_experience(...)      # victim stats, boss factor
    base   = apply_group_multiplier(base, n)     # once per kill
    award  = apply_level_scaling(base, p, v)     # per participant

Design Notes
------------
- Pure functions only, no config access (settings passed in)
- Every award is floored at MIN_KILL_EXPERIENCE
"""

from __future__ import annotations

import math

from bloodcraft.modules.leveling.constants import (
    HEALTH_EXPERIENCE_DIVISOR,
    MIN_KILL_EXPERIENCE,
)
from bloodcraft.modules.leveling.settings import DEFAULT_SETTINGS, LevelingSettings


def calculate_base_experience(
    victim_level: int,
    victim_health: float,
    is_boss: bool,
    settings: LevelingSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Experience a kill is worth before group and level adjustments.

    Formula: (victim_level * base_exp_multiplier + victim_health / 10)
    times vblood_multiplier for bosses, unit_multiplier otherwise.

    Args:
        victim_level: Level of the killed unit (>= 0)
        victim_health: Max health of the killed unit (>= 0)
        is_boss: Whether the victim is a V Blood boss
        settings: Reward tunables

    Returns:
        Base experience, at least 1.0

    Example:
        >>> calculate_base_experience(10, 100.0, False)
        20.0
        >>> calculate_base_experience(10, 100.0, True)
        100.0
    """
    base = victim_level * settings.base_exp_multiplier
    base += victim_health / HEALTH_EXPERIENCE_DIVISOR
    base *= settings.vblood_multiplier if is_boss else settings.unit_multiplier
    return max(MIN_KILL_EXPERIENCE, base)


def apply_group_multiplier(
    base_experience: float,
    group_size: int,
    settings: LevelingSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Apply the group bonus when more than one player shares the kill.

    Example:
        >>> apply_group_multiplier(20.0, 2)
        24.0
        >>> apply_group_multiplier(20.0, 1)
        20.0
    """
    if group_size > 1:
        return base_experience * settings.group_multiplier
    return base_experience


def apply_level_scaling(
    base_experience: float,
    player_level: int,
    victim_level: int,
    settings: LevelingSettings = DEFAULT_SETTINGS,
) -> float:
    """
    Decay the award for players above the victim's level.

    Formula: base * exp(-level_scaling_factor * max(0, player_level - victim_level))

    Args:
        base_experience: Award before scaling
        player_level: Level of the receiving player
        victim_level: Level of the killed unit
        settings: Reward tunables

    Returns:
        Scaled award, at least 1.0

    Example:
        >>> round(apply_level_scaling(20.0, 20, 10), 2)
        7.36
    """
    gap = max(0, player_level - victim_level)
    scaled = base_experience * math.exp(-settings.level_scaling_factor * gap)
    return max(MIN_KILL_EXPERIENCE, scaled)


def estimate_hours_to_next_level(
    experience_to_next_level: float, average_exp_per_hour: float
) -> float:
    """
    Hours until the next level at a steady earning rate.

    Returns 0.0 for a non-positive rate or when nothing is left to earn.

    Example:
        >>> estimate_hours_to_next_level(150.0, 50.0)
        3.0
    """
    if average_exp_per_hour <= 0 or experience_to_next_level <= 0:
        return 0.0
    return experience_to_next_level / average_exp_per_hour
