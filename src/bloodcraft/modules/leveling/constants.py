"""
Bloodcraft leveling constants.

Purpose
-------
Default values for the `leveling.*` configuration tree and fixed gameplay
numbers. Live values come from the ConfigManager (YAML + runtime writes);
these defaults apply when a key is absent.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Bounds constrain what administrators may write at runtime
"""

from __future__ import annotations

from typing import Final

# ============================================================================
# CURVE
# ============================================================================

DEFAULT_MAX_LEVEL: Final[int] = 100
DEFAULT_BASE_EXP_PER_LEVEL: Final[float] = 100.0
DEFAULT_GROWTH_FACTOR: Final[float] = 1.1

# ============================================================================
# KILL REWARDS
# ============================================================================

DEFAULT_BASE_EXP_MULTIPLIER: Final[float] = 1.0
DEFAULT_GROUP_MULTIPLIER: Final[float] = 1.2
DEFAULT_VBLOOD_MULTIPLIER: Final[float] = 5.0
DEFAULT_UNIT_MULTIPLIER: Final[float] = 1.0
DEFAULT_LEVEL_SCALING_FACTOR: Final[float] = 0.1

HEALTH_EXPERIENCE_DIVISOR: Final[float] = 10.0  # 1 exp per 10 victim health
MIN_KILL_EXPERIENCE: Final[float] = 1.0

# ============================================================================
# DISPLAY TOGGLES
# ============================================================================

DEFAULT_SHOW_LEVEL_UP_EFFECTS: Final[bool] = True
DEFAULT_SHOW_EXPERIENCE_LOG: Final[bool] = True
DEFAULT_SHOW_SCROLLING_COMBAT_TEXT: Final[bool] = True

# ============================================================================
# WRITE BOUNDS
# ============================================================================

MAX_LEVEL_UPPER_BOUND: Final[int] = 1000
MAX_GROWTH_FACTOR: Final[float] = 2.0
MAX_BASE_EXP_PER_LEVEL: Final[float] = 1_000_000_000.0
