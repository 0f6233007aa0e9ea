"""
Bloodcraft domain validators.

Two styles live here:

- `is_valid_*` predicates, used on gameplay paths where bad input is
  logged and dropped rather than raised.
- `validate_*` functions, used on administrative paths; they raise
  `ValidationError` and return None on success.

Usage
-----
    from bloodcraft.modules.shared.validators import is_valid_experience

    if not is_valid_experience(amount):
        logger.warning("Rejected experience award", extra={"amount": amount})
        return
"""

from __future__ import annotations

import math
from typing import Any

from bloodcraft.domain.models.player_record import MAX_PLAYER_ID


def _is_real_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_level(level: Any, max_level: int) -> bool:
    """
    True if `level` is an integer in [0, max_level].

    >>> is_valid_level(50, 100)
    True
    >>> is_valid_level(101, 100)
    False
    """
    return isinstance(level, int) and not isinstance(level, bool) and 0 <= level <= max_level


def is_valid_experience(value: Any) -> bool:
    """
    True if `value` is a finite, non-negative number.

    >>> is_valid_experience(12.5)
    True
    >>> is_valid_experience(float("nan"))
    False
    >>> is_valid_experience(-1)
    False
    """
    return _is_real_number(value) and math.isfinite(value) and value >= 0


def is_valid_player_id(player_id: Any) -> bool:
    """True if `player_id` fits an unsigned 64-bit identifier."""
    return (
        isinstance(player_id, int)
        and not isinstance(player_id, bool)
        and 0 <= player_id <= MAX_PLAYER_ID
    )


def validate_player_id(player_id: Any) -> None:
    """
    Validate a player identifier passed to an administrative call.

    Args:
        player_id: Identifier to check

    Raises:
        ValidationError: If the id is not an unsigned 64-bit integer
    """
    from .exceptions import ValidationError

    if not is_valid_player_id(player_id):
        raise ValidationError(
            "player_id", f"must be an integer in [0, 2**64), got {player_id!r}"
        )
