"""
Leveling event names and payload builders.

Payloads are plain dicts so any listener (logging, UI, a host adapter) can
consume them without importing leveling types.
"""

from __future__ import annotations

from typing import Any, Dict, Final

EXPERIENCE_GAINED: Final[str] = "leveling.experience_gained"
LEVEL_CHANGED: Final[str] = "leveling.level_changed"
ALL_LEVELING_EVENTS: Final[str] = "leveling.*"


def experience_gained_payload(
    player_id: int, amount: float, total_experience: float, level: int
) -> Dict[str, Any]:
    return {
        "player_id": player_id,
        "amount": amount,
        "total_experience": total_experience,
        "level": level,
    }


def level_changed_payload(player_id: int, old_level: int, new_level: int) -> Dict[str, Any]:
    return {
        "player_id": player_id,
        "old_level": old_level,
        "new_level": new_level,
    }
