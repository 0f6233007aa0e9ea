"""
Domain models for the Bloodcraft leveling core.

Plain dataclasses with self-validation; services (store, processor)
orchestrate them and own the curve settings.
"""

from .base import (
    DomainValidationError,
    validate_finite,
    validate_non_negative,
    validate_range,
)
from .player_record import (
    MAX_PLAYER_ID,
    KillContext,
    LevelSnapshot,
    PlayerRecord,
    validate_player_id,
)

__all__ = [
    "DomainValidationError",
    "validate_finite",
    "validate_non_negative",
    "validate_range",
    "MAX_PLAYER_ID",
    "KillContext",
    "LevelSnapshot",
    "PlayerRecord",
    "validate_player_id",
]
