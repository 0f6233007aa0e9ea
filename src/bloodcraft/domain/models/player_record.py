"""
Player progression domain models for Bloodcraft.

Purpose
-------
Data carried by the leveling core:

- `PlayerRecord`: mutable per-player progression state owned by the store.
- `KillContext`: sanitized, immutable description of one kill.
- `LevelSnapshot`: read model handed to presentation code.

Invariants
----------
- `player_id` is an opaque unsigned 64-bit identifier (0 <= id < 2**64).
- `level` and `experience` are never negative; `experience` is finite.
- A record's level is consistent with its experience after every store
  mutation (enforced by the store, which owns the curve settings).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Tuple

from bloodcraft.domain.models.base import (
    DomainValidationError,
    validate_finite,
    validate_non_negative,
    validate_range,
)

MAX_PLAYER_ID = 2**64 - 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_player_id(player_id: int) -> None:
    validate_range(player_id, 0, MAX_PLAYER_ID, "player_id")


@dataclass(slots=True)
class PlayerRecord:
    """
    Progression state of one player.

    Created lazily by the store with level 0 and no experience.

    Attributes
    ----------
    player_id : int
        Platform identifier of the player.
    level : int
        Current level, 0..max_level.
    experience : float
        Total accumulated experience.
    last_updated : datetime
        UTC time of the last mutation.
    """

    player_id: int
    level: int = 0
    experience: float = 0.0
    last_updated: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        validate_player_id(self.player_id)
        validate_non_negative(self.level, "level")
        validate_finite(self.experience, "experience")
        validate_non_negative(self.experience, "experience")

    def copy(self) -> PlayerRecord:
        """Detached copy, safe to hand outside the store."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "level": self.level,
            "experience": self.experience,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class KillContext:
    """
    One kill, as seen by the experience processor.

    Use `KillContext.create()` to build one from raw host input: it clamps
    negative victim stats to zero and collapses duplicate participants,
    keeping first-occurrence order.
    """

    victim_level: int
    victim_health: float
    is_boss: bool
    participant_ids: Tuple[int, ...]

    def __post_init__(self) -> None:
        validate_non_negative(self.victim_level, "victim_level")
        validate_finite(self.victim_health, "victim_health")
        validate_non_negative(self.victim_health, "victim_health")
        if len(set(self.participant_ids)) != len(self.participant_ids):
            raise DomainValidationError(
                "participant_ids must be unique", field="participant_ids"
            )

    @classmethod
    def create(
        cls,
        victim_level: int,
        victim_health: float,
        is_boss: bool,
        participant_ids: Iterable[int],
    ) -> KillContext:
        """
        Sanitize raw kill input.

        Examples
        --------
        >>> ctx = KillContext.create(-3, 500.0, False, [7, 8, 7])
        >>> ctx.victim_level, ctx.participant_ids
        (0, (7, 8))
        """
        unique_ids = tuple(dict.fromkeys(participant_ids))
        return cls(
            victim_level=max(0, int(victim_level)),
            victim_health=max(0.0, float(victim_health)),
            is_boss=bool(is_boss),
            participant_ids=unique_ids,
        )

    @property
    def group_size(self) -> int:
        return len(self.participant_ids)

    @property
    def is_group_kill(self) -> bool:
        return self.group_size > 1


@dataclass(frozen=True, slots=True)
class LevelSnapshot:
    """Point-in-time view of a player's progression for display."""

    player_id: int
    level: int
    max_level: int
    experience: float
    experience_to_next_level: float
    progress_percent: int

    @property
    def is_max_level(self) -> bool:
        return self.level >= self.max_level
