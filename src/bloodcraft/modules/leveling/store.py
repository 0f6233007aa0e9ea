"""
Player Record Store for Bloodcraft leveling.

Purpose
-------
Authoritative in-memory owner of every player's level and experience. All
progression mutations go through this store, which keeps each record
consistent with the leveling curve and announces changes on the EventBus.

Responsibilities
----------------
- Lazily create records (level 0, no experience) on first access
- Serialize mutations per player with sharded asyncio locks
- Enforce the level cap (experience pinned to the max-level threshold)
- Publish `leveling.experience_gained` / `leveling.level_changed` after the
  lock is released, gained before level-changed
- Hand out copies and snapshots, never live records

Non-Responsibilities
--------------------
- Kill reward math (see `processor` / `formulas`)
- Persistence (records can be handed in through `restore_record`)
- Presentation

Concurrency
-----------
- `core.store.lock_shards` locks (default 64), player `p` maps to shard
  `p % shard_count`. Players on different shards mutate concurrently.
- Reads are synchronous and therefore atomic with respect to the loop.
- `clear_all()` takes every shard lock in index order.

Configuration Keys
------------------
- core.store.lock_shards : int (default 64)
- leveling.*             : curve tunables, snapshotted once per mutation
"""

from __future__ import annotations

import asyncio
import math
from contextlib import AsyncExitStack
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from bloodcraft.core.logging.logger import get_logger
from bloodcraft.domain.models.player_record import LevelSnapshot, PlayerRecord
from bloodcraft.modules.leveling import curve
from bloodcraft.modules.leveling.events import (
    EXPERIENCE_GAINED,
    LEVEL_CHANGED,
    experience_gained_payload,
    level_changed_payload,
)
from bloodcraft.modules.leveling.formulas import estimate_hours_to_next_level
from bloodcraft.modules.leveling.settings import LevelingSettings
from bloodcraft.modules.shared.base_service import BaseService
from bloodcraft.modules.shared.validators import validate_player_id

if TYPE_CHECKING:
    from logging import Logger

    from bloodcraft.core.config.manager import ConfigManager
    from bloodcraft.core.event.bus import EventBus

DEFAULT_LOCK_SHARDS = 64

# Receives a detached copy of the record and the settings snapshot; returns
# the amount to add, or None to skip the player.
AwardFn = Callable[[PlayerRecord, LevelingSettings], Optional[float]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class _Notification:
    event_name: str
    payload: Dict[str, object]


class PlayerRecordStore(BaseService):
    """
    Keyed store of `PlayerRecord`s with per-player mutation locks.

    Examples
    --------
    >>> store = PlayerRecordStore(config_manager, event_bus)
    >>> leveled_up = await store.add_experience(76561198000000001, 150.0)
    >>> store.get_level(76561198000000001)
    1
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Optional[Logger] = None,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        lock_shards: Optional[int] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._clock = clock or _utcnow
        self._records: Dict[int, PlayerRecord] = {}

        shard_count = lock_shards
        if shard_count is None:
            shard_count = self.get_config("core.store.lock_shards", DEFAULT_LOCK_SHARDS)
        if not isinstance(shard_count, int) or isinstance(shard_count, bool) or shard_count < 1:
            self.log.warning(
                "Invalid lock shard count, using default",
                extra={"value": repr(shard_count), "default_value": DEFAULT_LOCK_SHARDS},
            )
            shard_count = DEFAULT_LOCK_SHARDS
        self._locks: List[asyncio.Lock] = [asyncio.Lock() for _ in range(shard_count)]

    # ═══════════════════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def shard_count(self) -> int:
        return len(self._locks)

    def _lock_for(self, player_id: int) -> asyncio.Lock:
        return self._locks[player_id % len(self._locks)]

    def _settings(self) -> LevelingSettings:
        return LevelingSettings.from_config(self._config)

    def _get_or_create(self, player_id: int) -> PlayerRecord:
        record = self._records.get(player_id)
        if record is None:
            record = PlayerRecord(player_id=player_id, last_updated=self._clock())
            self._records[player_id] = record
        return record

    async def _publish(self, notifications: List[_Notification]) -> None:
        for note in notifications:
            await self.emit_event(note.event_name, note.payload)

    def _apply_amount(
        self, record: PlayerRecord, amount: float, settings: LevelingSettings
    ) -> Tuple[int, int]:
        old_level = record.level
        experience = record.experience + amount
        level = curve.level_for_experience(experience, settings)

        if level >= settings.max_level:
            level = settings.max_level
            experience = curve.experience_for_level(settings.max_level, settings)

        record.experience = experience
        record.level = level
        record.last_updated = self._clock()
        return old_level, level

    # ═══════════════════════════════════════════════════════════════════════
    # MUTATIONS
    # ═══════════════════════════════════════════════════════════════════════

    async def award_experience(
        self,
        player_id: int,
        compute_award: AwardFn,
        settings: Optional[LevelingSettings] = None,
    ) -> Tuple[Optional[float], bool]:
        """
        Compute and apply an award atomically for one player.

        `compute_award` runs under the player's shard lock, so the level it
        sees cannot change before the award lands.

        Returns:
            (amount applied or None when skipped, whether the level increased)
        """
        validate_player_id(player_id)
        settings = settings or self._settings()
        notifications: List[_Notification] = []

        async with self._lock_for(player_id):
            record = self._get_or_create(player_id)
            amount = compute_award(record.copy(), settings)
            if amount is None or not amount > 0:
                return None, False

            old_level, new_level = self._apply_amount(record, amount, settings)
            leveled_up = new_level > old_level

            notifications.append(
                _Notification(
                    EXPERIENCE_GAINED,
                    experience_gained_payload(
                        player_id, amount, record.experience, record.level
                    ),
                )
            )
            if leveled_up:
                notifications.append(
                    _Notification(
                        LEVEL_CHANGED,
                        level_changed_payload(player_id, old_level, new_level),
                    )
                )

        self.log.debug(
            "Experience awarded",
            extra={
                "player_id": player_id,
                "amount": amount,
                "old_level": old_level,
                "new_level": new_level,
            },
        )
        await self._publish(notifications)
        return amount, leveled_up

    async def add_experience(self, player_id: int, amount: float) -> bool:
        """
        Add experience to a player.

        Args:
            player_id: Player identifier
            amount: Experience to add; non-positive amounts are ignored

        Returns:
            True if the player's level increased

        Raises:
            ValidationError: If player_id is not an unsigned 64-bit integer
        """
        validate_player_id(player_id)
        if not amount > 0:
            return False

        _, leveled_up = await self.award_experience(player_id, lambda _r, _s: amount)
        return leveled_up

    async def set_level(self, player_id: int, level: int) -> int:
        """
        Force a player to a level, experience set to its exact threshold.

        The level is clamped into [0, max_level]. Returns the level applied;
        a NaN or infinite request changes nothing and returns the current level.
        """
        validate_player_id(player_id)
        if isinstance(level, float) and not math.isfinite(level):
            self.log.warning(
                "Rejected non-finite level",
                extra={"player_id": player_id, "requested_level": level},
            )
            return self.get_level(player_id)

        settings = self._settings()
        target = max(0, min(int(level), settings.max_level))
        notifications: List[_Notification] = []

        async with self._lock_for(player_id):
            record = self._get_or_create(player_id)
            old_level = record.level
            record.level = target
            record.experience = curve.experience_for_level(target, settings)
            record.last_updated = self._clock()
            if old_level != target:
                notifications.append(
                    _Notification(
                        LEVEL_CHANGED, level_changed_payload(player_id, old_level, target)
                    )
                )

        self.log_operation(
            "set_level",
            player_id=player_id,
            requested_level=level,
            old_level=old_level,
            new_level=target,
        )
        await self._publish(notifications)
        return target

    async def reset_progress(self, player_id: int) -> None:
        """Zero a player's level and experience."""
        validate_player_id(player_id)
        notifications: List[_Notification] = []

        async with self._lock_for(player_id):
            record = self._get_or_create(player_id)
            old_level = record.level
            record.level = 0
            record.experience = 0.0
            record.last_updated = self._clock()
            if old_level != 0:
                notifications.append(
                    _Notification(LEVEL_CHANGED, level_changed_payload(player_id, old_level, 0))
                )

        self.log_operation("reset_progress", player_id=player_id, old_level=old_level)
        await self._publish(notifications)

    async def clear_all(self) -> int:
        """
        Drop every record without notifications.

        Waits for in-flight mutations on all shards. Returns the number of
        records removed.
        """
        async with AsyncExitStack() as stack:
            for lock in self._locks:
                await stack.enter_async_context(lock)
            removed = len(self._records)
            self._records.clear()

        self.log_operation("clear_all", records_removed=removed)
        return removed

    async def restore_record(self, record: PlayerRecord) -> PlayerRecord:
        """
        Install a record produced by an external loader.

        The level is recomputed from the experience (capped), so a stale or
        inconsistent level never enters the store. No events are published.
        Returns a copy of the stored record.
        """
        validate_player_id(record.player_id)
        settings = self._settings()

        async with self._lock_for(record.player_id):
            stored = record.copy()
            level = curve.level_for_experience(stored.experience, settings)
            if level >= settings.max_level:
                level = settings.max_level
                stored.experience = curve.experience_for_level(level, settings)
            stored.level = level
            self._records[stored.player_id] = stored

        self.log.debug(
            "Player record restored",
            extra={"player_id": stored.player_id, "level": stored.level},
        )
        return stored.copy()

    # ═══════════════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════════════

    def get_level(self, player_id: int) -> int:
        validate_player_id(player_id)
        return self._get_or_create(player_id).level

    def get_experience(self, player_id: int) -> float:
        validate_player_id(player_id)
        return self._get_or_create(player_id).experience

    def get_progress_percent(self, player_id: int) -> int:
        validate_player_id(player_id)
        record = self._get_or_create(player_id)
        settings = self._settings()
        if record.level >= settings.max_level:
            return 100
        return curve.progress_percent(record.experience, settings)

    def is_max_level(self, player_id: int) -> bool:
        validate_player_id(player_id)
        return self._get_or_create(player_id).level >= self._settings().max_level

    def get_experience_to_next_level(self, player_id: int) -> float:
        """Experience still needed for the next level; 0.0 at the cap."""
        validate_player_id(player_id)
        record = self._get_or_create(player_id)
        settings = self._settings()
        if record.level >= settings.max_level:
            return 0.0
        threshold = curve.experience_for_level(record.level + 1, settings)
        return max(0.0, threshold - record.experience)

    def get_record(self, player_id: int) -> PlayerRecord:
        """Detached copy of the player's record."""
        validate_player_id(player_id)
        return self._get_or_create(player_id).copy()

    def snapshot(self, player_id: int) -> LevelSnapshot:
        """Read model for presentation, computed from one settings snapshot."""
        validate_player_id(player_id)
        record = self._get_or_create(player_id)
        settings = self._settings()

        if record.level >= settings.max_level:
            to_next = 0.0
            progress = 100
        else:
            threshold = curve.experience_for_level(record.level + 1, settings)
            to_next = max(0.0, threshold - record.experience)
            progress = curve.progress_percent(record.experience, settings)

        return LevelSnapshot(
            player_id=player_id,
            level=record.level,
            max_level=settings.max_level,
            experience=record.experience,
            experience_to_next_level=to_next,
            progress_percent=progress,
        )

    def estimate_hours_to_next_level(
        self, player_id: int, average_exp_per_hour: float
    ) -> float:
        """Hours to the next level at a steady rate; 0.0 at the cap."""
        if self.is_max_level(player_id):
            return 0.0
        return estimate_hours_to_next_level(
            self.get_experience_to_next_level(player_id), average_exp_per_hour
        )

    def get_player_count(self) -> int:
        return len(self._records)
