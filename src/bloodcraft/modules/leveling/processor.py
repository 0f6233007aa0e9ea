"""
Experience Event Processor for Bloodcraft leveling.

Purpose
-------
Turns host gameplay events (unit deaths, admin awards, batch rewards) into
experience awards and applies them through the PlayerRecordStore.

Responsibilities
----------------
- Sanitize kill input (negative stats clamped, duplicate participants
  collapsed, non-finite values rejected)
- Compute the kill award once per kill, then scale it per participant
- Skip players already at max level
- Apply every award through `PlayerRecordStore.award_experience`, so the
  level used for scaling is read under the player's lock

Non-Responsibilities
--------------------
- Holding progression state (owned by the store)
- Publishing leveling events (the store publishes after each mutation)

Error Policy
------------
Gameplay input never raises: malformed kills and awards are logged at
WARNING and dropped. Administrative calls with an invalid player id raise
`ValidationError`.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from bloodcraft.core.logging.logger import LogContext, get_logger
from bloodcraft.domain.models.player_record import KillContext, PlayerRecord
from bloodcraft.modules.leveling.formulas import (
    apply_group_multiplier,
    apply_level_scaling,
    calculate_base_experience,
)
from bloodcraft.modules.leveling.settings import LevelingSettings
from bloodcraft.modules.shared.base_service import BaseService
from bloodcraft.modules.shared.validators import (
    is_valid_experience,
    is_valid_player_id,
    validate_player_id,
)

if TYPE_CHECKING:
    from logging import Logger

    from bloodcraft.core.config.manager import ConfigManager
    from bloodcraft.core.event.bus import EventBus
    from bloodcraft.modules.leveling.store import PlayerRecordStore


def _is_finite_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class ExperienceEventProcessor(BaseService):
    """
    Applies kill and award events to player records.

    Examples
    --------
    >>> processor = ExperienceEventProcessor(config_manager, event_bus, store)
    >>> await processor.process_kill(10, 100.0, False, [player_id])
    {76561198000000001: 7.357588823428847}
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        store: PlayerRecordStore,
        logger: Optional[Logger] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger or get_logger(__name__))
        self._store = store

    @property
    def store(self) -> PlayerRecordStore:
        return self._store

    def _settings(self) -> LevelingSettings:
        return LevelingSettings.from_config(self._config)

    def _unique_participants(self, participant_ids: Iterable[Any]) -> Optional[List[int]]:
        ids = list(dict.fromkeys(participant_ids))
        invalid = [pid for pid in ids if not is_valid_player_id(pid)]
        if invalid:
            self.log.warning(
                "Rejected event with invalid participant ids",
                extra={"invalid_ids": [repr(pid) for pid in invalid]},
            )
            return None
        return ids

    async def _award_each(
        self,
        participant_ids: Iterable[int],
        award_for: Any,
        settings: LevelingSettings,
    ) -> Dict[int, float]:
        awarded: Dict[int, float] = {}

        for player_id in participant_ids:
            amount, _ = await self._store.award_experience(player_id, award_for, settings)
            if amount is not None:
                awarded[player_id] = amount

        return awarded

    # ═══════════════════════════════════════════════════════════════════════
    # KILLS
    # ═══════════════════════════════════════════════════════════════════════

    async def process_kill(
        self,
        victim_level: int,
        victim_health: float,
        is_boss: bool,
        participant_ids: Iterable[int],
    ) -> Dict[int, float]:
        """
        Award experience for a unit death to everyone who took part.

        Args:
            victim_level: Level of the killed unit (negative clamped to 0)
            victim_health: Max health of the killed unit (negative clamped to 0)
            is_boss: Whether the victim is a V Blood boss
            participant_ids: Players credited with the kill

        Returns:
            Amount applied per player; players at max level are absent
        """
        participants = list(participant_ids)
        if not participants:
            return {}

        if not _is_finite_number(victim_level) or not _is_finite_number(victim_health):
            self.log.warning(
                "Rejected kill with non-finite victim stats",
                extra={
                    "victim_level": repr(victim_level),
                    "victim_health": repr(victim_health),
                },
            )
            return {}

        unique_ids = self._unique_participants(participants)
        if unique_ids is None:
            return {}

        kill = KillContext.create(victim_level, victim_health, is_boss, unique_ids)
        settings = self._settings()

        base = calculate_base_experience(
            kill.victim_level, kill.victim_health, kill.is_boss, settings
        )
        base = apply_group_multiplier(base, kill.group_size, settings)

        def award_for(record: PlayerRecord, snapshot: LevelingSettings) -> Optional[float]:
            if record.level >= snapshot.max_level:
                return None
            return apply_level_scaling(base, record.level, kill.victim_level, snapshot)

        with LogContext(operation="process_kill"):
            awarded = await self._award_each(kill.participant_ids, award_for, settings)

            self.log.debug(
                "Kill processed",
                extra={
                    "victim_level": kill.victim_level,
                    "is_boss": kill.is_boss,
                    "group_size": kill.group_size,
                    "base_experience": base,
                    "players_awarded": len(awarded),
                },
            )
        return awarded

    async def on_entity_killed(
        self,
        victim_level: int,
        victim_max_health: float,
        is_boss: bool,
        participant_ids: Iterable[int],
    ) -> Dict[int, float]:
        """Host event sink for unit deaths; see `process_kill`."""
        return await self.process_kill(
            victim_level, victim_max_health, is_boss, participant_ids
        )

    # ═══════════════════════════════════════════════════════════════════════
    # DIRECT AWARDS
    # ═══════════════════════════════════════════════════════════════════════

    async def give_experience(self, player_id: int, amount: float) -> bool:
        """
        Administrative award, applied without group or level scaling.

        Returns:
            True if the player's level increased

        Raises:
            ValidationError: If player_id is not an unsigned 64-bit integer
        """
        validate_player_id(player_id)
        if not is_valid_experience(amount):
            self.log.warning(
                "Rejected experience award",
                extra={"player_id": player_id, "amount": repr(amount)},
            )
            return False
        if amount <= 0:
            return False

        self.log_operation("give_experience", player_id=player_id, amount=amount)
        return await self._store.add_experience(player_id, amount)

    async def process_batch_experience(
        self, amount: float, participant_ids: Iterable[int]
    ) -> Dict[int, float]:
        """
        Flat award to every participant below max level.

        No group multiplier and no level scaling. Duplicate ids are awarded once.
        """
        participants = list(participant_ids)
        if not is_valid_experience(amount):
            self.log.warning(
                "Rejected batch experience award",
                extra={"amount": repr(amount), "participant_count": len(participants)},
            )
            return {}
        if amount <= 0 or not participants:
            return {}

        unique_ids = self._unique_participants(participants)
        if unique_ids is None:
            return {}

        def award_for(record: PlayerRecord, snapshot: LevelingSettings) -> Optional[float]:
            if record.level >= snapshot.max_level:
                return None
            return float(amount)

        with LogContext(operation="process_batch_experience"):
            awarded = await self._award_each(unique_ids, award_for, self._settings())
        return awarded
