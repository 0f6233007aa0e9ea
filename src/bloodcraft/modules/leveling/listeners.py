"""
Default leveling event listeners.

Purpose
-------
Log player progression announced by the PlayerRecordStore. Both listeners
run at LOW priority, in the background, so logging never delays an award.

Consumes
--------
- "leveling.experience_gained" -> experience log line
  (when `leveling.show_experience_log` is true), flagged with
  `scrolling_combat_text` from `leveling.show_scrolling_combat_text`
- "leveling.level_changed" -> level change log line, flagged with
  `effects=True` when `leveling.show_level_up_effects` is true and the
  level went up

Toggles are read per event, so runtime configuration changes apply to the
next event.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from bloodcraft.core.event.types import ListenerPriority
from bloodcraft.core.logging.logger import get_logger
from bloodcraft.modules.leveling.events import EXPERIENCE_GAINED, LEVEL_CHANGED

if TYPE_CHECKING:
    from bloodcraft.core.config.manager import ConfigManager
    from bloodcraft.core.event.bus import EventBus

logger = get_logger(__name__)


class LevelingLogListeners:
    """
    Subscribes the progression log listeners to an EventBus.

    Example
    -------
    >>> listeners = LevelingLogListeners(config_manager, event_bus)
    >>> listeners.start()
    >>> ...
    >>> listeners.stop()
    """

    def __init__(self, config_manager: ConfigManager, event_bus: EventBus) -> None:
        self._config = config_manager
        self._event_bus = event_bus
        self._subscriptions: List[Tuple[str, str]] = []

    @property
    def is_started(self) -> bool:
        return bool(self._subscriptions)

    def start(self) -> None:
        if self._subscriptions:
            return

        for event_name, callback in (
            (EXPERIENCE_GAINED, self.on_experience_gained),
            (LEVEL_CHANGED, self.on_level_changed),
        ):
            identifier = self._event_bus.subscribe(
                event_name, callback, priority=ListenerPriority.LOW
            )
            self._subscriptions.append((event_name, identifier))

        logger.info(
            "Leveling log listeners subscribed",
            extra={"event_names": [name for name, _ in self._subscriptions]},
        )

    def stop(self) -> None:
        for event_name, identifier in self._subscriptions:
            self._event_bus.unsubscribe(event_name, identifier)
        self._subscriptions.clear()

    # ═══════════════════════════════════════════════════════════════════════
    # HANDLERS
    # ═══════════════════════════════════════════════════════════════════════

    def _enabled(self, key: str) -> bool:
        return bool(self._config.get(f"leveling.{key}", True))

    async def on_experience_gained(self, payload: Dict[str, Any]) -> None:
        if not self._enabled("show_experience_log"):
            return

        logger.info(
            "Player gained experience",
            extra={
                "player_id": payload.get("player_id"),
                "amount": payload.get("amount"),
                "total_experience": payload.get("total_experience"),
                "level": payload.get("level"),
                "scrolling_combat_text": self._enabled("show_scrolling_combat_text"),
            },
        )

    async def on_level_changed(self, payload: Dict[str, Any]) -> None:
        old_level: Optional[int] = payload.get("old_level")
        new_level: Optional[int] = payload.get("new_level")
        leveled_up = (
            old_level is not None and new_level is not None and new_level > old_level
        )

        logger.info(
            "Player level changed",
            extra={
                "player_id": payload.get("player_id"),
                "old_level": old_level,
                "new_level": new_level,
                "effects": leveled_up and self._enabled("show_level_up_effects"),
            },
        )
