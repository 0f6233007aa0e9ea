"""
Base Service Foundation

Purpose
-------
Foundation class for Bloodcraft domain services (player record store,
experience processor). Services implement business rules, read tunables from
the ConfigManager and publish domain events on the EventBus.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access
- Event emission helper

What this class does NOT do:
- Persist anything
- Contain leveling rules

Usage
-----
    class PlayerRecordStore(BaseService):
        def __init__(self, config_manager, event_bus, logger=None):
            super().__init__(config_manager, event_bus, logger or get_logger(__name__))

        async def add_experience(self, player_id: int, amount: float) -> bool:
            ...
            await self.emit_event(EXPERIENCE_GAINED, payload)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from logging import Logger

    from bloodcraft.core.config.manager import ConfigManager
    from bloodcraft.core.event.bus import EventBus


class BaseService:
    """
    Base class for all domain services.

    Args:
        config_manager: Source of tunables
        event_bus: Outbound notification channel
        logger: Module logger
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config_manager
        self._events = event_bus
        self.log = logger

    @property
    def config_manager(self) -> ConfigManager:
        return self._config

    @property
    def event_bus(self) -> EventBus:
        return self._events

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Retrieve a configuration value.

        Args:
            key: Dot-notation configuration key
            default: Value returned when the key is missing
            required: If True, raise when the key resolves to None

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        from .exceptions import ConfigurationError

        value = self._config.get(key, default)
        if required and value is None:
            raise ConfigurationError(key, f"Required configuration key '{key}' is missing")
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
    ) -> None:
        """Publish a domain event on the bus."""
        await self._events.publish(event_type, data)

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a service operation at INFO with structured context."""
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )
