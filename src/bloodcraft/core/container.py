"""
Service Container for Bloodcraft
================================

Purpose
-------
Composition root of the leveling core. Wires the ConfigManager, EventBus,
PlayerRecordStore, ExperienceEventProcessor and default listeners together,
and owns their startup and shutdown.

Responsibilities
----------------
- Load YAML configuration and register `leveling.*` write validators
- Construct the store and processor with the shared ConfigManager/EventBus
- Subscribe the default progression log listeners
- Drain background listeners and unsubscribe on shutdown

Non-Responsibilities
--------------------
- Host integration (the host calls `processor.on_entity_killed`)
- Logging setup (call `setup_logging()` before `initialize()`)

Architecture Notes
------------------
- All domain services follow the same constructor pattern:
  (config_manager, event_bus, logger)
- Accessing a service before `initialize()` raises RuntimeError
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from bloodcraft import PLUGIN_GUID, PLUGIN_NAME, __version__
from bloodcraft.core.config.manager import ConfigManager
from bloodcraft.core.event.bus import EventBus
from bloodcraft.core.logging.logger import get_logger
from bloodcraft.modules.leveling.listeners import LevelingLogListeners
from bloodcraft.modules.leveling.processor import ExperienceEventProcessor
from bloodcraft.modules.leveling.settings import (
    LevelingSettings,
    register_leveling_validators,
)
from bloodcraft.modules.leveling.store import PlayerRecordStore

if TYPE_CHECKING:
    from logging import Logger

DEFAULT_SHUTDOWN_DRAIN_SECONDS = 5.0


class ServiceContainer:
    """
    Owns the leveling services for one plugin instance.

    Usage:
        container = ServiceContainer(config_manager, event_bus)
        await container.initialize()

        await container.processor.on_entity_killed(10, 100.0, False, [player_id])
        level = container.store.get_level(player_id)

        await container.shutdown()
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        event_bus: Optional[EventBus] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        """
        Args:
            config_manager: Configuration source; the process-wide instance when None
            event_bus: Notification channel; the process-wide bus when None
            logger: Container logger
        """
        if config_manager is None:
            from bloodcraft.core.config.manager import config_manager as default_manager

            config_manager = default_manager
        if event_bus is None:
            from bloodcraft.core.event import event_bus as default_bus

            event_bus = default_bus

        self._config_manager = config_manager
        self._event_bus = event_bus
        self._logger = logger or get_logger(__name__)

        self._store: Optional[PlayerRecordStore] = None
        self._processor: Optional[ExperienceEventProcessor] = None
        self._listeners: Optional[LevelingLogListeners] = None

        self._initialized = False
        self._init_start: Optional[float] = None
        self._init_end: Optional[float] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def config_manager(self) -> ConfigManager:
        return self._config_manager

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    async def initialize(self) -> None:
        """
        Load configuration and start the leveling services.

        Raises:
            ConfigInitializationError: If the config directory cannot be read
        """
        if self._initialized:
            self._logger.warning("ServiceContainer already initialized")
            return

        self._init_start = time.perf_counter()
        self._logger.info("Service container initialization starting...")

        try:
            register_leveling_validators(self._config_manager)
            await self._config_manager.initialize()

            self._store = PlayerRecordStore(
                config_manager=self._config_manager,
                event_bus=self._event_bus,
                logger=get_logger(f"{PlayerRecordStore.__module__}.PlayerRecordStore"),
            )
            self._processor = ExperienceEventProcessor(
                config_manager=self._config_manager,
                event_bus=self._event_bus,
                store=self._store,
                logger=get_logger(
                    f"{ExperienceEventProcessor.__module__}.ExperienceEventProcessor"
                ),
            )

            self._listeners = LevelingLogListeners(self._config_manager, self._event_bus)
            self._listeners.start()

        except Exception as e:
            self._logger.critical(
                "Service container initialization failed - plugin cannot start",
                exc_info=True,
                extra={"error": str(e)},
            )
            raise

        self._init_end = time.perf_counter()
        self._initialized = True

        settings = LevelingSettings.from_config(self._config_manager)
        self._logger.info(
            f"Plugin {PLUGIN_GUID} is loaded!",
            extra={
                "plugin_name": PLUGIN_NAME,
                "version": __version__,
                "max_level": settings.max_level,
                "lock_shards": self._store.shard_count,
                "total_time_seconds": round(self._init_end - self._init_start, 3),
            },
        )

    async def shutdown(self, drain_timeout: float = DEFAULT_SHUTDOWN_DRAIN_SECONDS) -> None:
        """Unsubscribe listeners and wait for background listeners to finish."""
        if not self._initialized:
            return

        self._logger.info("Shutting down service container...")

        if self._listeners is not None:
            self._listeners.stop()
        drained = await self._event_bus.drain(timeout=drain_timeout)

        self._initialized = False
        self._logger.info(
            "Service container shut down",
            extra={"background_tasks_drained": drained},
        )

    def health_check(self) -> Dict[str, Any]:
        """Snapshot for admin diagnostics."""
        return {
            "initialized": self._initialized,
            "players_tracked": self._store.get_player_count() if self._store else 0,
            "listener_count": self._event_bus.get_listener_count(),
            "background_tasks": self._event_bus.get_background_task_count(),
            "total_init_time_seconds": (
                round(self._init_end - self._init_start, 3)
                if self._init_start is not None and self._init_end is not None
                else None
            ),
        }

    # ========================================================================
    # Services
    # ========================================================================

    @property
    def store(self) -> PlayerRecordStore:
        if not self._initialized or self._store is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return self._store

    @property
    def processor(self) -> ExperienceEventProcessor:
        if not self._initialized or self._processor is None:
            raise RuntimeError("ServiceContainer not initialized. Call initialize() first.")
        return self._processor


def create_container(
    *, config_dir: Optional[Path] = None, emit_config_events: bool = True
) -> ServiceContainer:
    """
    Build a container with its own ConfigManager and EventBus.

    `config.updated` notifications are routed to the new bus.
    """
    manager = ConfigManager(config_dir=config_dir, emit_events=emit_config_events)
    bus = EventBus(config_manager=manager)
    manager.attach_event_bus(bus)
    return ServiceContainer(config_manager=manager, event_bus=bus)
