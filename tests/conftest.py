"""
Pytest Configuration and Fixtures for Bloodcraft Tests
=======================================================

Purpose
-------
Centralized test fixtures for the Bloodcraft leveling test suite.
Provides isolated config managers, event buses, services and mocks.

Responsibilities
----------------
- Isolated ConfigManager/EventBus pairs (no process-wide state)
- Store and processor fixtures wired to them
- Event recording helper for asserting published notifications
- Mocks for unit tests that only check collaborator calls

Architecture Notes
------------------
- Unit tests use an empty config directory, so values come from built-in
  defaults and module constants
- Integration tests load the YAML shipped in `config/`
- Async tests are marked with `@pytest.mark.asyncio`
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

from bloodcraft.core.config.manager import ConfigManager
from bloodcraft.core.event.bus import EventBus
from bloodcraft.core.event.types import ListenerPriority
from bloodcraft.modules.leveling.events import EXPERIENCE_GAINED, LEVEL_CHANGED
from bloodcraft.modules.leveling.processor import ExperienceEventProcessor
from bloodcraft.modules.leveling.settings import register_leveling_validators
from bloodcraft.modules.leveling.store import PlayerRecordStore

PROJECT_ROOT = Path(__file__).resolve().parents[1]
REPO_CONFIG_DIR = PROJECT_ROOT / "config"

PLAYER_ONE = 76561198000000001
PLAYER_TWO = 76561198000000002
PLAYER_THREE = 76561198000000003

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ.setdefault("ENVIRONMENT", "testing")
    os.environ.setdefault("LOG_LEVEL", "DEBUG")


# ============================================================================
# EVENT RECORDING
# ============================================================================


class EventRecorder:
    """
    Collects leveling notifications in publish order.

    Usage:
        recorder.attach(event_bus)
        await store.add_experience(PLAYER_ONE, 150.0)
        assert recorder.names() == [EXPERIENCE_GAINED, LEVEL_CHANGED]
    """

    def __init__(self) -> None:
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def attach(self, bus: EventBus) -> None:
        async def on_experience_gained(payload: Dict[str, Any]) -> None:
            self.events.append((EXPERIENCE_GAINED, payload))

        async def on_level_changed(payload: Dict[str, Any]) -> None:
            self.events.append((LEVEL_CHANGED, payload))

        bus.subscribe(EXPERIENCE_GAINED, on_experience_gained, priority=ListenerPriority.HIGH)
        bus.subscribe(LEVEL_CHANGED, on_level_changed, priority=ListenerPriority.HIGH)

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def payloads(self, event_name: str) -> List[Dict[str, Any]]:
        return [payload for name, payload in self.events if name == event_name]

    def clear(self) -> None:
        self.events.clear()


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture
def config_manager(tmp_path) -> ConfigManager:
    """
    ConfigManager over an empty config directory with leveling validators.

    Scope: function
    """
    manager = ConfigManager(config_dir=tmp_path)
    register_leveling_validators(manager)
    return manager


@pytest.fixture
def event_bus(config_manager) -> EventBus:
    """Isolated EventBus; `config.updated` from the fixture manager lands here."""
    bus = EventBus(config_manager=config_manager)
    config_manager.attach_event_bus(bus)
    return bus


@pytest.fixture
def recorder(event_bus) -> EventRecorder:
    rec = EventRecorder()
    rec.attach(event_bus)
    return rec


@pytest.fixture
def store(config_manager, event_bus) -> PlayerRecordStore:
    return PlayerRecordStore(config_manager, event_bus)


@pytest.fixture
def processor(config_manager, event_bus, store) -> ExperienceEventProcessor:
    return ExperienceEventProcessor(config_manager, event_bus, store)


# ============================================================================
# MOCK FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def mock_event_bus(mocker):
    """
    Mock EventBus for unit tests.

    Scope: function
    Uses: Unit tests that only check what was published
    """
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock(return_value=[])
    mock_bus.subscribe = mocker.MagicMock(side_effect=lambda name, cb, **kw: f"id@{name}")
    mock_bus.unsubscribe = mocker.MagicMock(return_value=True)
    return mock_bus


@pytest.fixture
def mock_config_manager(mocker):
    """
    Mock ConfigManager returning each key's default.

    Scope: function
    """
    mock_config = mocker.MagicMock()
    mock_config.get = mocker.MagicMock(side_effect=lambda key, default=None: default)
    return mock_config
