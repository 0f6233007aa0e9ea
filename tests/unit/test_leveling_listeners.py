"""
Unit tests for the default progression log listeners.
"""

import logging

import pytest

from bloodcraft.core.event.types import ListenerPriority
from bloodcraft.modules.leveling.events import EXPERIENCE_GAINED, LEVEL_CHANGED
from bloodcraft.modules.leveling.listeners import LevelingLogListeners

LISTENER_LOGGER = "bloodcraft.modules.leveling.listeners"


def _messages(caplog, message):
    return [r for r in caplog.records if r.name == LISTENER_LOGGER and r.getMessage() == message]


@pytest.mark.unit
class TestLifecycle:
    def test_start_subscribes_low_priority(self, mock_config_manager, mock_event_bus):
        listeners = LevelingLogListeners(mock_config_manager, mock_event_bus)

        listeners.start()
        listeners.start()

        assert listeners.is_started
        assert mock_event_bus.subscribe.call_count == 2
        subscribed = [c.args[0] for c in mock_event_bus.subscribe.call_args_list]
        assert subscribed == [EXPERIENCE_GAINED, LEVEL_CHANGED]
        for c in mock_event_bus.subscribe.call_args_list:
            assert c.kwargs["priority"] is ListenerPriority.LOW

    def test_stop_unsubscribes(self, config_manager, event_bus):
        listeners = LevelingLogListeners(config_manager, event_bus)
        listeners.start()
        assert event_bus.get_listener_count() == 2

        listeners.stop()

        assert not listeners.is_started
        assert event_bus.get_listener_count() == 0


@pytest.mark.unit
@pytest.mark.asyncio
class TestHandlers:
    async def test_experience_log(self, config_manager, event_bus, caplog):
        listeners = LevelingLogListeners(config_manager, event_bus)

        with caplog.at_level(logging.INFO, logger=LISTENER_LOGGER):
            await listeners.on_experience_gained(
                {"player_id": 1, "amount": 24.0, "total_experience": 124.0, "level": 1}
            )

        (record,) = _messages(caplog, "Player gained experience")
        assert record.amount == 24.0
        assert record.scrolling_combat_text is True

    async def test_experience_log_disabled(self, config_manager, event_bus, caplog):
        await config_manager.set("leveling.show_experience_log", False, emit_event=False)
        listeners = LevelingLogListeners(config_manager, event_bus)

        with caplog.at_level(logging.INFO, logger=LISTENER_LOGGER):
            await listeners.on_experience_gained({"player_id": 1, "amount": 1.0})

        assert _messages(caplog, "Player gained experience") == []

    async def test_scrolling_text_toggle_flags_record(self, config_manager, event_bus, caplog):
        await config_manager.set(
            "leveling.show_scrolling_combat_text", False, emit_event=False
        )
        listeners = LevelingLogListeners(config_manager, event_bus)

        with caplog.at_level(logging.INFO, logger=LISTENER_LOGGER):
            await listeners.on_experience_gained({"player_id": 1, "amount": 5.0})

        (record,) = _messages(caplog, "Player gained experience")
        assert record.scrolling_combat_text is False

    async def test_level_up_flags_effects(self, config_manager, event_bus, caplog):
        listeners = LevelingLogListeners(config_manager, event_bus)

        with caplog.at_level(logging.INFO, logger=LISTENER_LOGGER):
            await listeners.on_level_changed({"player_id": 1, "old_level": 1, "new_level": 2})
            await listeners.on_level_changed({"player_id": 1, "old_level": 2, "new_level": 0})

        up, down = _messages(caplog, "Player level changed")
        assert up.effects is True
        assert down.effects is False

    async def test_effects_disabled(self, config_manager, event_bus, caplog):
        await config_manager.set("leveling.show_level_up_effects", False, emit_event=False)
        listeners = LevelingLogListeners(config_manager, event_bus)

        with caplog.at_level(logging.INFO, logger=LISTENER_LOGGER):
            await listeners.on_level_changed({"player_id": 1, "old_level": 1, "new_level": 2})

        (record,) = _messages(caplog, "Player level changed")
        assert record.effects is False
