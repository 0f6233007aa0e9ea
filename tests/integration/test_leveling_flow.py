"""
End-to-end leveling flow through the service container.

Loads the YAML shipped in `config/`, processes kills and admin actions
through the container's processor/store, and checks notifications,
presentation output and shutdown.
"""

import logging
from pathlib import Path

import pytest

from bloodcraft.core.container import ServiceContainer, create_container
from bloodcraft.core.config.errors import ConfigWriteError
from bloodcraft.modules.leveling.events import ALL_LEVELING_EVENTS
from bloodcraft.ui import format_level_status

REPO_CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"

HUNTER = 76561198000000011
MAGE = 76561198000000012


@pytest.fixture
def container() -> ServiceContainer:
    return create_container(config_dir=REPO_CONFIG_DIR)


@pytest.mark.integration
def test_services_unavailable_before_initialize(container):
    with pytest.raises(RuntimeError):
        container.store
    with pytest.raises(RuntimeError):
        container.processor


@pytest.mark.integration
@pytest.mark.asyncio
async def test_full_progression_flow(container, caplog):
    leveling_events = []

    async def capture(payload):
        leveling_events.append(payload)

    await container.initialize()
    container.event_bus.subscribe(ALL_LEVELING_EVENTS, capture, identifier="test-capture")

    store = container.store
    processor = container.processor
    assert container.config_manager.get("leveling.max_level") == 100
    assert container.health_check()["initialized"] is True

    with caplog.at_level(logging.INFO):
        # Group kill: base (10 + 10) * 1.2 = 24 each, no scaling at level 0
        for _ in range(5):
            await processor.on_entity_killed(10, 100.0, False, [HUNTER, MAGE])

        # V Blood boss, hunter alone
        await processor.on_entity_killed(20, 1_000.0, True, [HUNTER])
        await container.event_bus.drain(timeout=1.0)

    assert store.get_experience(MAGE) == pytest.approx(120.0)
    assert store.get_level(MAGE) == 1
    assert store.get_experience(HUNTER) == pytest.approx(120.0 + 600.0)
    assert store.get_level(HUNTER) == 5

    assert any(r.getMessage() == "Player level changed" for r in caplog.records)
    assert {p["player_id"] for p in leveling_events} == {HUNTER, MAGE}

    status = format_level_status(store.snapshot(HUNTER))
    assert status.startswith("<color=#CCCCCC>Level 5</color> (Novice)\n")

    # Admin actions
    await processor.give_experience(MAGE, 1e9)
    assert store.is_max_level(MAGE)
    assert "Max level reached!" in format_level_status(store.snapshot(MAGE))

    await store.reset_progress(MAGE)
    assert store.get_level(MAGE) == 0

    await container.shutdown()
    assert not container.initialized
    assert container.event_bus.get_background_task_count() == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_runtime_rebalance(container):
    await container.initialize()
    manager = container.config_manager

    with pytest.raises(ConfigWriteError):
        await manager.set("leveling.growth_factor", 3.0, modified_by="admin")

    await manager.set("leveling.group_multiplier", 2.0, modified_by="admin")
    awarded = await container.processor.process_kill(10, 100.0, False, [HUNTER, MAGE])

    assert awarded == {HUNTER: pytest.approx(40.0), MAGE: pytest.approx(40.0)}

    await manager.set("leveling.max_level", 2, modified_by="admin")
    await container.processor.give_experience(HUNTER, 10_000.0)

    assert container.store.get_level(HUNTER) == 2
    assert container.store.get_experience(HUNTER) == pytest.approx(210.0)

    await container.shutdown()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_initialize_twice_keeps_single_listener_set(container):
    await container.initialize()
    await container.initialize()

    assert container.event_bus.get_listener_count() == 2

    await container.shutdown()
    assert container.event_bus.get_listener_count() == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_out_of_range_yaml_cap_falls_back_to_default(tmp_path):
    (tmp_path / "leveling.yaml").write_text("leveling:\n  max_level: -5\n", encoding="utf-8")
    container = create_container(config_dir=tmp_path)
    await container.initialize()

    await container.store.add_experience(HUNTER, 50.0)

    assert container.config_manager.get("leveling.max_level") is None
    assert container.store.get_level(HUNTER) == 0
    assert container.store.get_experience(HUNTER) == pytest.approx(50.0)

    await container.shutdown()
