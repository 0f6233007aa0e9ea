"""
Unit tests for the configuration subsystem.

Tests YAML loading, dot-notation reads, validated writes, `config.updated`
notifications and schema validation.
"""

import pytest

from bloodcraft.core.config.config import Config
from bloodcraft.core.config.errors import ConfigValidationError, ConfigWriteError
from bloodcraft.core.config.manager import CONFIG_UPDATED_EVENT, ConfigManager
from bloodcraft.core.config.validator import (
    ConfigSchema,
    get_schema_for_top_key,
    register_schema,
    unregister_schema,
    validate_config_value,
)
from bloodcraft.modules.leveling.settings import (
    DEFAULT_SETTINGS,
    LevelingSettings,
    register_leveling_validators,
)


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


# ============================================================================
# YAML LOADING
# ============================================================================


@pytest.mark.unit
class TestYamlLoading:
    def test_missing_directory_uses_builtins(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path / "missing")

        assert manager.load_yaml_defaults() == 0
        assert manager.get("core.store.lock_shards") == 64

    def test_yaml_deep_merges_over_builtins(self, tmp_path):
        _write(tmp_path / "core.yaml", "core:\n  store:\n    lock_shards: 8\n")
        manager = ConfigManager(config_dir=tmp_path)

        assert manager.load_yaml_defaults() == 1
        assert manager.get("core.store.lock_shards") == 8
        assert manager.get("core.event.listener_timeout.high_seconds") == 5.0

    def test_nested_files_loaded_in_sorted_order(self, tmp_path):
        (tmp_path / "overrides").mkdir()
        _write(tmp_path / "a.yaml", "leveling:\n  max_level: 80\n")
        _write(tmp_path / "overrides" / "b.yml", "leveling:\n  max_level: 60\n")
        manager = ConfigManager(config_dir=tmp_path)

        assert manager.load_yaml_defaults() == 2
        assert manager.get("leveling.max_level") == 60

    def test_invalid_subtree_is_skipped(self, tmp_path):
        _write(
            tmp_path / "bad.yaml",
            "leveling:\n  max_level: lots\ncore:\n  store:\n    lock_shards: 4\n",
        )
        manager = ConfigManager(config_dir=tmp_path)

        manager.load_yaml_defaults()

        assert manager.get("leveling.max_level", 100) == 100
        assert manager.get("core.store.lock_shards") == 4
        assert manager.get_metrics()["errors"] == 1

    @pytest.mark.parametrize(
        "key,raw",
        [("max_level", "-5"), ("growth_factor", "0.0"), ("base_exp_per_level", "-1")],
    )
    def test_out_of_range_leaf_keeps_default(self, tmp_path, key, raw):
        _write(
            tmp_path / "leveling.yaml",
            f"leveling:\n  {key}: {raw}\n  vblood_multiplier: 3.0\n",
        )
        manager = ConfigManager(config_dir=tmp_path)
        register_leveling_validators(manager)

        manager.load_yaml_defaults()

        assert manager.get(f"leveling.{key}") is None
        assert getattr(LevelingSettings.from_config(manager), key) == getattr(
            DEFAULT_SETTINGS, key
        )
        assert manager.get("leveling.vblood_multiplier") == 3.0
        assert manager.get_metrics()["errors"] == 1

    def test_malformed_yaml_is_skipped(self, tmp_path):
        _write(tmp_path / "broken.yaml", "leveling: [unclosed\n")
        _write(tmp_path / "good.yaml", "leveling:\n  growth_factor: 1.2\n")
        manager = ConfigManager(config_dir=tmp_path)

        assert manager.load_yaml_defaults() == 1
        assert manager.get("leveling.growth_factor") == 1.2

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, tmp_path):
        _write(tmp_path / "leveling.yaml", "leveling:\n  max_level: 70\n")
        manager = ConfigManager(config_dir=tmp_path)

        await manager.initialize()
        await manager.set("leveling.max_level", 40, emit_event=False)
        await manager.initialize()

        assert manager.initialized
        assert manager.get("leveling.max_level") == 40


# ============================================================================
# READS & WRITES
# ============================================================================


@pytest.mark.unit
class TestReads:
    def test_unknown_keys_return_default(self, config_manager):
        assert config_manager.get("leveling.nonexistent", "fallback") == "fallback"
        assert config_manager.get("nothing.here") is None

    def test_reads_never_raise_on_scalar_paths(self, config_manager):
        assert config_manager.get("core.store.lock_shards.deeper", 1) == 1


@pytest.mark.unit
@pytest.mark.asyncio
class TestWrites:
    async def test_set_then_get(self, config_manager):
        await config_manager.set("leveling.growth_factor", 1.15, modified_by="admin")

        assert config_manager.get("leveling.growth_factor") == 1.15
        assert config_manager.get_cache_age("leveling") is not None

    async def test_write_keeps_sibling_keys(self, config_manager):
        await config_manager.set("core.event.listener_timeout.high_seconds", 2.0)

        assert config_manager.get("core.event.listener_timeout.critical_seconds") == 5.0
        assert config_manager.get("core.store.lock_shards") == 64

    @pytest.mark.parametrize("key", ["", "leveling.", ".max_level", "leveling..max_level"])
    async def test_empty_key_segments_rejected(self, config_manager, key):
        with pytest.raises(ConfigWriteError):
            await config_manager.set(key, 1)

    async def test_schema_rejection_keeps_previous_value(self, config_manager):
        await config_manager.set("core.store.lock_shards", 16)

        with pytest.raises(ConfigWriteError) as exc_info:
            await config_manager.set("core.store.lock_shards", "sixteen")

        assert isinstance(exc_info.value.__cause__, ConfigValidationError)
        assert config_manager.get("core.store.lock_shards") == 16

    async def test_custom_validator_may_transform(self, config_manager):
        config_manager.register_validator("custom.name", lambda value: str(value).strip())

        await config_manager.set("custom.name", "  bloodcraft  ")

        assert config_manager.get("custom.name") == "bloodcraft"

    async def test_config_updated_published(self, config_manager, event_bus):
        received = []

        async def on_config_updated(payload):
            received.append(payload)

        event_bus.subscribe(CONFIG_UPDATED_EVENT, on_config_updated)

        await config_manager.set("leveling.max_level", 90, modified_by="admin:42")

        assert len(received) == 1
        payload = received[0]
        assert payload["config_key"] == "leveling.max_level"
        assert payload["top_level_key"] == "leveling"
        assert payload["previous_value"] is None
        assert payload["new_value"] == 90
        assert payload["modified_by"] == "admin:42"
        assert "timestamp" in payload

    async def test_event_emission_can_be_disabled(self, config_manager, mock_event_bus):
        config_manager.attach_event_bus(mock_event_bus)

        await config_manager.set("leveling.max_level", 90, emit_event=False)
        config_manager.set_event_emission(False)
        await config_manager.set("leveling.max_level", 80)

        mock_event_bus.publish.assert_not_awaited()

    async def test_reset_discards_runtime_writes(self, config_manager):
        await config_manager.set("leveling.max_level", 90, emit_event=False)

        config_manager.reset()

        assert config_manager.get("leveling.max_level", 100) == 100


# ============================================================================
# SCHEMA
# ============================================================================


@pytest.mark.unit
class TestSchema:
    def test_int_accepted_for_float(self):
        validate_config_value("leveling", {"growth_factor": 1})

    def test_bool_rejected_for_numbers(self):
        with pytest.raises(ConfigValidationError):
            validate_config_value("leveling", {"max_level": True})
        with pytest.raises(ConfigValidationError):
            validate_config_value("core", {"event": {"listener_timeout": {"high_seconds": False}}})

    def test_nested_error_reports_path(self):
        with pytest.raises(ConfigValidationError, match="core.store.lock_shards"):
            validate_config_value("core", {"store": {"lock_shards": 1.5}})

    def test_unregistered_top_key_is_unchecked(self):
        assert get_schema_for_top_key("custom") is None
        validate_config_value("custom", {"anything": object()})

    def test_register_and_unregister(self):
        register_schema("testing", ConfigSchema(fields={"flag": bool}, allow_extra=False))
        try:
            with pytest.raises(ConfigValidationError):
                validate_config_value("testing", {"other": 1})
        finally:
            unregister_schema("testing")

        assert get_schema_for_top_key("testing") is None


@pytest.mark.unit
def test_static_config_summary():
    summary = Config.get_config_summary()

    assert "environment" in summary
    assert summary["config_dir"] == str(Config.CONFIG_DIR)


@pytest.mark.unit
def test_static_config_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("ENVIRONMENT", "Production")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    monkeypatch.setenv("LOG_TO_FILE", "yes")
    monkeypatch.setenv("CONFIG_DIR", str(tmp_path))

    try:
        Config.load()

        assert Config.is_production()
        assert Config.LOG_LEVEL == "INFO"
        assert Config.LOG_TO_FILE is True
        assert Config.CONFIG_DIR == tmp_path
        assert "LOG_LEVEL" in Config.get_metrics()["problems"]
    finally:
        monkeypatch.undo()
        Config.load()
