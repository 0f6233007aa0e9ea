"""
ConfigManager: dynamic, in-memory configuration access for Bloodcraft.

Purpose
-------
- Provide hierarchical, dot-notation access to tunable configuration values
  (`leveling.*` gameplay tunables, `core.*` infrastructure knobs).
- Back configuration with built-in infrastructure defaults deep-merged with
  YAML files from the config directory.
- Enable live balance changes through validated writes that publish a
  `config.updated` event.

Responsibilities
----------------
- Load and merge YAML defaults from `Config.CONFIG_DIR` (or an explicit dir).
- Serve reads from an in-memory tree; reads never raise and fall back to the
  caller's default for unknown keys.
- Apply writes under an asyncio.Lock after schema validation (per top-level
  key) and per-key validators (per exact dot key).
- Publish `config.updated` on the event bus after every accepted write.

Non-Responsibilities
--------------------
- Persistence of overrides (writes live for the process lifetime)
- Interpreting gameplay values (see `bloodcraft.modules.leveling.settings`)

Key Design Decisions
--------------------
- YAML is the single source for gameplay defaults; the built-in tree only
  carries infrastructure fallbacks.
- A write replaces the whole top-level subtree atomically, so readers never
  observe a half-applied change. Changes apply to the next computation that
  reads them.
- Instance-based, with a module-level default instance (`config_manager`)
  so tests can build isolated managers.

Dependencies
------------
- PyYAML for config files
- `bloodcraft.core.config.validator` for schema validation
- `bloodcraft.core.event` (lazily) for change notifications
"""

from __future__ import annotations

import asyncio
import copy
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, MutableMapping, Optional, TYPE_CHECKING

import yaml

from bloodcraft.core.config.config import Config
from bloodcraft.core.config.errors import (
    ConfigInitializationError,
    ConfigValidationError,
    ConfigWriteError,
)
from bloodcraft.core.config.validator import validate_config_value
from bloodcraft.core.logging.logger import get_logger

if TYPE_CHECKING:
    from bloodcraft.core.event.bus import EventBus

logger = get_logger(__name__)

CONFIG_UPDATED_EVENT = "config.updated"

# Infrastructure fallbacks only; gameplay defaults live in YAML and in the
# consuming module's constants.
BUILTIN_DEFAULTS: Dict[str, Any] = {
    "core": {
        "store": {
            "lock_shards": 64,
        },
        "event": {
            "listener_timeout": {
                "critical_seconds": 5.0,
                "high_seconds": 5.0,
            },
        },
    },
}


@dataclass(slots=True)
class ConfigMetrics:
    gets: int = 0
    sets: int = 0
    errors: int = 0
    fallback_to_defaults: int = 0
    yaml_files_loaded: int = 0
    total_set_time_ms: float = 0.0


# ============================================================================
# ConfigManager
# ============================================================================


class ConfigManager:
    """
    Dynamic configuration management with validated writes.

    Features
    --------
    - Hierarchical config access with dot notation (e.g. `"leveling.max_level"`).
    - YAML defaults deep-merged over built-in infrastructure defaults.
    - Recursive schema-based validation plus per-key validators on write.
    - `config.updated` notifications on the event bus.

    Examples
    --------
    >>> manager = ConfigManager(config_dir=Path("config"))
    >>> await manager.initialize()
    >>> manager.get("leveling.max_level", 100)
    100
    >>> await manager.set("leveling.max_level", 80, modified_by="admin")
    """

    def __init__(
        self,
        *,
        config_dir: Optional[Path] = None,
        defaults: Optional[Dict[str, Any]] = None,
        event_bus: Optional["EventBus"] = None,
        emit_events: bool = True,
    ) -> None:
        self._config_dir = config_dir
        self._defaults: Dict[str, Any] = copy.deepcopy(
            BUILTIN_DEFAULTS if defaults is None else defaults
        )
        self._cache: Dict[str, Any] = copy.deepcopy(self._defaults)
        self._cache_timestamps: Dict[str, datetime] = {}

        self._validators: Dict[str, Callable[[Any], Any]] = {}
        self._event_bus = event_bus
        self._emit_events = emit_events

        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

        self._metrics = ConfigMetrics()

    # =========================================================================
    # YAML LOADING & DEFAULTS
    # =========================================================================

    @property
    def config_dir(self) -> Path:
        return Path(self._config_dir) if self._config_dir is not None else Config.CONFIG_DIR

    @staticmethod
    def _deep_merge_dict(
        target: MutableMapping[str, Any],
        source: MutableMapping[str, Any],
    ) -> None:
        """Recursively merge `source` into `target` (in-place)."""
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(target.get(key), dict):
                ConfigManager._deep_merge_dict(target[key], value)
            else:
                target[key] = copy.deepcopy(value)

    @staticmethod
    def _iter_leaves(prefix: str, tree: Any):
        if not isinstance(tree, dict):
            yield prefix, tree
            return
        for key, value in tree.items():
            yield from ConfigManager._iter_leaves(f"{prefix}.{key}", value)

    def _drop_invalid_leaves(self, top_key: str, subtree: Any, source: str) -> Any:
        """
        Run registered key validators over every YAML leaf under `top_key`.

        Rejected leaves are removed from the returned copy, so the previous
        default for that key stays in effect.
        """
        if not any(key == top_key or key.startswith(f"{top_key}.") for key in self._validators):
            return subtree

        kept = copy.deepcopy(subtree)
        for dot_key, value in self._iter_leaves(top_key, subtree):
            if dot_key not in self._validators:
                continue
            try:
                accepted = self._apply_validator(dot_key, value)
            except ConfigWriteError as exc:
                logger.error(
                    "Invalid config in YAML; keeping previous default for key",
                    extra={
                        "file": source,
                        "config_key": dot_key,
                        "error": str(exc.__cause__ or exc),
                    },
                )
                accepted = None

            parts = dot_key.split(".")[1:]
            if not parts:
                return accepted
            cursor = kept
            for segment in parts[:-1]:
                cursor = cursor[segment]
            if accepted is None:
                del cursor[parts[-1]]
            else:
                cursor[parts[-1]] = accepted
        return kept

    def _merge_validated(self, data: Dict[str, Any], source: str) -> None:
        """
        Merge a YAML document into defaults.

        Leaves rejected by a key validator and whole subtrees that fail the
        schema are skipped.
        """
        for top_key, subtree in data.items():
            subtree = self._drop_invalid_leaves(top_key, subtree, source)
            if subtree is None:
                continue
            candidate = copy.deepcopy(self._defaults.get(top_key))
            if isinstance(candidate, dict) and isinstance(subtree, dict):
                self._deep_merge_dict(candidate, subtree)
            else:
                candidate = subtree

            try:
                validate_config_value(top_key, candidate)
            except ConfigValidationError as exc:
                self._metrics.errors += 1
                logger.error(
                    "Invalid config in YAML; keeping previous defaults for key",
                    extra={
                        "file": source,
                        "config_key": top_key,
                        "error": str(exc),
                    },
                )
                continue

            self._defaults[top_key] = candidate

    def load_yaml_defaults(self) -> int:
        """
        Load all YAML config files from the config directory into defaults.

        Files are merged in sorted path order. Returns the number of files
        merged. A missing directory is not an error.
        """
        config_dir = self.config_dir
        if not config_dir.exists():
            logger.warning(
                "Config directory not found; using built-in defaults only",
                extra={"config_dir": str(config_dir)},
            )
            return 0

        yaml_files = sorted(
            list(config_dir.rglob("*.yaml")) + list(config_dir.rglob("*.yml"))
        )

        loaded_count = 0
        for yaml_file in yaml_files:
            relative = str(yaml_file.relative_to(config_dir))
            try:
                with yaml_file.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle)
            except (OSError, yaml.YAMLError) as exc:
                self._metrics.errors += 1
                logger.warning(
                    "Failed to load YAML config",
                    extra={
                        "file": relative,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )
                continue

            if isinstance(data, dict):
                self._merge_validated(data, relative)
                loaded_count += 1
                logger.debug("Loaded YAML config", extra={"file": relative})
            elif data is not None:
                logger.warning(
                    "Ignoring non-dict YAML root object",
                    extra={"file": relative, "root_type": type(data).__name__},
                )

        self._cache = copy.deepcopy(self._defaults)
        self._metrics.yaml_files_loaded = loaded_count

        logger.info(
            "YAML configs loaded",
            extra={
                "yaml_file_count": loaded_count,
                "total_cache_keys": len(self._cache),
                "config_dir": str(config_dir),
            },
        )
        return loaded_count

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Load YAML defaults once (idempotent).

        Raises
        ------
        ConfigInitializationError
            If the config directory exists but cannot be scanned.
        """
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            init_start = time.perf_counter()
            try:
                self.load_yaml_defaults()
            except OSError as exc:
                self._metrics.errors += 1
                logger.error(
                    "ConfigManager initialization failed",
                    extra={"error": str(exc), "config_dir": str(self.config_dir)},
                    exc_info=True,
                )
                raise ConfigInitializationError(
                    f"Failed to load configuration from {self.config_dir}"
                ) from exc

            self._initialized = True
            logger.info(
                "ConfigManager initialization completed",
                extra={"latency_ms": round((time.perf_counter() - init_start) * 1000, 2)},
            )

    # =========================================================================
    # EVENT EMISSION CONTROL
    # =========================================================================

    def attach_event_bus(self, event_bus: "EventBus") -> None:
        """Route `config.updated` notifications to a specific bus."""
        self._event_bus = event_bus

    def set_event_emission(self, enabled: bool) -> None:
        """Enable or disable EventBus publishing on config changes."""
        self._emit_events = enabled
        logger.info(
            "ConfigManager event emission updated",
            extra={"emit_events": enabled},
        )

    def _resolve_event_bus(self) -> "EventBus":
        if self._event_bus is None:
            from bloodcraft.core.event import event_bus

            return event_bus
        return self._event_bus

    # =========================================================================
    # VALIDATION HOOKS
    # =========================================================================

    def register_validator(self, key: str, validator: Callable[[Any], Any]) -> None:
        """
        Register a validator for an exact dot-notation key.

        Validators run on write and either return the value to store (possibly
        transformed) or raise to block the write.
        """
        self._validators[key] = validator
        logger.debug(
            "ConfigManager validator registered",
            extra={
                "config_key": key,
                "validator": getattr(validator, "__name__", "anonymous"),
            },
        )

    def _apply_validator(self, key: str, value: Any) -> Any:
        validator = self._validators.get(key)
        if validator is None:
            return value

        try:
            return validator(value)
        except (ConfigValidationError, TypeError, ValueError) as exc:
            self._metrics.errors += 1
            logger.error(
                "Config validation failed",
                extra={
                    "config_key": key,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            raise ConfigWriteError(f"Validation failed for config key '{key}'") from exc

    # =========================================================================
    # READ API
    # =========================================================================

    @staticmethod
    def _traverse(tree: Dict[str, Any], key: str) -> Any:
        value: Any = tree
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve a configuration value by dot-notation path.

        Falls back to loaded defaults, then to `default`. Never raises.

        Examples
        --------
        >>> manager.get("leveling.growth_factor", 1.1)
        1.1
        >>> manager.get("leveling.nonexistent", "fallback")
        'fallback'
        """
        self._metrics.gets += 1

        value = self._traverse(self._cache, key)
        if value is not None:
            return value

        fallback = self._traverse(self._defaults, key)
        if fallback is not None:
            self._metrics.fallback_to_defaults += 1
            return fallback

        return default

    def get_all_keys(self) -> List[str]:
        """Return all top-level configuration keys."""
        return list(self._cache.keys())

    def get_cache_age(self, key: str) -> Optional[int]:
        """Seconds since the top-level key was last written, or None."""
        timestamp = self._cache_timestamps.get(key)
        if timestamp is None:
            return None
        return int((datetime.now(timezone.utc) - timestamp).total_seconds())

    # =========================================================================
    # WRITE API
    # =========================================================================

    async def set(
        self,
        key: str,
        value: Any,
        modified_by: str = "system",
        emit_event: bool = True,
    ) -> None:
        """
        Validate and apply a configuration change.

        Parameters
        ----------
        key:
            Dot-notation configuration path (e.g. `"leveling.growth_factor"`).
        value:
            New value.
        modified_by:
            Identifier of the actor making the change (admin id, "system").
        emit_event:
            Whether to publish `config.updated` for this change. Subject to
            the instance-wide emission flag.

        Raises
        ------
        ConfigWriteError
            If the key is empty or the value fails schema or key validation.
        """
        start_time = time.perf_counter()
        self._metrics.sets += 1

        parts = key.split(".")
        if not key or any(not part for part in parts):
            raise ConfigWriteError(f"Invalid config key '{key}'")

        value_to_store = self._apply_validator(key, value)
        top_key = parts[0]

        async with self._write_lock:
            previous_value = copy.deepcopy(self._traverse(self._cache, key))

            if len(parts) > 1:
                current_top = self._cache.get(top_key)
                base: Dict[str, Any] = (
                    copy.deepcopy(current_top) if isinstance(current_top, dict) else {}
                )
                cursor = base
                for segment in parts[1:-1]:
                    nested = cursor.get(segment)
                    if not isinstance(nested, dict):
                        nested = {}
                        cursor[segment] = nested
                    cursor = nested
                cursor[parts[-1]] = value_to_store
                final_value: Any = base
            else:
                final_value = value_to_store

            try:
                validate_config_value(top_key, final_value)
            except ConfigValidationError as exc:
                self._metrics.errors += 1
                logger.error(
                    "Config write rejected by schema",
                    extra={
                        "config_key": key,
                        "modified_by": modified_by,
                        "error": str(exc),
                    },
                )
                raise ConfigWriteError(f"Failed to update config '{key}'") from exc

            self._cache[top_key] = final_value
            self._cache_timestamps[top_key] = datetime.now(timezone.utc)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._metrics.total_set_time_ms += elapsed_ms

        logger.info(
            "Configuration updated",
            extra={
                "config_key": key,
                "top_level_key": top_key,
                "modified_by": modified_by,
                "latency_ms": round(elapsed_ms, 2),
            },
        )

        if emit_event and self._emit_events:
            await self._resolve_event_bus().publish(
                CONFIG_UPDATED_EVENT,
                {
                    "config_key": key,
                    "top_level_key": top_key,
                    "previous_value": previous_value,
                    "new_value": copy.deepcopy(value_to_store),
                    "modified_by": modified_by,
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )

    # =========================================================================
    # CACHE CONTROL & METRICS
    # =========================================================================

    def reset(self) -> None:
        """
        Discard runtime writes and restore the loaded defaults.

        Intended for tests and controlled maintenance operations.
        """
        self._cache = copy.deepcopy(self._defaults)
        self._cache_timestamps.clear()
        logger.info("ConfigManager reset to defaults")

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot of read/write counters."""
        sets = self._metrics.sets
        return {
            "initialized": self._initialized,
            "cached_configs": len(self._cache),
            "gets": self._metrics.gets,
            "sets": sets,
            "errors": self._metrics.errors,
            "fallback_to_defaults": self._metrics.fallback_to_defaults,
            "yaml_files_loaded": self._metrics.yaml_files_loaded,
            "avg_set_time_ms": round(self._metrics.total_set_time_ms / sets, 3)
            if sets
            else 0.0,
        }


# Process-wide default instance
config_manager = ConfigManager()


__all__ = [
    "BUILTIN_DEFAULTS",
    "CONFIG_UPDATED_EVENT",
    "ConfigManager",
    "ConfigMetrics",
    "config_manager",
]
