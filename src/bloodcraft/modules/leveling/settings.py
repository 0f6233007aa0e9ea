"""
Leveling settings snapshot.

Purpose
-------
Reads the `leveling.*` configuration tree into a frozen `LevelingSettings`
value. Callers take one snapshot per computation, so a concurrent
configuration write affects the next computation only and never a
half-finished one.

Also registers the per-key write validators for `leveling.*` on a
ConfigManager, keeping the curve well-formed at runtime.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Callable, Dict

from bloodcraft.core.config.errors import ConfigValidationError
from bloodcraft.modules.leveling import constants as c

if TYPE_CHECKING:
    from bloodcraft.core.config.manager import ConfigManager

CONFIG_PREFIX = "leveling"


@dataclass(frozen=True, slots=True)
class LevelingSettings:
    """
    Tunables consumed by the curve, reward formulas, store and processor.

    Examples
    --------
    >>> settings = LevelingSettings(max_level=50)
    >>> settings.growth_factor
    1.1
    """

    max_level: int = c.DEFAULT_MAX_LEVEL
    base_exp_per_level: float = c.DEFAULT_BASE_EXP_PER_LEVEL
    growth_factor: float = c.DEFAULT_GROWTH_FACTOR
    base_exp_multiplier: float = c.DEFAULT_BASE_EXP_MULTIPLIER
    group_multiplier: float = c.DEFAULT_GROUP_MULTIPLIER
    vblood_multiplier: float = c.DEFAULT_VBLOOD_MULTIPLIER
    unit_multiplier: float = c.DEFAULT_UNIT_MULTIPLIER
    level_scaling_factor: float = c.DEFAULT_LEVEL_SCALING_FACTOR
    show_level_up_effects: bool = c.DEFAULT_SHOW_LEVEL_UP_EFFECTS
    show_experience_log: bool = c.DEFAULT_SHOW_EXPERIENCE_LOG
    show_scrolling_combat_text: bool = c.DEFAULT_SHOW_SCROLLING_COMBAT_TEXT

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> LevelingSettings:
        """Snapshot the current `leveling.*` values, defaulting absent keys."""
        values: Dict[str, Any] = {}
        for f in fields(cls):
            default = f.default
            raw = config_manager.get(f"{CONFIG_PREFIX}.{f.name}", default)
            if isinstance(default, bool):
                values[f.name] = bool(raw)
            elif isinstance(default, int):
                values[f.name] = int(raw)
            else:
                values[f.name] = float(raw)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_SETTINGS = LevelingSettings()


# ============================================================================
# Write validators
# ============================================================================


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(f"{key} must be a number; got {type(value).__name__}")
    if not math.isfinite(value):
        raise ConfigValidationError(f"{key} must be finite; got {value}")
    return value


def _validate_max_level(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigValidationError(
            f"leveling.max_level must be int; got {type(value).__name__}"
        )
    if not 1 <= value <= c.MAX_LEVEL_UPPER_BOUND:
        raise ConfigValidationError(
            f"leveling.max_level must be in [1, {c.MAX_LEVEL_UPPER_BOUND}]; got {value}"
        )
    return value


def _validate_base_exp_per_level(value: Any) -> Any:
    number = _number(value, "leveling.base_exp_per_level")
    if not 0 < number <= c.MAX_BASE_EXP_PER_LEVEL:
        raise ConfigValidationError(
            f"leveling.base_exp_per_level must be in (0, {c.MAX_BASE_EXP_PER_LEVEL:g}]; got {value}"
        )
    return value


def _validate_growth_factor(value: Any) -> Any:
    number = _number(value, "leveling.growth_factor")
    if not 0 < number <= c.MAX_GROWTH_FACTOR:
        raise ConfigValidationError(
            f"leveling.growth_factor must be in (0, {c.MAX_GROWTH_FACTOR}]; got {value}"
        )
    return value


def _non_negative(key: str) -> Callable[[Any], Any]:
    def validate(value: Any) -> Any:
        if _number(value, key) < 0:
            raise ConfigValidationError(f"{key} must be non-negative; got {value}")
        return value

    validate.__name__ = f"validate_{key.rsplit('.', 1)[-1]}"
    return validate


def register_leveling_validators(config_manager: ConfigManager) -> None:
    """Attach bounds checks for every numeric `leveling.*` key."""
    config_manager.register_validator(f"{CONFIG_PREFIX}.max_level", _validate_max_level)
    config_manager.register_validator(
        f"{CONFIG_PREFIX}.base_exp_per_level", _validate_base_exp_per_level
    )
    config_manager.register_validator(
        f"{CONFIG_PREFIX}.growth_factor", _validate_growth_factor
    )
    for name in (
        "base_exp_multiplier",
        "group_multiplier",
        "vblood_multiplier",
        "unit_multiplier",
        "level_scaling_factor",
    ):
        key = f"{CONFIG_PREFIX}.{name}"
        config_manager.register_validator(key, _non_negative(key))
