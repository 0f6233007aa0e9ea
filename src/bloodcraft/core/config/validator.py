"""
Structural checks for dynamic configuration subtrees.

Every write the ConfigManager applies is checked here first, against the
schema registered for its top-level key (`leveling`, `core`, ...). Schemas
check shape and type only; value bounds such as `max_level >= 1` are per-key
validators registered on the manager.

Rules
-----
- A subtree must be a mapping.
- Missing fields are fine; configs may be sparse.
- An int is accepted where a float is expected. A bool never counts as a
  number.
- Unknown fields are allowed unless the schema sets `allow_extra=False`.
- Top-level keys without a schema are not checked.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from bloodcraft.core.config.errors import ConfigValidationError

SchemaField = Union[type, "ConfigSchema"]


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _check_type(raw: Any, expected: type, path: str) -> None:
    numeric = expected in (int, float)
    if numeric and isinstance(raw, bool):
        ok = False
    elif expected is float:
        ok = isinstance(raw, (int, float))
    else:
        ok = isinstance(raw, expected)

    if not ok:
        raise ConfigValidationError(
            f"Config value at '{path}' must be {expected.__name__}; got {type(raw).__name__}"
        )


@dataclass(slots=True)
class ConfigSchema:
    """
    Expected shape of one config subtree; fields may nest further schemas.

    >>> ConfigSchema(fields={"max_level": int}).validate({"max_level": "high"}, "leveling")
    Traceback (most recent call last):
        ...
    ConfigValidationError: Config value at 'leveling.max_level' must be int; got str
    """

    fields: Mapping[str, SchemaField]
    allow_extra: bool = True

    def validate(self, value: Any, path: str = "") -> Any:
        """Return `value` unchanged, or raise naming the offending dot path."""
        where = path or "<root>"
        if not isinstance(value, Mapping):
            raise ConfigValidationError(
                f"Config value at '{where}' must be a mapping; got {type(value).__name__}"
            )

        for key, expected in self.fields.items():
            if key not in value:
                continue
            if isinstance(expected, ConfigSchema):
                expected.validate(value[key], path=_join(path, key))
            else:
                _check_type(value[key], expected, _join(path, key))

        if not self.allow_extra:
            unknown = sorted(str(key) for key in value if key not in self.fields)
            if unknown:
                raise ConfigValidationError(
                    f"Unexpected config keys at '{where}': {', '.join(unknown)}"
                )

        return value


# ============================================================================
# Schema Registry
# ============================================================================

_SCHEMAS: Dict[str, ConfigSchema] = {
    # Player progression tunables
    "leveling": ConfigSchema(
        fields={
            "max_level": int,
            "base_exp_per_level": float,
            "growth_factor": float,
            "base_exp_multiplier": float,
            "group_multiplier": float,
            "vblood_multiplier": float,
            "unit_multiplier": float,
            "level_scaling_factor": float,
            "show_level_up_effects": bool,
            "show_experience_log": bool,
            "show_scrolling_combat_text": bool,
        },
        allow_extra=False,
    ),

    # Core system configuration
    "core": ConfigSchema(
        fields={
            "store": ConfigSchema(
                fields={"lock_shards": int},
                allow_extra=True,
            ),
            "event": ConfigSchema(
                fields={
                    "listener_timeout": ConfigSchema(
                        fields={
                            "critical_seconds": float,
                            "high_seconds": float,
                        },
                        allow_extra=True,
                    ),
                },
                allow_extra=True,
            ),
        },
        allow_extra=True,
    ),
}


def get_schema_for_top_key(top_key: str) -> Optional[ConfigSchema]:
    return _SCHEMAS.get(top_key)


def register_schema(top_key: str, schema: ConfigSchema) -> None:
    _SCHEMAS[top_key] = schema


def unregister_schema(top_key: str) -> Optional[ConfigSchema]:
    return _SCHEMAS.pop(top_key, None)


def validate_config_value(top_key: str, value: Any) -> Any:
    """
    Check a whole top-level subtree; unschema'd keys pass untouched.

    >>> validate_config_value("leveling", {"max_level": 80})
    {'max_level': 80}
    """
    schema = _SCHEMAS.get(top_key)
    return value if schema is None else schema.validate(value, path=top_key)


__all__ = [
    "ConfigSchema",
    "SchemaField",
    "get_schema_for_top_key",
    "register_schema",
    "unregister_schema",
    "validate_config_value",
]
