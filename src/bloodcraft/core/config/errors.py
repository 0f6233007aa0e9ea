"""
Configuration errors.

ConfigError
├── ConfigValidationError      a value has the wrong shape, type or range
├── ConfigWriteError           `ConfigManager.set()` refused a write
└── ConfigInitializationError  defaults could not be loaded at startup
"""


class ConfigError(Exception):
    pass


class ConfigValidationError(ConfigError):
    """Raised by schemas and per-key validators."""


class ConfigWriteError(ConfigError):
    """
    Raised by `ConfigManager.set()`.

    When validation is the reason, the ConfigValidationError is chained as
    `__cause__`:

    >>> try:
    ...     await config_manager.set("leveling.max_level", "high")
    ... except ConfigWriteError as exc:
    ...     isinstance(exc.__cause__, ConfigValidationError)
    True
    """


class ConfigInitializationError(ConfigError):
    pass


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigWriteError",
    "ConfigInitializationError",
]
