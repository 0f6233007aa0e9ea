"""
Static process configuration for Bloodcraft.

Values are read once from the environment (a `.env` file is honored) and
describe how the process runs: environment name, logging output, and where
YAML defaults and log files live. Gameplay balance is not here; it belongs
to the dynamic ConfigManager under `leveling.*`.

Environment Variables
---------------------
- ENVIRONMENT: development | testing | staging | production (default: development)
- DEBUG: debug flag (default: False)
- LOG_LEVEL: DEBUG | INFO | WARNING | ERROR | CRITICAL (default: INFO)
- LOG_JSON: force JSON console output (default: on in production only)
- LOG_COLORS: colored console output in development (default: True)
- LOG_TO_FILE: daily rotating JSON log file (default: False)
- LOGS_DIR: log file directory (default: <project>/logs)
- CONFIG_DIR: YAML defaults directory (default: <project>/config)

Bad values never stop the process: they fall back to the default and are
recorded in `Config.get_metrics()`.
"""

import logging
import os
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()

_TRUE_WORDS = frozenset({"true", "yes", "1", "on"})
_FALSE_WORDS = frozenset({"false", "no", "0", "off"})
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Environment(Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Unknown names fall back to DEVELOPMENT.

        >>> Environment.from_string("Production") is Environment.PRODUCTION
        True
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            # Structured logging is not set up while Config loads.
            logging.warning("Unknown environment %r, defaulting to development", value)
            return cls.DEVELOPMENT


class _EnvReader:
    """Reads typed values from os.environ and remembers where each came from."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root
        self.sources: Dict[str, str] = {}
        self.problems: Dict[str, str] = {}
        self.last_reload: Optional[str] = None

    def _raw(self, key: str) -> Optional[str]:
        raw = os.getenv(key)
        self.sources[key] = "env" if raw is not None else "default"
        return raw

    def _fallback(self, key: str, raw: str, default: Any, expected: str) -> Any:
        problem = f"{key}={raw!r} is not {expected}, using {default!r}"
        self.sources[key] = "default"
        self.problems[key] = problem
        logging.warning(problem)
        return default

    def text(self, key: str, default: str) -> str:
        raw = self._raw(key)
        return default if raw is None else raw

    def flag(self, key: str, default: Optional[bool]) -> Optional[bool]:
        raw = self._raw(key)
        if raw is None:
            return default
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        return self._fallback(key, raw, default, "a boolean")

    def log_level(self, key: str, default: str) -> str:
        raw = self._raw(key)
        if raw is None:
            return default
        if raw.strip().upper() not in _LOG_LEVELS:
            return self._fallback(key, raw, default, "a log level")
        return raw.strip().upper()

    def directory(self, key: str, default: Path) -> Path:
        """Relative paths are taken from the project root."""
        raw = self._raw(key)
        if not raw:
            return default
        path = Path(raw)
        return path if path.is_absolute() else self.project_root / path

    def summary(self) -> Dict[str, Any]:
        from_env = sum(1 for source in self.sources.values() if source == "env")
        return {
            "total_configs": len(self.sources),
            "from_environment": from_env,
            "from_defaults": len(self.sources) - from_env,
            "validation_errors": len(self.problems),
            "last_reload": self.last_reload,
        }


class Config:
    """
    Class-level static settings, loaded at import.

    >>> Config.LOG_LEVEL
    'INFO'
    >>> Config.get_config_summary()["environment"]
    'development'
    """

    PROJECT_ROOT = Path(__file__).resolve().parents[4]

    ENVIRONMENT: str = Environment.DEVELOPMENT.value
    DEBUG: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOG_TO_FILE: bool = False

    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    CONFIG_DIR: Path = PROJECT_ROOT / "config"

    _env = _EnvReader(PROJECT_ROOT)

    @classmethod
    def load(cls) -> None:
        """(Re)read every setting from the environment."""
        env = cls._env
        env.problems.clear()
        cls.ENVIRONMENT = Environment.from_string(env.text("ENVIRONMENT", "development")).value
        cls.DEBUG = bool(env.flag("DEBUG", False))

        cls.LOG_LEVEL = env.log_level("LOG_LEVEL", "INFO")
        cls.LOG_JSON = env.flag("LOG_JSON", None)
        cls.LOG_COLORS = bool(env.flag("LOG_COLORS", True))
        cls.LOG_TO_FILE = bool(env.flag("LOG_TO_FILE", False))

        cls.LOGS_DIR = env.directory("LOGS_DIR", cls.PROJECT_ROOT / "logs")
        cls.CONFIG_DIR = env.directory("CONFIG_DIR", cls.PROJECT_ROOT / "config")

        env.last_reload = datetime.now(timezone.utc).isoformat()

        if cls.is_production() and cls.DEBUG:
            logging.warning("DEBUG mode enabled in production")

    @classmethod
    def is_production(cls) -> bool:
        return cls.ENVIRONMENT == Environment.PRODUCTION.value

    @classmethod
    def is_development(cls) -> bool:
        return cls.ENVIRONMENT == Environment.DEVELOPMENT.value

    @classmethod
    def is_testing(cls) -> bool:
        return cls.ENVIRONMENT == Environment.TESTING.value

    @classmethod
    def get_metrics(cls) -> Dict[str, Any]:
        return {**cls._env.summary(), "problems": dict(cls._env.problems)}

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        return {
            "environment": cls.ENVIRONMENT,
            "debug": cls.DEBUG,
            "log_level": cls.LOG_LEVEL,
            "log_to_file": cls.LOG_TO_FILE,
            "logs_dir": str(cls.LOGS_DIR),
            "config_dir": str(cls.CONFIG_DIR),
        }


Config.load()
