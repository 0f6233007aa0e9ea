"""
Bloodcraft Logging Subsystem

Purpose
-------
Structured, non-blocking logging for the leveling core. Kill processing
fans out into concurrent award tasks, so every record carries the player,
operation and correlation id of the task that wrote it.

Pieces
------
- `_log_context` ContextVar holding the per-task fields, managed through
  `LogContext` / `set_log_context` / `reset_log_context`.
- `ContextFilter` copies those fields onto each record.
- `JSONFormatter` (production, file) and `ColoredFormatter` (dev console).
- A bounded queue between the caller and the real handlers: the caller only
  does a `put_nowait`, a `QueueListener` thread does the I/O. A full queue
  drops the record and counts it instead of blocking the game thread.

Importing this module installs nothing. The host calls `setup_logging()`
once at startup and `shutdown_logging()` on unload.

Settings come from the static `Config` (LOG_LEVEL, LOG_JSON, LOG_COLORS,
LOG_TO_FILE, LOGS_DIR).
"""

from __future__ import annotations

import json
import logging
import queue
import sys
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from logging import Logger
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from bloodcraft.core.config.config import Config

_log_context: ContextVar[Dict[str, Any]] = ContextVar("bloodcraft_log_context", default={})

_INITIALIZED_FLAG = "_bloodcraft_logging_initialized"
_UNSET = "N/A"

# ============================================================================
# Settings
# ============================================================================


@dataclass(frozen=True, slots=True)
class LoggerConfig:
    """Resolved logging settings; build with `LoggerConfig.from_config()`."""

    level: int = logging.INFO
    environment: str = "development"
    use_json: bool = False
    use_colors: bool = False
    log_to_file: bool = False
    logs_dir: Path = Path("logs")

    console_format: str = "%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_name: str = "bloodcraft_daily.json.log"
    file_backup_count: int = 1
    queue_max_size: int = 10_000

    @classmethod
    def from_config(cls) -> LoggerConfig:
        production = Config.is_production()
        use_json = production if Config.LOG_JSON is None else bool(Config.LOG_JSON)
        return cls(
            level=logging.getLevelName(Config.LOG_LEVEL) if Config.LOG_LEVEL else logging.INFO,
            environment=Config.ENVIRONMENT,
            use_json=use_json,
            use_colors=not use_json and Config.LOG_COLORS and sys.stdout.isatty(),
            log_to_file=Config.LOG_TO_FILE,
            logs_dir=Path(Config.LOGS_DIR).resolve(),
        )


# ============================================================================
# Health
# ============================================================================


@dataclass(frozen=True, slots=True)
class LoggingHealth:
    initialized: bool
    queue_size: int
    queue_max_size: int
    records_enqueued: int
    records_dropped: int
    listener_errors: int


class _QueueCounters:
    __slots__ = ("enqueued", "dropped", "handler_errors")

    def __init__(self) -> None:
        self.enqueued = 0
        self.dropped = 0
        self.handler_errors = 0


_counters = _QueueCounters()
_log_queue: Optional["queue.Queue[logging.LogRecord]"] = None
_queue_listener: Optional[QueueListener] = None


# ============================================================================
# Filters & Formatters
# ============================================================================

CONTEXT_FIELDS = ("player_id", "operation", "correlation_id", "component")

# Attributes every LogRecord has; anything else came in through `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class ContextFilter(logging.Filter):
    """Fill context fields the caller did not pass through `extra=`."""

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        context = _log_context.get({})
        fallback = {
            "player_id": context.get("player_id", _UNSET),
            "operation": context.get("operation", _UNSET),
            "correlation_id": context.get("correlation_id") or _UNSET,
            "component": context.get("component") or record.name.partition(".")[0],
        }
        for name, value in fallback.items():
            if getattr(record, name, None) is None:
                setattr(record, name, value)
        return True


class ColoredFormatter(logging.Formatter):
    RESET = "\033[0m"
    LEVEL_COLORS: Dict[int, str] = {
        logging.DEBUG: "\033[90m",
        logging.INFO: "\033[94m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[1;91m",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Context fields are top-level when set; everything passed via `extra=`
    is nested under "extra".
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None and value != _UNSET:
                data[name] = value

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and key not in CONTEXT_FIELDS and not key.startswith("_")
        }
        if extra:
            data["extra"] = extra

        return json.dumps(data, ensure_ascii=False, default=str)


# ============================================================================
# Queue plumbing
# ============================================================================


class BloodcraftQueueHandler(QueueHandler):
    def enqueue(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _counters.enqueued += 1
        try:
            self.queue.put_nowait(record)
        except queue.Full:
            _counters.dropped += 1
            sys.stderr.write("Bloodcraft logging queue full; dropping log record.\n")


class BloodcraftQueueListener(QueueListener):
    def handleError(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        _counters.handler_errors += 1
        sys.stderr.write("Bloodcraft logging handler error while processing record.\n")


def _build_handlers(settings: LoggerConfig) -> List[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    if settings.use_json:
        console.setFormatter(JSONFormatter())
    else:
        formatter_cls = ColoredFormatter if settings.use_colors else logging.Formatter
        console.setFormatter(formatter_cls(fmt=settings.console_format, datefmt=settings.date_format))
    handlers: List[logging.Handler] = [console]

    if settings.log_to_file:
        settings.logs_dir.mkdir(parents=True, exist_ok=True)
        daily = TimedRotatingFileHandler(
            filename=str(settings.logs_dir / settings.file_name),
            when="midnight",
            backupCount=settings.file_backup_count,
            encoding="utf-8",
            utc=True,
        )
        daily.setFormatter(JSONFormatter())
        handlers.append(daily)

    for handler in handlers:
        handler.setLevel(settings.level)
    return handlers


# ============================================================================
# Setup / Teardown
# ============================================================================


def setup_logging(settings: Optional[LoggerConfig] = None) -> None:
    """Route the root logger through the bounded queue. Safe to call twice."""
    global _counters, _log_queue, _queue_listener

    root = logging.getLogger()
    if getattr(root, _INITIALIZED_FLAG, False):
        return

    settings = settings or LoggerConfig.from_config()
    _counters = _QueueCounters()
    _log_queue = queue.Queue(settings.queue_max_size)

    _queue_listener = BloodcraftQueueListener(
        _log_queue, *_build_handlers(settings), respect_handler_level=True
    )
    _queue_listener.start()

    # Root logger filters never see records propagated from child loggers.
    queue_handler = BloodcraftQueueHandler(_log_queue)
    queue_handler.setLevel(settings.level)
    queue_handler.addFilter(ContextFilter())

    root.handlers.clear()
    root.filters.clear()
    root.setLevel(settings.level)
    root.addHandler(queue_handler)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    setattr(root, _INITIALIZED_FLAG, True)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={
            "environment": settings.environment,
            "log_level": logging.getLevelName(settings.level),
            "json": settings.use_json,
            "log_to_file": settings.log_to_file,
            "logs_dir": str(settings.logs_dir),
        },
    )


def shutdown_logging() -> None:
    """Flush the queue, then close and detach every root handler."""
    global _log_queue, _queue_listener

    root = logging.getLogger()
    if not getattr(root, _INITIALIZED_FLAG, False):
        return

    log = logging.getLogger(__name__)
    log.info("Shutting down logging subsystem.")

    listener, _queue_listener = _queue_listener, None
    if listener is not None:
        try:
            listener.stop()
        except Exception:
            log.exception("Error while stopping logging queue listener.")

    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.flush()
            handler.close()
        except Exception:
            log.exception("Error while closing logging handler.")

    setattr(root, _INITIALIZED_FLAG, False)
    _log_queue = None


def get_logging_health() -> LoggingHealth:
    q = _log_queue
    return LoggingHealth(
        initialized=bool(getattr(logging.getLogger(), _INITIALIZED_FLAG, False)),
        queue_size=q.qsize() if q is not None else 0,
        queue_max_size=q.maxsize if q is not None else 0,
        records_enqueued=_counters.enqueued,
        records_dropped=_counters.dropped,
        listener_errors=_counters.handler_errors,
    )


# ============================================================================
# Public API
# ============================================================================


def get_logger(name: str) -> Logger:
    return logging.getLogger(name)


def get_log_context() -> Dict[str, Any]:
    """Copy of the fields bound to the current task."""
    return dict(_log_context.get({}))


def _context_fields(
    player_id: Optional[int],
    operation: Optional[str],
    component: Optional[str],
    correlation_id: Optional[str],
    extra: Dict[str, Any],
) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if player_id is not None:
        fields["player_id"] = str(player_id)
    if operation is not None:
        fields["operation"] = operation
    if component is not None:
        fields["component"] = component
    if correlation_id:
        fields["correlation_id"] = correlation_id
    fields.update(extra)
    return fields


class LogContext:
    """
    Bind player/operation fields to every log line written inside a block.

    Usable with `with` and `async with`. Replaces the enclosing context for
    the duration of the block; a fresh 8-character correlation id is made
    when none is given.

    >>> async with LogContext(player_id=76561198000000001, operation="process_kill"):
    ...     await processor.process_kill(10, 200.0, False, [76561198000000001])
    """

    def __init__(
        self,
        player_id: Optional[int] = None,
        operation: Optional[str] = None,
        component: Optional[str] = None,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> None:
        self.context: Dict[str, Any] = {
            "player_id": _UNSET,
            "operation": _UNSET,
            "correlation_id": uuid.uuid4().hex[:8],
            **_context_fields(player_id, operation, component, correlation_id, extra),
        }
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> LogContext:
        self._token = _log_context.set(self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)


def set_log_context(
    player_id: Optional[int] = None,
    operation: Optional[str] = None,
    component: Optional[str] = None,
    correlation_id: Optional[str] = None,
    **extra: Any,
) -> Token[Dict[str, Any]]:
    """Merge fields into the current context; undo with `reset_log_context()`."""
    merged = {
        **_log_context.get({}),
        **_context_fields(player_id, operation, component, correlation_id, extra),
    }
    return _log_context.set(merged)


def reset_log_context(token: Token[Dict[str, Any]]) -> None:
    _log_context.reset(token)


def clear_log_context() -> None:
    _log_context.set({})
