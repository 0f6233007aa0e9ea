"""
Failure reporting for EventBus listeners.

A failing or slow listener is logged and counted, and its result becomes
None. Nothing here raises back into `publish()`.
"""

from __future__ import annotations

from logging import Logger
from typing import Any, Dict, Optional

from bloodcraft.core.event.metrics import EventMetricsRecorder
from bloodcraft.core.event.types import EventListener


def _listener_fields(event_name: str, listener: EventListener) -> Dict[str, Any]:
    return {
        "event_name": event_name,
        "listener_id": listener.identifier,
        "priority": listener.priority.name,
    }


def handle_listener_error(
    *,
    logger: Logger,
    event_name: str,
    listener: EventListener,
    exc: BaseException,
    metrics: Optional[EventMetricsRecorder],
) -> None:
    """
    Report a listener that raised.

    Call from inside the `except` block; the record carries the active
    traceback.
    """
    if metrics is not None:
        metrics.record_error(event_name)

    logger.error(
        "EventBus listener error",
        extra={
            **_listener_fields(event_name, listener),
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
        exc_info=True,
    )


def handle_listener_timeout(
    *,
    logger: Logger,
    event_name: str,
    listener: EventListener,
    timeout: float,
    metrics: Optional[EventMetricsRecorder],
) -> None:
    """Report a CRITICAL/HIGH listener cancelled after `timeout` seconds."""
    if metrics is not None:
        metrics.record_timeout(event_name)

    logger.error(
        "EventBus listener timeout",
        extra={**_listener_fields(event_name, listener), "timeout_seconds": timeout},
    )
