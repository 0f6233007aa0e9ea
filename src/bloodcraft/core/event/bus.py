"""
Bloodcraft EventBus: async pub/sub with tiered concurrency.

Purpose
-------
The outbound channel of the leveling core. The store publishes
`leveling.experience_gained` and `leveling.level_changed`; the config
manager publishes `config.updated`. Presentation, logging and host code
subscribe here rather than being called directly.

Notes
-----
- Listeners subscribe to exact names or `*` patterns (see `router`).
- How each priority tier runs is the scheduler's business; the bus only
  hands it the sorted listeners and the CRITICAL/HIGH timeouts.
- Timeouts come from `core.event.listener_timeout.*` when the bus is built.
  Explicit constructor arguments win.
- A listener failure is logged and counted, never raised to the publisher.
- Single event loop. Registry changes happen between awaits.
"""

from __future__ import annotations

import inspect
from typing import Any, Optional

from bloodcraft.core.config.manager import ConfigManager
from bloodcraft.core.event.context import apply_event_log_context
from bloodcraft.core.event.metrics import EventMetrics, EventMetricsRecorder
from bloodcraft.core.event.registry import ListenerRegistry
from bloodcraft.core.event.scheduler import EventScheduler
from bloodcraft.core.event.types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)
from bloodcraft.core.logging.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LISTENER_TIMEOUT_SECONDS = 5.0

_TIMEOUT_KEYS = {
    ListenerPriority.CRITICAL: "core.event.listener_timeout.critical_seconds",
    ListenerPriority.HIGH: "core.event.listener_timeout.high_seconds",
}


def _callback_name(callback: CallbackType) -> str:
    return getattr(callback, "__qualname__", None) or getattr(callback, "__name__", repr(callback))


def _check_single_argument(callback: CallbackType) -> None:
    """Raise ValueError unless `callback(payload)` binds."""
    try:
        signature = inspect.signature(callback)
    except (TypeError, ValueError):
        # No introspectable signature (some builtins); accept it.
        return

    try:
        signature.bind(None)
    except TypeError as exc:
        raise ValueError(
            f"Event listener '{_callback_name(callback)}' must take exactly one "
            f"argument, the event payload"
        ) from exc


class EventBus:
    """
    Async publish/subscribe hub.

    >>> bus = EventBus(config_manager=config_manager)
    >>> bus.subscribe("leveling.*", log_leveling_event, priority=ListenerPriority.LOW)
    >>> await bus.publish("leveling.level_changed", {"player_id": 1, "old_level": 4, "new_level": 5})
    """

    def __init__(
        self,
        registry: Optional[ListenerRegistry] = None,
        scheduler: Optional[EventScheduler] = None,
        metrics: Optional[EventMetricsRecorder] = None,
        config_manager: Optional[ConfigManager] = None,
        *,
        enable_metrics: bool = True,
        critical_timeout_seconds: Optional[float] = None,
        high_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._config_manager = config_manager
        self._registry = registry or ListenerRegistry()
        self._scheduler = scheduler or EventScheduler()
        self._metrics: Optional[EventMetricsRecorder] = (
            (metrics or EventMetricsRecorder()) if enable_metrics else None
        )
        self._timeouts = {
            ListenerPriority.CRITICAL: self._resolve_timeout(
                ListenerPriority.CRITICAL, critical_timeout_seconds
            ),
            ListenerPriority.HIGH: self._resolve_timeout(
                ListenerPriority.HIGH, high_timeout_seconds
            ),
        }

        logger.debug(
            "EventBus initialized",
            extra={
                "metrics_enabled": self._metrics is not None,
                "critical_timeout_seconds": self.critical_timeout,
                "high_timeout_seconds": self.high_timeout,
            },
        )

    def _resolve_timeout(self, tier: ListenerPriority, override: Optional[float]) -> float:
        if override is not None:
            return float(override)
        if self._config_manager is None:
            return DEFAULT_LISTENER_TIMEOUT_SECONDS

        key = _TIMEOUT_KEYS[tier]
        value = self._config_manager.get(key, DEFAULT_LISTENER_TIMEOUT_SECONDS)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(
                "Invalid listener timeout in config, using default",
                extra={
                    "config_key": key,
                    "value": repr(value),
                    "default_value": DEFAULT_LISTENER_TIMEOUT_SECONDS,
                },
            )
            return DEFAULT_LISTENER_TIMEOUT_SECONDS

    @property
    def critical_timeout(self) -> float:
        return self._timeouts[ListenerPriority.CRITICAL]

    @property
    def high_timeout(self) -> float:
        return self._timeouts[ListenerPriority.HIGH]

    # ------------------------------------------------------------------ #
    # Subscriptions
    # ------------------------------------------------------------------ #

    def subscribe(
        self,
        event_name: str,
        callback: CallbackType,
        *,
        priority: ListenerPriority = ListenerPriority.NORMAL,
        identifier: Optional[str] = None,
        once: bool = False,
        allow_duplicates: bool = False,
    ) -> str:
        """
        Register `callback` for an event name or `*` pattern.

        Returns the listener identifier to pass to `unsubscribe()`. A second
        subscription with the same identifier is ignored unless
        `allow_duplicates` is set.

        Raises
        ------
        ValueError
            If `callback` cannot be called with a single payload argument.
        """
        _check_single_argument(callback)

        listener = EventListener.from_callback(
            event_name=event_name,
            callback=callback,
            priority=priority,
            identifier=identifier,
            once=once,
        )
        fields = {"event_name": event_name, "listener_id": listener.identifier}

        if not self._registry.add_listener(
            event_name=event_name, listener=listener, allow_duplicates=allow_duplicates
        ):
            logger.warning("EventBus: duplicate listener prevented", extra=fields)
            return listener.identifier

        if self._metrics is not None:
            self._metrics.listener_added()
        logger.debug(
            "EventBus: subscribed listener",
            extra={**fields, "priority": priority.name, "once": once},
        )
        return listener.identifier

    def unsubscribe(self, event_name: str, identifier: str) -> bool:
        """True if a listener was removed."""
        if not self._registry.remove_listener(event_name=event_name, identifier=identifier):
            return False

        if self._metrics is not None:
            self._metrics.listener_removed()
        logger.debug(
            "EventBus: unsubscribed listener",
            extra={"event_name": event_name, "listener_id": identifier},
        )
        return True

    def clear(self) -> None:
        removed = self._registry.clear_all()
        if self._metrics is not None:
            self._metrics.listener_removed(removed)
        logger.info("EventBus: cleared all listeners", extra={"previous_listener_count": removed})

    # ------------------------------------------------------------------ #
    # Publishing
    # ------------------------------------------------------------------ #

    async def publish(self, event_name: str, data: EventPayload) -> list[Any]:
        """
        Deliver `data` to every listener matching `event_name`.

        Returns the results of CRITICAL, HIGH and NORMAL listeners in run
        order, None for any that failed or timed out. LOW listeners run in
        the background and contribute nothing.
        """
        listeners = self._registry.extract_listeners_for_event(event_name=event_name)

        if self._metrics is not None:
            self._metrics.record_publish(event_name)
            self._metrics.listener_removed(sum(1 for lst in listeners if lst.once))

        if not listeners:
            logger.debug("EventBus: no listeners for event", extra={"event_name": event_name})
            return []

        with apply_event_log_context(event_name, data):
            logger.debug(
                "EventBus: publishing event",
                extra={"event_name": event_name, "listener_count": len(listeners)},
            )
            return await self._scheduler.execute(
                event_name=event_name,
                payload=data,
                listeners=listeners,
                metrics=self._metrics,
                logger=logger,
                timeouts=self._timeouts,
            )

    async def drain(self, timeout: Optional[float] = None) -> int:
        """Wait for background (LOW) listeners; returns how many finished."""
        return await self._scheduler.drain(timeout=timeout)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_metrics(self) -> Optional[EventMetrics]:
        """Frozen counters, or None when metrics are disabled."""
        return self._metrics.snapshot() if self._metrics is not None else None

    def get_metrics_summary(self) -> dict[str, Any]:
        metrics = self.get_metrics()
        return metrics.get_summary() if metrics is not None else {}

    def get_listener_count(self, event_name: Optional[str] = None) -> int:
        """Listeners `event_name` would reach (wildcards included), or the total."""
        if event_name:
            return self._registry.get_listener_count_for_event(event_name)
        return self._registry.get_total_listener_count()

    def get_all_events(self) -> list[str]:
        """Sorted event names and wildcard patterns with listeners."""
        return self._registry.get_all_event_keys()

    def get_background_task_count(self) -> int:
        return self._scheduler.get_background_task_count()
