"""
Types shared by the EventBus, its registry and its scheduler.

Listener tiers, from first to last:

- CRITICAL: one at a time, awaited, cut off after the critical timeout
- HIGH:     one at a time, awaited, cut off after the high timeout
- NORMAL:   together via asyncio.gather, awaited
- LOW:      background tasks; the leveling log listeners live here
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

# e.g. {"player_id": 1, "old_level": 4, "new_level": 5}
EventPayload = dict[str, Any]

CallbackType = Union[
    Callable[[EventPayload], Any],
    Callable[[EventPayload], Awaitable[Any]],
]


class ListenerPriority(Enum):
    CRITICAL = 0
    HIGH = 10
    NORMAL = 50
    LOW = 100

    @property
    def is_sequential(self) -> bool:
        """CRITICAL and HIGH listeners run one after another under a timeout."""
        return self in (ListenerPriority.CRITICAL, ListenerPriority.HIGH)

    @property
    def is_background(self) -> bool:
        return self is ListenerPriority.LOW


def derive_identifier(event_name: str, callback: CallbackType) -> str:
    """
    Default listener id: `<module>.<qualname>@<event>`.

    >>> derive_identifier("leveling.level_changed", on_level_changed)
    'bloodcraft.modules.leveling.listeners.on_level_changed@leveling.level_changed'
    """
    module = getattr(callback, "__module__", None) or "unknown"
    name = getattr(callback, "__qualname__", None) or getattr(callback, "__name__", "callback")
    return f"{module}.{name}@{event_name}"


@dataclass(slots=True, frozen=True)
class EventListener:
    """
    A subscribed callback.

    `identifier` is what duplicates are detected by and what `unsubscribe()`
    takes. A `once` listener is dropped from the registry as soon as an
    event selects it.
    """

    callback: CallbackType
    priority: ListenerPriority
    identifier: str
    once: bool = False

    @classmethod
    def from_callback(
        cls,
        event_name: str,
        callback: CallbackType,
        priority: ListenerPriority,
        identifier: Optional[str],
        once: bool,
    ) -> EventListener:
        return cls(
            callback=callback,
            priority=priority,
            identifier=identifier or derive_identifier(event_name, callback),
            once=once,
        )
