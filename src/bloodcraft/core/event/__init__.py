"""
Event system for Bloodcraft.

Provides the EventBus plus a process-wide instance (`event_bus`) wired to
the default ConfigManager for listener timeouts.
"""

from bloodcraft.core.config.manager import config_manager

from .bus import EventBus
from .context import apply_event_log_context
from .metrics import EventMetrics
from .types import (
    CallbackType,
    EventListener,
    EventPayload,
    ListenerPriority,
)

# Global runtime EventBus
event_bus = EventBus(config_manager=config_manager)

__all__ = [
    "event_bus",
    "EventBus",
    "EventMetrics",
    "EventPayload",
    "ListenerPriority",
    "EventListener",
    "CallbackType",
    "apply_event_log_context",
]
