"""
Event log context helpers for the Bloodcraft EventBus.

While an event is dispatched, the publishing task's log context carries the
event name, the payload keys and, when present, the payload's `player_id`,
so listener log lines can be traced back to the player that triggered them.
Only keys are recorded, never values.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from bloodcraft.core.logging.logger import reset_log_context, set_log_context


@contextmanager
def apply_event_log_context(event_name: str, payload: dict[str, Any]) -> Iterator[None]:
    """
    Bind event fields to the log context for the duration of a dispatch.

    Background listeners started inside the block inherit the fields.

    Examples
    --------
    >>> with apply_event_log_context("leveling.level_changed", {"player_id": 7}):
    ...     await scheduler.execute(...)
    """
    player_id = payload.get("player_id")
    token = set_log_context(
        player_id=player_id if isinstance(player_id, int) else None,
        event_name=event_name,
        event_keys=sorted(payload.keys()),
    )
    try:
        yield
    finally:
        reset_log_context(token)
