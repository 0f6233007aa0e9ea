"""
ListenerRegistry: storage and lookup for EventBus listeners.

Purpose
-------
Stores listeners for exact event names and wildcard patterns, and returns
the ordered set of listeners for a published event.

Design Decisions
----------------
- Synchronous: dictionary mutations are atomic between awaits on a single
  event loop, so no locking is needed.
- Deterministic ordering by (priority, identifier).
- `extract_listeners_for_event()` prunes once=True listeners in the same
  step that returns them, so a one-shot listener fires at most once even
  when publishes overlap.
"""

from __future__ import annotations

from bloodcraft.core.event.router import EventRouter
from bloodcraft.core.event.types import EventListener


def _sort_key(listener: EventListener) -> tuple[int, str]:
    return (listener.priority.value, listener.identifier)


class ListenerRegistry:
    """
    Registry for exact and wildcard listeners.

    Examples
    --------
    >>> registry = ListenerRegistry()
    >>> registry.add_listener("leveling.level_changed", listener, allow_duplicates=False)
    True
    >>> len(registry.extract_listeners_for_event("leveling.level_changed"))
    1
    """

    def __init__(self, router: EventRouter | None = None) -> None:
        self._router = router or EventRouter()
        self._listeners: dict[str, list[EventListener]] = {}
        self._wildcard_listeners: list[tuple[str, EventListener]] = []

    # ------------------------------------------------------------------ #
    # Modification
    # ------------------------------------------------------------------ #

    def add_listener(
        self,
        event_name: str,
        listener: EventListener,
        *,
        allow_duplicates: bool,
    ) -> bool:
        """
        Register a listener; returns False if prevented as a duplicate.

        A duplicate is the same identifier on the same event name or pattern.
        """
        if "*" in event_name:
            if not allow_duplicates and any(
                existing.identifier == listener.identifier
                for pattern, existing in self._wildcard_listeners
                if pattern == event_name
            ):
                return False

            self._wildcard_listeners.append((event_name, listener))
            self._wildcard_listeners.sort(key=lambda pl: _sort_key(pl[1]))
            return True

        listeners = self._listeners.setdefault(event_name, [])

        if not allow_duplicates and any(
            existing.identifier == listener.identifier for existing in listeners
        ):
            return False

        listeners.append(listener)
        listeners.sort(key=_sort_key)
        return True

    def remove_listener(self, event_name: str, identifier: str) -> bool:
        """Remove a listener by identifier; True if anything was removed."""
        removed = False

        if event_name in self._listeners:
            before = len(self._listeners[event_name])
            remaining = [
                lst for lst in self._listeners[event_name] if lst.identifier != identifier
            ]
            removed = len(remaining) < before
            if remaining:
                self._listeners[event_name] = remaining
            else:
                del self._listeners[event_name]

        before_wc = len(self._wildcard_listeners)
        self._wildcard_listeners = [
            (pattern, lst)
            for pattern, lst in self._wildcard_listeners
            if not (pattern == event_name and lst.identifier == identifier)
        ]

        return removed or len(self._wildcard_listeners) < before_wc

    def clear_all(self) -> int:
        """Remove every listener and return how many there were."""
        total = self.get_total_listener_count()
        self._listeners.clear()
        self._wildcard_listeners.clear()
        return total

    # ------------------------------------------------------------------ #
    # Lookup & Once-Removal
    # ------------------------------------------------------------------ #

    def extract_listeners_for_event(self, event_name: str) -> list[EventListener]:
        """
        Collect exact + matching wildcard listeners and prune once=True ones.

        Returns listeners sorted by (priority, identifier).
        """
        result: list[EventListener] = list(self._listeners.get(event_name, []))

        kept_exact = [lst for lst in result if not lst.once]
        if kept_exact:
            self._listeners[event_name] = kept_exact
        else:
            self._listeners.pop(event_name, None)

        kept_wildcards: list[tuple[str, EventListener]] = []
        for pattern, listener in self._wildcard_listeners:
            if self._router.matches(event_name, pattern):
                result.append(listener)
                if listener.once:
                    continue
            kept_wildcards.append((pattern, listener))
        self._wildcard_listeners = kept_wildcards

        result.sort(key=_sort_key)
        return result

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def get_listener_count_for_event(self, event_name: str) -> int:
        count = len(self._listeners.get(event_name, []))
        count += sum(
            1
            for pattern, _ in self._wildcard_listeners
            if self._router.matches(event_name, pattern)
        )
        return count

    def get_total_listener_count(self) -> int:
        total = sum(len(listeners) for listeners in self._listeners.values())
        return total + len(self._wildcard_listeners)

    def get_all_event_keys(self) -> list[str]:
        keys: list[str] = list(self._listeners.keys())
        keys.extend(pattern for pattern, _ in self._wildcard_listeners)
        return sorted(set(keys))
