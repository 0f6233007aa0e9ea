"""
EventRouter: wildcard event-name matching.

Supported Patterns
------------------
- Exact:    "leveling.level_changed" matches only itself
- Global:   "*" matches any event
- Prefix:   "leveling.*" matches "leveling.experience_gained", ...
- Suffix:   "*.updated" matches "config.updated", ...
- Sandwich: "leveling.*.changed" matches "leveling.title.changed", ...

Matching is case-sensitive. Repeated wildcards ("**") collapse to one.
"""

from __future__ import annotations


class EventRouter:
    """
    Stateless wildcard matcher.

    Examples
    --------
    >>> router = EventRouter()
    >>> router.matches("leveling.level_changed", "leveling.*")
    True
    >>> router.matches("leveling.level_changed", "config.*")
    False
    >>> router.matches("anything", "*")
    True
    """

    def matches(self, event_name: str, pattern: str) -> bool:
        """Return True if `event_name` matches `pattern`."""
        if pattern == "*":
            return True

        if "*" not in pattern:
            return event_name == pattern

        while "**" in pattern:
            pattern = pattern.replace("**", "*")

        parts = pattern.split("*")
        prefix, suffix = parts[0], parts[-1]

        if prefix and not event_name.startswith(prefix):
            return False

        if suffix and not event_name.endswith(suffix):
            return False

        # Prefix and suffix must not overlap.
        if len(prefix) + len(suffix) > len(event_name):
            return False

        idx = len(prefix)
        end = len(event_name) - len(suffix)
        for mid in parts[1:-1]:
            if not mid:
                continue
            next_idx = event_name.find(mid, idx, end)
            if next_idx == -1:
                return False
            idx = next_idx + len(mid)

        return True
