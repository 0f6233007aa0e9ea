"""
Publish, error and timeout counters for the Bloodcraft EventBus.

One `EventMetricsRecorder` belongs to one bus and is only touched from the
event loop. `snapshot()` freezes the counters into an `EventMetrics`.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EventMetrics:
    """
    Point-in-time bus counters.

    Timeouts are counted apart from errors; a listener that times out adds
    to `listener_timeouts` only.

    >>> EventMetrics(
    ...     events_published={"leveling.experience_gained": 50},
    ...     listener_errors={"leveling.experience_gained": 1},
    ... ).get_summary()["failure_rate"]
    2.0
    """

    events_published: dict[str, int] = field(default_factory=dict)
    listener_errors: dict[str, int] = field(default_factory=dict)
    listener_timeouts: dict[str, int] = field(default_factory=dict)
    total_listeners: int = 0

    def get_summary(self) -> dict[str, Any]:
        published = sum(self.events_published.values())
        errors = sum(self.listener_errors.values())
        timeouts = sum(self.listener_timeouts.values())

        return {
            "total_events_published": published,
            "events_by_type": dict(self.events_published),
            "total_errors": errors,
            "total_timeouts": timeouts,
            "failures_by_event": dict(
                Counter(self.listener_errors) + Counter(self.listener_timeouts)
            ),
            "total_listeners": self.total_listeners,
            "failure_rate": round((errors + timeouts) * 100.0 / max(1, published), 2),
        }


class EventMetricsRecorder:
    def __init__(self) -> None:
        self._published: Counter[str] = Counter()
        self._errors: Counter[str] = Counter()
        self._timeouts: Counter[str] = Counter()
        self._listeners = 0

    @property
    def total_listeners(self) -> int:
        return self._listeners

    def record_publish(self, event_name: str) -> None:
        self._published[event_name] += 1

    def record_error(self, event_name: str) -> None:
        self._errors[event_name] += 1

    def record_timeout(self, event_name: str) -> None:
        self._timeouts[event_name] += 1

    def listener_added(self) -> None:
        self._listeners += 1

    def listener_removed(self, count: int = 1) -> None:
        self._listeners = max(0, self._listeners - count)

    def snapshot(self) -> EventMetrics:
        return EventMetrics(
            events_published=dict(self._published),
            listener_errors=dict(self._errors),
            listener_timeouts=dict(self._timeouts),
            total_listeners=self._listeners,
        )
