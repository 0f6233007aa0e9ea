"""
EventScheduler: runs one event's listeners tier by tier.

- CRITICAL, HIGH: one at a time in priority order, each cut off after its
  tier's timeout (no limit when the timeout is None or <= 0)
- NORMAL: all at once via asyncio.gather
- LOW: spawned as background tasks and not awaited; `drain()` waits for
  them at shutdown and in tests

Each listener is isolated: an exception or timeout is reported through
`errors` and turns into a None result. Sync callbacks run in the default
executor so a slow one does not stall the event loop.
"""

from __future__ import annotations

import asyncio
import inspect
from logging import Logger
from typing import Any, Mapping, Optional

from bloodcraft.core.event.errors import handle_listener_error, handle_listener_timeout
from bloodcraft.core.event.metrics import EventMetricsRecorder
from bloodcraft.core.event.types import EventListener, EventPayload, ListenerPriority


class EventScheduler:
    def __init__(self) -> None:
        self._background_tasks: set[asyncio.Task[Any]] = set()

    async def execute(
        self,
        *,
        event_name: str,
        payload: EventPayload,
        listeners: list[EventListener],
        metrics: Optional[EventMetricsRecorder],
        logger: Logger,
        timeouts: Mapping[ListenerPriority, Optional[float]],
    ) -> list[Any]:
        """
        Run `listeners`, which the registry has already sorted by priority.

        Returns CRITICAL, HIGH and NORMAL results in run order.
        """

        def invoke(listener: EventListener):
            return self._run_listener(
                listener=listener,
                event_name=event_name,
                payload=payload,
                metrics=metrics,
                logger=logger,
            )

        results: list[Any] = []

        for listener in listeners:
            if not listener.priority.is_sequential:
                continue
            timeout = timeouts.get(listener.priority)
            if timeout is None or timeout <= 0:
                results.append(await invoke(listener))
                continue
            try:
                results.append(await asyncio.wait_for(invoke(listener), timeout=timeout))
            except asyncio.TimeoutError:
                handle_listener_timeout(
                    logger=logger,
                    event_name=event_name,
                    listener=listener,
                    timeout=timeout,
                    metrics=metrics,
                )
                results.append(None)

        concurrent = [lst for lst in listeners if lst.priority is ListenerPriority.NORMAL]
        if concurrent:
            results.extend(await asyncio.gather(*(invoke(lst) for lst in concurrent)))

        background = [lst for lst in listeners if lst.priority.is_background]
        if background:
            loop = asyncio.get_running_loop()
            for listener in background:
                task = loop.create_task(
                    invoke(listener),
                    name=f"eventbus-low-{event_name}-{listener.identifier}",
                )
                self._background_tasks.add(task)
                task.add_done_callback(self._background_tasks.discard)

        return results

    async def _run_listener(
        self,
        *,
        listener: EventListener,
        event_name: str,
        payload: EventPayload,
        metrics: Optional[EventMetricsRecorder],
        logger: Logger,
    ) -> Any:
        logger.debug(
            "EventBus: executing listener",
            extra={
                "event_name": event_name,
                "listener_id": listener.identifier,
                "priority": listener.priority.name,
            },
        )
        try:
            if inspect.iscoroutinefunction(listener.callback):
                return await listener.callback(payload)

            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, listener.callback, payload)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as exc:
            handle_listener_error(
                logger=logger,
                event_name=event_name,
                listener=listener,
                exc=exc,
                metrics=metrics,
            )
            return None

    async def drain(self, timeout: Optional[float] = None) -> int:
        """
        Wait for outstanding background tasks, including any they spawn.

        Returns how many finished. Tasks still running after `timeout`
        seconds are left alone.
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        finished = 0

        while self._background_tasks:
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            done, _ = await asyncio.wait(set(self._background_tasks), timeout=remaining)
            if not done:
                break
            finished += len(done)
            self._background_tasks.difference_update(done)

        return finished

    def get_background_task_count(self) -> int:
        return len(self._background_tasks)
